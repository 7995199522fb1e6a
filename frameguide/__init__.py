"""frameguide — ground-truth framework guidance for coding agents."""

__version__ = "0.1.0"
