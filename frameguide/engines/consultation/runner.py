"""Consult subprocess supervisor — spawn, stream, time out, kill the group."""

from __future__ import annotations

import asyncio
import os
import signal
import subprocess
import tempfile
from pathlib import Path

import structlog

from frameguide.core.config import ProviderConfig
from frameguide.engines.consultation.markers import GuidanceCollector, has_citation
from frameguide.exceptions import ConsultationError, FailureKind

log = structlog.get_logger("frameguide.engine")

STREAM_LIMIT = 1 << 20  # longest single output line we will buffer
REAP_TIMEOUT = 5.0


def build_provider_args(provider: ProviderConfig, prompt: str) -> tuple[list[str], Path | None]:
    """Return ``(args, prompt_file)`` for *provider*'s prompt mode.

    ``stdin`` leaves the args alone, ``arg`` appends the prompt and ``file``
    writes it to a temp file and appends the path (each after the optional
    prompt flag). The caller removes *prompt_file*.
    """
    args = list(provider.args or [])
    prompt_file: Path | None = None

    if provider.prompt_mode == "arg":
        if provider.prompt_flag:
            args.append(provider.prompt_flag)
        args.append(prompt)
    elif provider.prompt_mode == "file":
        fd, name = tempfile.mkstemp(prefix="frameguide-prompt-", suffix=".md")
        prompt_file = Path(name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(prompt)
        except OSError:
            prompt_file.unlink(missing_ok=True)
            raise
        if provider.prompt_flag:
            args.append(provider.prompt_flag)
        args.append(str(prompt_file))

    return args, prompt_file


async def run_consult_subprocess(
    provider: ProviderConfig,
    prompt: str,
    timeout: float,
    cwd: Path | None = None,
) -> str:
    """Run one consultation and return the trimmed, citation-bearing guidance.

    Raises :class:`ConsultationError` with kind ``TIMEOUT``, ``NO_MARKERS``,
    ``NO_CITATION`` or ``PROCESS_ERROR``.
    """
    try:
        args, prompt_file = build_provider_args(provider, prompt)
    except OSError as exc:
        raise ConsultationError(
            FailureKind.PROCESS_ERROR, f"failed to write prompt file: {exc}"
        ) from exc

    stdin_text = prompt if provider.prompt_mode == "stdin" else None
    try:
        collector = await _supervise(provider.command, args, stdin_text, timeout, cwd)
    finally:
        if prompt_file is not None:
            prompt_file.unlink(missing_ok=True)

    if not collector.complete:
        raise ConsultationError(
            FailureKind.NO_MARKERS,
            "consultation produced no guidance (missing GUIDANCE_START/GUIDANCE_END markers)",
        )
    guidance = collector.guidance
    if not has_citation(guidance):
        raise ConsultationError(
            FailureKind.NO_CITATION,
            "consultation produced no source citations",
        )
    return guidance


async def _supervise(
    command: str,
    args: list[str],
    stdin_text: str | None,
    timeout: float,
    cwd: Path | None,
) -> GuidanceCollector:
    kwargs: dict[str, object] = {}
    if os.name == "posix":
        kwargs["start_new_session"] = True
    else:
        kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP

    try:
        proc = await asyncio.create_subprocess_exec(
            command,
            *args,
            stdin=asyncio.subprocess.PIPE if stdin_text is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
            limit=STREAM_LIMIT,
            **kwargs,
        )
    except OSError as exc:
        raise ConsultationError(
            FailureKind.PROCESS_ERROR, f"failed to start {command}: {exc}"
        ) from exc

    collector = GuidanceCollector()
    feeder: asyncio.Task[None] | None = None
    if stdin_text is not None and proc.stdin is not None:
        feeder = asyncio.create_task(_feed_stdin(proc.stdin, stdin_text))

    try:
        await asyncio.wait_for(
            asyncio.gather(
                _pump(proc.stdout, collector),
                _pump(proc.stderr, collector),
                proc.wait(),
            ),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        _kill_group(proc)
        await _reap(proc)
        log.warning("consult.timeout", command=command, timeout=timeout, pid=proc.pid)
        raise ConsultationError(
            FailureKind.TIMEOUT, f"consult subprocess timed out after {timeout:g}s"
        ) from None
    except asyncio.CancelledError:
        _kill_group(proc)
        raise
    finally:
        if feeder is not None:
            feeder.cancel()

    if proc.returncode:
        log.debug("consult.nonzero_exit", command=command, returncode=proc.returncode)
    return collector


async def _feed_stdin(stdin: asyncio.StreamWriter, text: str) -> None:
    try:
        stdin.write(text.encode("utf-8"))
        await stdin.drain()
    except (BrokenPipeError, ConnectionResetError):
        # The provider exited without reading its prompt; its output decides.
        return
    finally:
        stdin.close()


async def _pump(stream: asyncio.StreamReader | None, collector: GuidanceCollector) -> None:
    if stream is None:
        return
    while True:
        try:
            raw = await stream.readline()
        except ValueError:
            # Line exceeded STREAM_LIMIT; the reader already discarded it.
            continue
        if not raw:
            return
        collector.feed(raw.decode("utf-8", errors="replace"))


def _kill_group(proc: asyncio.subprocess.Process) -> None:
    """SIGKILL the whole process group, including anything the provider forked."""
    if os.name == "posix":
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            pass
        return
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass


async def _reap(proc: asyncio.subprocess.Process) -> None:
    try:
        await asyncio.wait_for(proc.wait(), timeout=REAP_TIMEOUT)
    except asyncio.TimeoutError:
        log.warning("consult.reap_timeout", pid=proc.pid)
