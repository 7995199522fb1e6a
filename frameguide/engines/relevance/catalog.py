"""Built-in relevance tables for well-known frameworks."""

from __future__ import annotations

# Resource name -> keywords that signal the framework is in play.
FRAMEWORK_KEYWORDS: dict[str, list[str]] = {
    # Frontend
    "next": [
        "next", "app router", "server action", "server component", "client component",
        "middleware", "layout", "page.tsx", "route handler", "api route",
        "getServerSideProps", "getStaticProps", "revalidate", "next/image",
        "next/link", "next/font", "ssr", "ssg",
    ],
    "react": [
        "react", "component", "hook", "useState", "useEffect", "useRef", "useContext",
        "jsx", "tsx", "props", "state", "render", "virtual dom", "context provider",
    ],
    "svelte": [
        "svelte", "sveltekit", "svelte component", "+page", "+layout", "+server",
        "$:", "reactive", "store", "action",
    ],
    "@sveltejs/kit": [
        "sveltekit", "kit", "+page", "+layout", "+server", "load function",
        "form action", "hooks",
    ],
    "vue": [
        "vue", "composition api", "options api", "ref", "reactive", "computed",
        "template", "directive", "v-model", "v-if", "v-for",
    ],
    "nuxt": [
        "nuxt", "nuxt3", "useFetch", "useAsyncData", "middleware", "plugin",
        "defineNuxtConfig", "server/api",
    ],
    "angular": [
        "angular", "component", "service", "module", "directive", "pipe",
        "injectable", "ngModule", "rxjs", "observable",
    ],
    # Styling
    "tailwindcss": [
        "tailwind", "className", "utility class", "responsive", "dark mode",
        "tailwind.config",
    ],
    # Backend JS/TS
    "hono": ["hono", "middleware", "route", "c.json", "c.text", "c.html"],
    "fastify": ["fastify", "route", "plugin", "schema", "hook", "decorator"],
    "express": ["express", "middleware", "router", "req", "res", "app.get", "app.post"],
    "koa": ["koa", "middleware", "ctx", "router"],
    # ORM / database
    "prisma": [
        "prisma", "schema.prisma", "prisma client", "migration", "model", "relation",
        "findMany", "findUnique", "create", "update", "delete", "upsert",
    ],
    "@prisma/client": ["prisma", "prisma client", "findMany", "findUnique", "create", "update"],
    "drizzle-orm": [
        "drizzle", "schema", "migration", "select", "insert", "table", "column",
        "relation", "pgTable", "sqliteTable",
    ],
    # Testing
    "vitest": ["vitest", "describe", "it(", "expect", "test(", "vi.mock", "vi.fn"],
    "playwright": ["playwright", "e2e", "page.goto", "page.click", "locator", "expect(page"],
    "@playwright/test": [
        "playwright", "e2e", "page.goto", "page.click", "locator", "expect(page",
    ],
    "jest": ["jest", "describe", "it(", "expect", "test(", "mock"],
    # Validation
    "zod": ["zod", "z.object", "z.string", "z.number", "parse", "safeParse", "schema validation"],
    # Build tools
    "vite": ["vite", "vite.config", "hmr", "plugin", "build"],
    "esbuild": ["esbuild", "bundle", "minify", "build"],
    "webpack": ["webpack", "loader", "plugin", "bundle", "webpack.config"],
    # State management
    "zustand": ["zustand", "create store", "useStore", "set", "get", "state management"],
    "jotai": ["jotai", "atom", "useAtom", "primitive atom"],
    # Elixir / Phoenix
    "phoenix": [
        "phoenix", "router", "controller", "view", "channel", "socket", "endpoint",
        "plug", "conn",
    ],
    "phoenix_live_view": [
        "live view", "liveview", "mount", "handle_event", "handle_info", "socket",
        "assign", "live_component",
    ],
    "ecto": [
        "ecto", "schema", "changeset", "migration", "repo", "query", "has_many",
        "belongs_to",
    ],
    "phoenix_html": ["phoenix html", "form", "input", "link", "heex", "sigil_H"],
    "absinthe": ["absinthe", "graphql", "query", "mutation", "resolver", "schema"],
    "oban": ["oban", "job", "worker", "queue", "perform", "schedule"],
    # Go
    "gin": ["gin", "router", "handler", "context", "middleware", "c.JSON", "c.Bind"],
    "echo": ["echo", "handler", "middleware", "context", "e.GET", "e.POST"],
    "fiber": ["fiber", "handler", "middleware", "c.JSON", "app.Get", "app.Post"],
    "chi": ["chi", "router", "handler", "middleware", "r.Get", "r.Post"],
}

# Work-unit tag -> resource names it makes candidates.
FRAMEWORK_TAG_MAP: dict[str, list[str]] = {
    "ui": [
        "next", "react", "svelte", "@sveltejs/kit", "vue", "nuxt", "angular",
        "tailwindcss", "phoenix_live_view",
    ],
    "db": ["prisma", "@prisma/client", "drizzle-orm", "ecto"],
    "api": ["express", "fastify", "hono", "koa", "gin", "echo", "fiber", "chi", "phoenix"],
    "test": ["vitest", "playwright", "@playwright/test", "jest"],
    "e2e": ["playwright", "@playwright/test"],
    "graphql": ["absinthe"],
    "jobs": ["oban"],
    "queue": ["oban"],
    "realtime": ["phoenix", "phoenix_live_view"],
}
