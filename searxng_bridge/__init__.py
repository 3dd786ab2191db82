"""MCP bridge exposing SearXNG search and page fetching over HTTP + SSE."""

__version__ = "1.0.0"
