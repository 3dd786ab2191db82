import logging
from typing import Any, Dict, List, Optional

import httpx

from .backends import SearxngClient
from .errors import ApiError, BridgeError, NetworkError
from .extractor import reduce_html
from .schemas import ToolDescriptor, ToolResult

logger = logging.getLogger(__name__)

MAX_SEARCH_RESULTS = 5

TOOL_DESCRIPTORS: List[ToolDescriptor] = [
    ToolDescriptor.single_string_arg("search", "Search the web via SearXNG", "query"),
    ToolDescriptor.single_string_arg("fetch_page", "Get the content of a web page as Markdown", "url"),
]


def list_tools_result() -> Dict[str, Any]:
    return {"tools": [tool.model_dump(by_alias=True) for tool in TOOL_DESCRIPTORS]}


def _str_arg(arguments: Any, key: str) -> str:
    if not isinstance(arguments, dict):
        return ""
    value = arguments.get(key)
    return value if isinstance(value, str) else ""


def _field(entry: Dict[str, Any], key: str) -> str:
    value = entry.get(key)
    return value if isinstance(value, str) else ""


def format_search_results(payload: Any, limit: int = MAX_SEARCH_RESULTS) -> str:
    results = payload.get("results") if isinstance(payload, dict) else None
    if not isinstance(results, list):
        return "No results found"
    blocks = []
    for entry in results[:limit]:
        if not isinstance(entry, dict):
            continue
        blocks.append(
            f"### {_field(entry, 'title')}\n{_field(entry, 'content')}\nSource: {_field(entry, 'url')}\n\n"
        )
    out = "".join(blocks)
    return out or "No results found"


def _status_line(resp: httpx.Response) -> str:
    return f"{resp.status_code} {resp.reason_phrase}".strip()


class ToolInvoker:
    def __init__(self, backend: SearxngClient):
        self.backend = backend

    async def search(self, query: str) -> str:
        if not query:
            return "Query is empty"
        logger.debug("search query=%r", query)
        resp = await self.backend.search(query)
        if not resp.is_success:
            raise ApiError(f"SearXNG error: HTTP {_status_line(resp)}", status_code=resp.status_code)
        try:
            payload = resp.json()
        except ValueError as exc:
            raise NetworkError(f"error decoding response body: {exc}") from exc
        return format_search_results(payload)

    async def fetch_page(self, url: str) -> str:
        if not url:
            return "URL is empty"
        logger.debug("fetch_page url=%r", url)
        resp = await self.backend.fetch(url)
        if not resp.is_success:
            # Broken or blocked pages are routine; report them as plain text.
            return f"Could not read the page: HTTP error {_status_line(resp)}"
        return reduce_html(resp.text)

    async def call_tool(self, name: str, arguments: Optional[Any]) -> str:
        if name == "search":
            return await self.search(_str_arg(arguments, "query"))
        if name == "fetch_page":
            return await self.fetch_page(_str_arg(arguments, "url"))
        raise ApiError(f"Unknown tool: {name}")

    async def invoke(self, name: str, arguments: Optional[Any] = None) -> ToolResult:
        try:
            text = await self.call_tool(name, arguments)
        except BridgeError as exc:
            logger.error("Tool call %s failed: %s", name or "<unnamed>", exc)
            return ToolResult.error(str(exc))
        return ToolResult.text(text)
