"""Routes MCP calls and pushes their results onto the SSE broadcast.

Only ``initialize`` is answered in the HTTP response: clients open the event
stream after they get that reply, so waiting on the stream for it would stall
them. Everything else is acknowledged at once and finished in a background
task whose result is published to whoever is currently streaming.
"""
import asyncio
import copy
import logging
from typing import Any, Dict, Optional, Set

from .broadcast import Broadcaster
from .schemas import McpRequest, McpResponse, ToolResult
from .tools import ToolInvoker, list_tools_result

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "mcp-searxng-bridge"
SERVER_VERSION = "1.0.0"
NOTIFICATION_INITIALIZED = "notifications/initialized"


def initialize_result() -> Dict[str, Any]:
    return {
        "protocolVersion": PROTOCOL_VERSION,
        "capabilities": {"tools": {"listChanged": False}},
        "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
    }


def unsupported_method_result(method: str) -> Dict[str, Any]:
    return ToolResult.error(f"Method {method} not supported").to_payload()


class Dispatcher:
    def __init__(
        self,
        invoker: ToolInvoker,
        broadcaster: Broadcaster,
        *,
        delivery_attempts: int = 3,
        retry_delay_s: float = 0.1,
    ):
        self.invoker = invoker
        self.broadcaster = broadcaster
        self.delivery_attempts = delivery_attempts
        self.retry_delay_s = retry_delay_s
        self.tasks: Set[asyncio.Task] = set()

    def submit(self, request: McpRequest) -> Optional[McpResponse]:
        """Accept a call without blocking.

        Returns the response for ``initialize``; for every other method returns
        None once the work (if any) has been scheduled.
        """
        if request.method == "initialize":
            logger.info("Handling 'initialize' via direct HTTP response")
            return McpResponse(id=request.id, result=initialize_result())
        if request.method == NOTIFICATION_INITIALIZED:
            return None
        if request.id is None:
            logger.debug("Dropping %s call without id", request.method)
            return None
        task = asyncio.create_task(
            self.run(copy.deepcopy(request.id), request.method, copy.deepcopy(request.params))
        )
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)
        return None

    async def handle(self, method: str, params: Optional[Any]) -> Dict[str, Any]:
        if method == "tools/list":
            return list_tools_result()
        if method == "tools/call":
            name = ""
            arguments = None
            if isinstance(params, dict):
                raw_name = params.get("name")
                name = raw_name if isinstance(raw_name, str) else ""
                arguments = params.get("arguments")
            result = await self.invoker.invoke(name, arguments)
            return result.to_payload()
        return unsupported_method_result(method)

    async def run(self, request_id: Any, method: str, params: Optional[Any]) -> bool:
        try:
            result = await self.handle(method, params)
        except Exception as exc:
            logger.exception("Unexpected failure while handling %s", method)
            result = ToolResult.error(str(exc) or exc.__class__.__name__).to_payload()
        response = McpResponse(id=request_id, result=result)
        return await self.deliver(response, method)

    async def deliver(self, response: McpResponse, method: str = "") -> bool:
        """Publish with a short retry window for streams that attach late."""
        message = response.model_dump_json()
        for _ in range(self.delivery_attempts):
            if await self.broadcaster.publish(message) > 0:
                return True
            await asyncio.sleep(self.retry_delay_s)
        logger.warning("Could not deliver %s via SSE (no client connected)", method or "response")
        return False

    async def join(self, timeout: Optional[float] = None) -> None:
        """Wait for in-flight calls, e.g. during shutdown or in tests."""
        pending = set(self.tasks)
        if not pending:
            return
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        if still_running:
            logger.warning("%d dispatch task(s) still running at shutdown", len(still_running))
