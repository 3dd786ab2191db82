import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse

from .backends import SearxngClient
from .broadcast import Broadcaster
from .config import AppSettings, load_settings
from .dispatcher import Dispatcher
from .logger import configure_logging
from .schemas import McpRequest
from .tools import ToolInvoker


def get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.broadcaster


def sse_format(message: str) -> str:
    return f"data: {message}\n\n"


router = APIRouter()


@router.get("/health")
async def health():
    return PlainTextResponse("OK")


@router.get("/sse")
async def stream_messages(
    broadcaster: Broadcaster = Depends(get_broadcaster),
    settings: AppSettings = Depends(get_settings),
):
    async def event_generator():
        queue = await broadcaster.subscribe()
        try:
            while True:
                try:
                    message = await asyncio.wait_for(queue.get(), timeout=settings.keepalive_s)
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
                    continue
                yield sse_format(message)
        finally:
            await broadcaster.unsubscribe(queue)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


# Some clients post their calls to the stream URL, others to /messages.
@router.post("/sse")
@router.post("/messages")
async def submit_message(
    payload: McpRequest,
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    response = dispatcher.submit(payload)
    if response is not None:
        return JSONResponse(response.model_dump())
    return Response(status_code=202)


def create_app(
    settings: AppSettings,
    *,
    backend: Optional[SearxngClient] = None,
    broadcaster: Optional[Broadcaster] = None,
) -> FastAPI:
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            await app.state.dispatcher.join(timeout=settings.request_timeout_s)
            await app.state.backend.close()

    app = FastAPI(title="MCP SearXNG Bridge", lifespan=lifespan)
    app.state.settings = settings
    app.state.backend = backend or SearxngClient(
        settings.searxng_url,
        timeout=settings.request_timeout_s,
        user_agent=settings.user_agent,
    )
    app.state.broadcaster = broadcaster or Broadcaster(capacity=settings.channel_capacity)
    app.state.dispatcher = Dispatcher(
        ToolInvoker(app.state.backend),
        app.state.broadcaster,
        delivery_attempts=settings.delivery_attempts,
        retry_delay_s=settings.delivery_retry_delay_s,
    )
    app.include_router(router)
    return app


def run() -> None:
    import uvicorn

    settings = app.state.settings
    try:
        uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level)
    except KeyboardInterrupt:
        pass


app = create_app(load_settings())


if __name__ == "__main__":
    run()
