import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.applications import Starlette
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Mount

from subfeed.config import Settings, get_settings
from subfeed.exceptions import FeedError
from subfeed.logging_utils import configure_logging
from subfeed.mcp_server import mcp
from subfeed.models.common import ErrorResponse, StatusResponse
from subfeed.routers.videos import router as videos_router

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


# --- No-cache middleware ---

class NoCacheMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in NO_CACHE_HEADERS.items():
            response.headers[name] = value
        return response


# --- FastAPI app ---

configure_logging(get_settings().log_level)

api = FastAPI(title="Subfeed", version="0.1.0")
api.add_middleware(NoCacheMiddleware)
api.include_router(videos_router)


@api.get("/api/status")
def api_status(settings: Settings = Depends(get_settings)) -> StatusResponse:
    configured = bool(settings.youtube_api_key)
    return StatusResponse(
        api_key_configured=configured,
        message="Ready" if configured else "YOUTUBE_API_KEY is not set",
    )


# --- Exception handlers ---

@api.exception_handler(FeedError)
async def feed_error_handler(request: Request, exc: FeedError):
    body = ErrorResponse(error=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


# --- Starlette root app ---

mcp_app = mcp.http_app(path="/", stateless_http=True)

app = Starlette(
    lifespan=mcp_app.lifespan,
    routes=[
        Mount("/mcp", app=mcp_app),
        Mount("/", app=api),
    ],
)


def run():
    settings = get_settings()
    uvicorn.run(
        "subfeed.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
