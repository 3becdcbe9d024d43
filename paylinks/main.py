import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .config import Settings, settings
from .errors import PaymentLinkError
from .logger import setup_logging
from .routers import fees, payment_links
from .services.relayer import RelayerConfigClient
from .store import PaymentLinkStore

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    return f"{field}: {first.get('msg')}" if field else str(first.get("msg"))


def create_app(app_settings: Optional[Settings] = None,
               store: Optional[PaymentLinkStore] = None,
               relayer: Optional[RelayerConfigClient] = None,
               ) -> FastAPI:
    app_settings = app_settings or settings
    app = FastAPI(title="Private Payment Links Service")

    app.state.settings = app_settings
    app.state.store = store or PaymentLinkStore()
    app.state.relayer = relayer or RelayerConfigClient(app_settings.relayer_api_url, app_settings.relayer_timeout)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(payment_links.router)
    app.include_router(fees.router)

    @app.exception_handler(PaymentLinkError)
    async def payment_link_error_handler(request: Request, exc: PaymentLinkError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _error(400, _validation_message(exc))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Internal server error")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.on_event("startup")
    async def on_startup():
        logger.info("payment links service starting (env=%s, relayer=%s)", app_settings.env, app_settings.relayer_api_url)

    return app


setup_logging(settings.log_level)
app = create_app()

if __name__ == "__main__":
    uvicorn.run("paylinks.main:app", host=settings.app_host, port=settings.app_port, reload=(settings.env != "production"))
