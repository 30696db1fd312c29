import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from contacts import router as contacts_router
from core import db
from core.errors import register_exception_handlers
from core.media import media_config_from_env
from orders import router as orders_router
from products import router as products_router
from uploads import router as uploads_router
from uploads.service import upload_settings_from_env

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    level = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["*"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Media credentials are read once; handlers get them via a dependency.
    app.state.media_config = media_config_from_env()
    if not app.state.media_config.is_configured:
        logger.warning("media_host_not_configured uploads_will_fail=true")
    app.state.upload_settings = upload_settings_from_env()

    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


def create_app() -> FastAPI:
    app = FastAPI(title="shop api", lifespan=lifespan)

    origins = cors_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentialed requests to a wildcard origin.
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(contacts_router.router, tags=["contacts"])
    app.include_router(products_router.router, tags=["products"])
    app.include_router(orders_router.router, tags=["orders"])
    app.include_router(uploads_router.router, tags=["uploads"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    # Mounted last so API routes win over files with the same path.
    static_dir = os.environ.get("STATIC_DIR", "").strip()
    if static_dir and Path(static_dir).is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    return app


configure_logging()
app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        app,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "3000")),
    )
