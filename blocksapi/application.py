# blocksapi/application.py
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from . import __version__
from .catalog import catalog_router
from .config import Settings, get_settings
from .errors import register_exception_handlers
from .logging_config import setup_logging
from .storage import load_catalog
from .store_api import cart_router


def create_app(
    settings: Optional[Settings] = None,
    platform=None,
    configure_logging: bool = False,
) -> FastAPI:
    """
    Build the API. Without a platform, the in-memory catalog is loaded from settings.
    With ``configure_logging`` the root logger is set up when the app starts
    serving, never when it is built.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if configure_logging:
            setup_logging(settings.log_level)
        yield

    app = FastAPI(
        title="Blocks API",
        description=(
            "Read-only endpoints for product blocks and the store cart. "
            "Products, prices and carts come from the host platform; this "
            "service only shapes them into JSON."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.platform = platform if platform is not None else load_catalog(settings)

    register_exception_handlers(app)
    app.include_router(catalog_router)
    app.include_router(cart_router)

    # 🔹 Quick liveness check
    @app.get("/")
    def health_check():
        return {"status": "ok", "version": __version__}

    return app
