"""Store API: cart snapshot for the current session."""

from .router import router as cart_router  # noqa: F401
