"""
Products API for editor blocks.

This package translates listing filters into taxonomy queries and
projects platform products into the flat JSON the blocks render:
display fields, price block, images and add-to-cart parameters.
"""

from .router import router as catalog_router  # noqa: F401
