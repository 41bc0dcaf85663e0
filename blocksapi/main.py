# blocksapi/main.py
"""
Server entry point: ``uvicorn blocksapi.main:app``.

Tests and embedding code build their own app with
``blocksapi.application.create_app`` instead of importing this module.
"""

from .application import create_app

app = create_app(configure_logging=True)
