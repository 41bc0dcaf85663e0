"""Read-only REST adapters for product blocks and the store cart."""

__version__ = "0.3.0"
