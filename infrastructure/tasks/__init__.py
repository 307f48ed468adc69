"""Background task infrastructure package.

Tasks here run inside the application event loop and are started/stopped by
the FastAPI lifespan in ``main.py``.
"""
from .expiry_sweeper import ExpirySweeper

__all__ = ["ExpirySweeper"]
