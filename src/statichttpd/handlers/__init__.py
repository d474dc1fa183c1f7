"""
Request handlers.

    static.py   Webroot file lookup and loading
"""

from .static import StaticFileHandler, resolve_path, load_body

__all__ = ["StaticFileHandler", "resolve_path", "load_body"]
