"""
HTTP middlewares.

Order matters: errors are translated outermost, so admin rejections and
handler failures both come back as JSON.
"""

from web.middlewares.admin_auth import admin_auth_middleware
from web.middlewares.error_handler import error_middleware


__all__ = ["admin_auth_middleware", "error_middleware"]
