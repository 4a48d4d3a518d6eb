"""
Middleware package for the TownWrent API.
"""

from .request_context import RequestContextMiddleware, REQUEST_ID_HEADER

__all__ = ["RequestContextMiddleware", "REQUEST_ID_HEADER"]
