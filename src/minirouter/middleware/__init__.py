"""
=============================================================================
MIDDLEWARE
=============================================================================

Gates that run before routing. Each takes (request, response) and returns
True to continue or False to stop with the response it wrote.

    LoggingMiddleware   Access log line for every request; always continues.
    AuthMiddleware      401 for protected prefixes without Authorization.
    CORSMiddleware      Adds Access-Control-* headers; always continues.

=============================================================================
"""

from .base import FunctionMiddleware, Gate, Middleware, MiddlewareChain, function_middleware
from .logging import LoggingMiddleware, RequestLog
from .auth import AuthMiddleware
from .cors import CORSMiddleware

__all__ = [
    # Base classes
    "Gate",
    "Middleware",
    "MiddlewareChain",
    "FunctionMiddleware",
    "function_middleware",

    # Built-in middleware
    "LoggingMiddleware",
    "RequestLog",
    "AuthMiddleware",
    "CORSMiddleware",
]
