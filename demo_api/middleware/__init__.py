"""
Demo API middleware
===================
Request logging (correlation id) and CORS with empty preflight answers
"""
from .cors_middleware import PreflightCORSMiddleware, install_cors
from .logging_middleware import LoggingMiddleware

__all__ = ["LoggingMiddleware", "PreflightCORSMiddleware", "install_cors"]
