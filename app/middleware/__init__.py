"""HTTP middleware: request ID and security headers (raw ASGI).

Applied in app.main; first added = outermost.
"""

from app.middleware.request_id import RequestIDMiddleware
from app.middleware.security_headers import SecurityHeadersMiddleware

__all__ = ["RequestIDMiddleware", "SecurityHeadersMiddleware"]
