"""Security headers middleware (raw ASGI).

JSON API responses get a locked-down CSP; the interactive docs pages need
inline scripts and the CDN assets FastAPI serves them with.
"""

from typing import Callable

API_HEADERS: dict[str, str] = {
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cache-Control": "no-store",
}

DOCS_CSP = (
    "default-src 'self'; script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "img-src 'self' data: https://fastapi.tiangolo.com"
)

_DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")


def _encode(headers: dict[str, str]) -> list[tuple[bytes, bytes]]:
    return [(k.lower().encode(), v.encode()) for k, v in headers.items()]


def SecurityHeadersMiddleware(app: Callable, hsts: bool = False) -> Callable:
    """Add security headers unless the endpoint already set them.

    hsts adds Strict-Transport-Security; enable only behind TLS.
    """
    api = dict(API_HEADERS)
    if hsts:
        api["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    api_headers = _encode(api)
    docs_headers = _encode({**api, "Content-Security-Policy": DOCS_CSP, "Cache-Control": "no-cache"})

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        extra = docs_headers if scope.get("path", "").startswith(_DOCS_PATHS) else api_headers

        async def send_with_headers(message: dict) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                present = {name.lower() for name, _ in headers}
                headers.extend(h for h in extra if h[0] not in present)
                message["headers"] = headers
            await send(message)

        await app(scope, receive, send_with_headers)

    return asgi_app
