"""Security headers middleware.

Learn: Every response gets a fixed set of hardening headers (no MIME
sniffing, never framed, trimmed referrers). Two are conditional:

- Cache-Control: no-store on /api/v1/auth, whose responses set the
  credential cookies and echo tokens in the body.
- Strict-Transport-Security once the request arrived over HTTPS. Behind a
  TLS-terminating proxy the app itself sees plain http, so the proxy's
  X-Forwarded-Proto counts too.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

HARDENING_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}
HSTS_VALUE = "max-age=31536000; includeSubDomains"
CREDENTIAL_PATH_PREFIX = "/api/v1/auth"


def _is_https(request: Request) -> bool:
    forwarded = request.headers.get("x-forwarded-proto", "")
    return request.url.scheme == "https" or forwarded.split(",")[0].strip() == "https"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers.update(HARDENING_HEADERS)
        if request.url.path.startswith(CREDENTIAL_PATH_PREFIX):
            response.headers["Cache-Control"] = "no-store"
        if _is_https(request):
            response.headers["Strict-Transport-Security"] = HSTS_VALUE
        return response
