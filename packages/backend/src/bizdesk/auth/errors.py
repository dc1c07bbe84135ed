"""Authentication / authorization error taxonomy.

Learn: Every failure on the auth path is one of these classes. Each
carries its HTTP status and a user-facing message; the app-level
exception handlers (see main.py) render them as
{"success": false, "message": ...}.

Class tree:

    AuthError
    ├── Unauthorized (401)
    │   ├── NoCredential
    │   ├── MalformedCredential
    │   ├── ExpiredCredential
    │   ├── RevokedCredential
    │   └── Unauthenticated
    ├── Forbidden (403)
    │   └── SelfRoleChangeForbidden
    └── StoreUnavailable (503)

"Identity not found" and "identity disabled" both raise a bare
Unauthorized with the same message, so a caller cannot tell them apart.
"""


class AuthError(Exception):
    """Base class for auth-path failures."""

    status_code: int = 401
    message: str = "Authentication failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class Unauthorized(AuthError):
    status_code = 401
    message = "Token is not valid"


class NoCredential(Unauthorized):
    message = "No token, authorization denied"


class MalformedCredential(Unauthorized):
    message = "Invalid token"


class ExpiredCredential(Unauthorized):
    message = "Token expired"


class RevokedCredential(Unauthorized):
    message = "Token has been revoked"


class Unauthenticated(Unauthorized):
    message = "Authentication required"


class Forbidden(AuthError):
    status_code = 403
    message = "Insufficient permissions"


class SelfRoleChangeForbidden(Forbidden):
    message = "Cannot change your own role"


class StoreUnavailable(AuthError):
    """The credential store could not be reached.

    Never conflated with 401/403 — a database outage must not look like
    a permission problem to the client.
    """

    status_code = 503
    message = "Service temporarily unavailable"
