"""Error types raised by request handlers.

``ApiError`` subclasses are rendered as ``{"error": message}`` JSON with their
status code by the application's exception handler. ``Unauthorized`` is not
an API error: it always becomes a redirect.
"""


class ApiError(Exception):
    """Base class for errors returned to API clients as JSON."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(ApiError):
    """No valid session (401)."""
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class InvalidInput(ApiError):
    """Missing or malformed request field (400)."""
    status_code = 400


class StoreError(ApiError):
    """The backing store query failed (500); carries the store's message."""
    status_code = 500


class Unauthorized(Exception):
    """Caller may not access an admin page or action.

    ``authenticated`` tells the redirect handler whether to send the caller to
    sign in or back to the home page.
    """

    def __init__(self, authenticated: bool):
        super().__init__("Admin role required" if authenticated else "Sign-in required")
        self.authenticated = authenticated
