"""Site-wide passphrase gate.

The whole board sits behind one shared passphrase. Clients send it in the
``X-Site-Password`` header on every request.
"""

import hmac
from functools import wraps
from typing import Callable, ParamSpec, TypeVar

from flask import current_app, request

from snow_tasks.errors import error_response


P = ParamSpec("P")
T = TypeVar("T")

SITE_PASSWORD_HEADER = "X-Site-Password"


def site_password_matches(candidate: str | None) -> bool:
    """Compare a candidate against the configured passphrase.

    Always True when no passphrase is configured.
    """
    expected = current_app.config.get("SITE_PASSWORD", "")
    if not expected:
        return True
    if candidate is None:
        return False
    return hmac.compare_digest(candidate.strip().encode(), expected.encode())


def site_password_required(f: Callable[P, T]) -> Callable[P, T]:
    """Decorator to require the site passphrase header.

    Returns 401 if it is missing or wrong.
    """

    @wraps(f)
    def decorated(*args: P.args, **kwargs: P.kwargs) -> T:
        if not site_password_matches(request.headers.get(SITE_PASSWORD_HEADER)):
            return error_response("Site password required", 401)
        return f(*args, **kwargs)

    return decorated
