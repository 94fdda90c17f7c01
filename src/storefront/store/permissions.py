"""Identity checks shared by the store services."""

from .conf import get_setting
from .exceptions import Unauthenticated, Unauthorized


def is_signed_in(user) -> bool:
    return user is not None and user.is_authenticated


def require_user(user, message: str = "Must be logged in"):
    """Return the user, or raise Unauthenticated for anonymous callers."""
    if not is_signed_in(user):
        raise Unauthenticated(message)
    return user


def require_catalog_editor(user, message: str = "Must be logged in"):
    """Signed-in user allowed to change the catalog."""
    require_user(user, message)
    if get_setting("CATALOG_REQUIRES_STAFF") and not user.is_staff:
        raise Unauthorized("Staff access required")
    return user


def require_staff(user, message: str = "Must be logged in"):
    require_user(user, message)
    if not user.is_staff:
        raise Unauthorized("Staff access required")
    return user
