"""PIN-based user selection and role capabilities.

Picking a user by PIN only selects which capabilities the UI offers; it is
not authentication and gives no security guarantee.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .domain_models import ReportTypeKey, User

LOGGER = logging.getLogger(__name__)


class AccessDeniedError(PermissionError):
    """The acting user's role does not allow the requested action."""


def select_user(users: Iterable[User], user_id: str, pin: str) -> User | None:
    """Return the user whose id and PIN match, otherwise ``None``."""
    for user in users:
        if user.id == user_id:
            if user.pin and user.pin == str(pin).strip():
                return user
            LOGGER.debug("PIN mismatch for user %s", user_id)
            return None
    return None


def require_admin(user: User | None, action: str) -> User:
    if user is None or not user.is_admin:
        raise AccessDeniedError(f"Only administrators may {action}.")
    return user


def require_template(user: User | None, key: ReportTypeKey | str) -> User:
    if user is None or not user.can_use_template(key):
        raise AccessDeniedError(f"Template {str(key)!r} is not available to this user.")
    return user


def can_edit_reports(user: User | None) -> bool:
    return user is not None and user.is_admin
