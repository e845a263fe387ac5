"""Actor checks shared by the command services.

Authentication is external; the actor arrives already resolved (or ``None``
for anonymous calls). These helpers turn Risk Gate answers into errors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.services import risk

if TYPE_CHECKING:
    from app.domain.user import User


def require_actor(actor: "User | None") -> "User":
    if actor is None:
        raise UnauthorizedError("An acting user (X-Actor-Id) is required for this action")
    return actor


def require_active(actor: "User | None") -> "User":
    """Known actor who is neither banned nor currently suspended."""
    user = require_actor(actor)
    if not risk.can_act(user):
        raise ForbiddenError("Account is banned or suspended")
    return user


def require_admin(actor: "User | None") -> "User":
    user = require_actor(actor)
    if not risk.is_admin(user):
        raise ForbiddenError("Admin privileges required")
    return user


def require_self_or_admin(actor: "User | None", user_id: str) -> "User":
    user = require_actor(actor)
    if user.id != user_id and not risk.is_admin(user):
        raise ForbiddenError("You may only act on your own account")
    return user
