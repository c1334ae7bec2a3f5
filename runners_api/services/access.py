"""Authorization checks shared by the resource services."""

from runners_api.core.errors import PermissionDenied
from runners_api.models.user import PRIVILEGED_ROLES, ROLE_ADMIN, User


def is_privileged(user: User | None) -> bool:
    return user is not None and user.role in PRIVILEGED_ROLES


def ensure_privileged(user: User) -> None:
    """Raise 403 unless user is admin or staff."""
    if not is_privileged(user):
        raise PermissionDenied("Admin or staff access required")


def ensure_admin(user: User) -> None:
    if user.role != ROLE_ADMIN:
        raise PermissionDenied("Admin access required")


def ensure_owner_or_privileged(user: User, owner_ids: int | tuple[int, ...], resource: str) -> None:
    """Raise 403 unless user is privileged or one of owner_ids."""
    if is_privileged(user):
        return
    if isinstance(owner_ids, int):
        owner_ids = (owner_ids,)
    if user.id not in owner_ids:
        raise PermissionDenied(f"You do not have access to this {resource}")
