"""
Role Checks
Hierarchy rules shared by the services
"""
from app.exceptions import PermissionDenied
from app.models.employee import Employee, Role


def require_role(actor: Employee, minimum: Role) -> None:
    if actor.role < minimum:
        raise PermissionDenied(f"This action requires the {minimum.value} role or higher")


def is_subordinate(actor: Employee, target: Employee) -> bool:
    """Managers act only on users ranked strictly below them"""
    return target.role < actor.role


def require_subordinate(actor: Employee, target: Employee) -> None:
    if not is_subordinate(actor, target):
        raise PermissionDenied(f"You cannot manage {target.name}")


def require_self_or_manager(actor: Employee, target: Employee) -> None:
    """Own data, or HR+ acting on a subordinate"""
    if actor.id == target.id:
        return
    require_role(actor, Role.HR)
    require_subordinate(actor, target)
