"""
User Service
Employee provisioning, profile edits and block/unblock
"""
import logging
import re
from datetime import datetime
from typing import List, Optional

from app.core.permissions import require_role, require_subordinate
from app.core.security import get_password_hash, verify_password
from app.db.store import Collections, DocumentStore, to_record
from app.exceptions import DuplicateRecord, NotFound, PermissionDenied
from app.models.employee import Employee, EmployeeCreate, EmployeeUpdate, Role

logger = logging.getLogger(__name__)

_CODE_NUMBER = re.compile(r"(\d+)$")


def code_sort_key(employee: Employee):
    """EMP2 before EMP10; codes without a numeric suffix go last"""
    match = _CODE_NUMBER.search(employee.employee_code or "")
    return (match is None, int(match.group(1)) if match else 0, employee.employee_code)


def _from_record(record: dict) -> Employee:
    return Employee.model_validate(record)


class UserService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def get(self, user_id: str) -> Employee:
        record = await self.store.get(Collections.USERS, user_id)
        if record is None:
            raise NotFound("Employee not found")
        return _from_record(record)

    async def find_by_email(self, email: str) -> Optional[Employee]:
        records = await self.store.query(Collections.USERS, [("email", "==", email.lower())])
        return _from_record(records[0]) if records else None

    async def _ensure_unique(self, email: Optional[str], code: Optional[str], exclude_id: Optional[str] = None):
        if email:
            for record in await self.store.query(Collections.USERS, [("email", "==", email.lower())]):
                if record["id"] != exclude_id:
                    raise DuplicateRecord("Email already registered")
        if code:
            for record in await self.store.query(Collections.USERS, [("employee_code", "==", code)]):
                if record["id"] != exclude_id:
                    raise DuplicateRecord(f"Employee code {code} already exists")

    async def create(self, actor: Employee, data: EmployeeCreate) -> Employee:
        """Create a new employee (HR and above, for lower roles only)"""
        require_role(actor, Role.HR)
        if not data.role < actor.role:
            raise PermissionDenied(f"You cannot create a user with the {data.role.value} role")
        await self._ensure_unique(data.email, data.employee_code)

        employee_dict = data.model_dump(exclude={"password"})
        if employee_dict.get("bank_details") is None:
            employee_dict.pop("bank_details", None)
        employee_dict["email"] = data.email.lower()
        employee = Employee(**employee_dict, password_hash=get_password_hash(data.password))

        employee.id = await self.store.add(Collections.USERS, to_record(employee))
        logger.info("User %s (%s) created by %s", employee.employee_code, employee.role.value, actor.employee_code)
        return employee

    async def bootstrap_admin(self, data: EmployeeCreate) -> Optional[Employee]:
        """Create the first super admin when no user of that role exists"""
        existing = await self.store.query(Collections.USERS, [("role", "==", Role.SUPER_ADMIN.value)])
        if existing:
            return None
        await self._ensure_unique(data.email, data.employee_code)
        employee_dict = data.model_dump(exclude={"password"})
        if employee_dict.get("bank_details") is None:
            employee_dict.pop("bank_details", None)
        employee_dict.update(email=data.email.lower(), role=Role.SUPER_ADMIN)
        employee = Employee(**employee_dict, password_hash=get_password_hash(data.password))
        employee.id = await self.store.add(Collections.USERS, to_record(employee))
        logger.info("Bootstrap super admin %s created", employee.email)
        return employee

    async def update(self, actor: Employee, user_id: str, data: EmployeeUpdate) -> Employee:
        require_role(actor, Role.HR)
        target = await self.get(user_id)
        require_subordinate(actor, target)

        update_dict = data.model_dump(exclude_unset=True)
        if update_dict.get("role") is not None and not data.role < actor.role:
            raise PermissionDenied(f"You cannot assign the {data.role.value} role")
        if update_dict.get("employee_code"):
            await self._ensure_unique(None, update_dict["employee_code"], exclude_id=user_id)

        changes = {k: v for k, v in update_dict.items() if v is not None}
        changes["updated_at"] = datetime.utcnow()
        updated = Employee.model_validate({**target.model_dump(), **changes})
        partial = to_record(updated)
        await self.store.update(Collections.USERS, user_id, {key: partial[key] for key in changes})
        logger.info("User %s updated by %s", target.employee_code, actor.employee_code)
        return updated

    async def set_blocked(self, actor: Employee, user_id: str, blocked: bool) -> Employee:
        """Soft-disable an account; users are never hard-deleted"""
        require_role(actor, Role.HR)
        if actor.id == user_id:
            raise PermissionDenied("You cannot block your own account")
        target = await self.get(user_id)
        require_subordinate(actor, target)

        now = datetime.utcnow()
        await self.store.update(Collections.USERS, user_id, {"is_blocked": blocked, "updated_at": now.isoformat()})
        logger.info("User %s %s by %s", target.employee_code, "blocked" if blocked else "unblocked", actor.employee_code)
        return target.model_copy(update={"is_blocked": blocked, "updated_at": now})

    async def list_subordinates(self, actor: Employee, include_blocked: bool = True) -> List[Employee]:
        require_role(actor, Role.HR)
        lower_roles = [role.value for role in Role if role < actor.role]
        records = await self.store.query(Collections.USERS, [("role", "in", lower_roles)])
        employees = [_from_record(r) for r in records]
        if not include_blocked:
            employees = [e for e in employees if not e.is_blocked]
        return sorted(employees, key=code_sort_key)

    async def authenticate(self, email: str, password: str) -> Optional[Employee]:
        """Return the employee for valid credentials; None otherwise"""
        employee = await self.find_by_email(email)
        if employee is None or not verify_password(password, employee.password_hash):
            logger.warning("Failed login for %s", email)
            return None
        return employee

    async def record_login(self, employee: Employee) -> None:
        now = datetime.utcnow()
        await self.store.update(Collections.USERS, employee.id, {"last_login": now.isoformat()})
        employee.last_login = now
