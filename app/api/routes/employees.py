"""
Employee Routes
User management endpoints
"""
from fastapi import APIRouter, Depends
from typing import List

from app.api.deps import get_store
from app.api.routes.auth import get_current_employee
from app.core.permissions import require_self_or_manager
from app.db.store import DocumentStore
from app.models.employee import Employee, EmployeeCreate, EmployeeResponse, EmployeeUpdate
from app.services.users import UserService


router = APIRouter()


@router.post("/", response_model=EmployeeResponse)
async def create_employee(
    employee_data: EmployeeCreate,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """
    Create a new employee (HR and above, lower roles only)
    """
    return await UserService(store).create(current_employee, employee_data)


@router.get("/", response_model=List[EmployeeResponse])
async def list_employees(
    include_blocked: bool = True,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """Subordinates of the caller, ordered by employee code"""
    return await UserService(store).list_subordinates(current_employee, include_blocked=include_blocked)


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: str,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    employee = await UserService(store).get(employee_id)
    require_self_or_manager(current_employee, employee)
    return employee


@router.put("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: str,
    update_data: EmployeeUpdate,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """Update an employee profile (HR and above)"""
    return await UserService(store).update(current_employee, employee_id, update_data)


@router.post("/{employee_id}/block", response_model=EmployeeResponse)
async def block_employee(
    employee_id: str,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """Block an account; blocked users cannot log in"""
    return await UserService(store).set_blocked(current_employee, employee_id, True)


@router.post("/{employee_id}/unblock", response_model=EmployeeResponse)
async def unblock_employee(
    employee_id: str,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    return await UserService(store).set_blocked(current_employee, employee_id, False)
