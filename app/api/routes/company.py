"""
Company Settings Routes
Manage global organization settings
"""
from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.api.routes.auth import get_current_employee
from app.db.store import DocumentStore
from app.models.company import CompanySettings, CompanySettingsUpdate
from app.models.employee import Employee
from app.services.company import CompanyService

router = APIRouter()


@router.get("/", response_model=CompanySettings)
async def get_company_settings(
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """Get company settings, falling back to configured defaults"""
    return await CompanyService(store).get()


@router.put("/", response_model=CompanySettings)
async def update_company_settings(
    data: CompanySettingsUpdate,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """
    Update company settings (Admin and above)
    """
    return await CompanyService(store).update(current_employee, data)
