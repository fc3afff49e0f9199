"""
Authentication Routes
Handles login and the current-user lookup
"""
from fastapi import APIRouter, HTTPException, Depends, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from pydantic import BaseModel
from datetime import timedelta

from app.api.deps import get_store
from app.config import settings
from app.core.security import create_access_token, decode_access_token
from app.db.store import DocumentStore
from app.exceptions import NotFound
from app.models.employee import Employee, EmployeeResponse
from app.services.users import UserService


router = APIRouter()

# OAuth2 scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


class Token(BaseModel):
    """Token response"""
    access_token: str
    token_type: str
    expires_in: int


async def get_current_employee(
    token: str = Depends(oauth2_scheme),
    store: DocumentStore = Depends(get_store),
) -> Employee:
    """Get current authenticated employee"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    employee_id = decode_access_token(token)
    if employee_id is None:
        raise credentials_exception

    try:
        employee = await UserService(store).get(employee_id)
    except NotFound:
        raise credentials_exception

    if employee.is_blocked:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is blocked"
        )

    return employee


@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    store: DocumentStore = Depends(get_store),
):
    """
    Login with email and password
    """
    users = UserService(store)
    # username field contains the email
    employee = await users.authenticate(form_data.username, form_data.password)

    if employee is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if employee.is_blocked:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is blocked"
        )

    await users.record_login(employee)

    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        data={"sub": employee.id, "email": employee.email, "role": employee.role.value},
        expires_delta=access_token_expires
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    }


@router.get("/me", response_model=EmployeeResponse)
async def get_current_user(current_employee: Employee = Depends(get_current_employee)):
    """
    Get current authenticated employee details
    """
    return current_employee
