"""
Company Settings Model
Stores organization details printed on payslips and invoices
"""
from typing import Optional
from pydantic import BaseModel
from datetime import datetime

from app.config import settings


class CompanySettings(BaseModel):
    name: str = settings.COMPANY_NAME
    address: str = settings.COMPANY_ADDRESS
    email: str = settings.COMPANY_EMAIL
    phone: str = settings.COMPANY_PHONE
    website: str = settings.COMPANY_WEBSITE
    gstin: str = settings.COMPANY_GSTIN
    state: str = settings.COMPANY_STATE
    state_code: str = settings.COMPANY_STATE_CODE

    currency_symbol: str = "Rs."

    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    class Config:
        extra = "ignore"
        json_schema_extra = {
            "example": {
                "name": "Acme Corp",
                "address": "123 Tech Park, Haridwar, 249403",
                "gstin": "05ABCDE1234F1Z5",
                "state": "Uttarakhand",
                "state_code": "05"
            }
        }


class CompanySettingsUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    gstin: Optional[str] = None
    state: Optional[str] = None
    state_code: Optional[str] = None

    class Config:
        extra = "forbid"
