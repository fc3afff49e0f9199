"""Shared fixtures: an in-memory store seeded with a small org chart."""

from datetime import date

import pytest

from app.core.security import get_password_hash
from app.db.memory import InMemoryDocumentStore
from app.db.store import Collections, to_record
from app.models.employee import BankDetails, Employee, Role
from app.models.kra import KraTemplate

PASSWORD = "secret123"


async def add_employee(store, **fields) -> Employee:
    employee = Employee(password_hash=get_password_hash(PASSWORD), **fields)
    employee.id = await store.add(Collections.USERS, to_record(employee))
    return employee


async def add_template(store, **fields) -> KraTemplate:
    template = KraTemplate(**fields)
    template.id = await store.add(Collections.KRA_TEMPLATES, to_record(template))
    return template


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
async def people(store):
    """super admin > admin > hr > two Sales employees"""
    return {
        "super": await add_employee(
            store, employee_code="EMP001", name="Asha Rao", email="asha@example.com",
            department="Management", role=Role.SUPER_ADMIN,
        ),
        "admin": await add_employee(
            store, employee_code="EMP002", name="Vikram Shah", email="vikram@example.com",
            department="Management", role=Role.ADMIN,
        ),
        "hr": await add_employee(
            store, employee_code="EMP003", name="Meera Iyer", email="meera@example.com",
            department="HR", role=Role.HR,
        ),
        "sales": await add_employee(
            store, employee_code="EMP010", name="Rohan Das", email="rohan@example.com",
            department="Sales", designation="Sales Executive", joining_date=date(2022, 6, 1),
            ctc=600000,
            bank_details=BankDetails(account_number="001122334455", bank_name="State Bank", pan_number="ABCDE1234F"),
        ),
        "sales2": await add_employee(
            store, employee_code="EMP9", name="Kavya Nair", email="kavya@example.com",
            department="Sales", joining_date=date(2025, 7, 1),
        ),
    }


@pytest.fixture
async def sales_templates(store):
    """Sales: one mandatory KRA at 60%, optional ones at 30% and 50%"""
    return {
        "revenue": await add_template(store, title="Revenue", department="Sales", is_mandatory=True, weightage=60),
        "leads": await add_template(store, title="Lead conversion", department="Sales", weightage=30),
        "accounts": await add_template(store, title="New accounts", department="Sales", weightage=50),
        "audit": await add_template(store, title="Audit closure", department="Finance", weightage=10),
    }
