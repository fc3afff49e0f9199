"""
Invoice Routes
GST invoice preview, saving and PDF download
"""
from fastapi import APIRouter, Depends, Response, status
from typing import List

from app.api.deps import get_store
from app.api.routes.auth import get_current_employee
from app.db.store import DocumentStore
from app.models.employee import Employee
from app.models.invoice import Invoice, InvoiceCreate
from app.services.invoices import InvoiceService

router = APIRouter()


@router.post("/preview", response_model=Invoice)
async def preview_invoice(
    data: InvoiceCreate,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """Compute taxes and totals without saving"""
    return await InvoiceService(store).preview(data)


@router.post("/", response_model=Invoice, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    data: InvoiceCreate,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """
    Save an invoice and decrement stock for linked inventory items
    """
    return await InvoiceService(store).create(current_employee, data)


@router.get("/", response_model=List[Invoice])
async def list_invoices(
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    return await InvoiceService(store).list_invoices(current_employee)


@router.get("/{invoice_id}", response_model=Invoice)
async def get_invoice(
    invoice_id: str,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    return await InvoiceService(store).get(current_employee, invoice_id)


@router.get("/{invoice_id}/pdf")
async def download_invoice(
    invoice_id: str,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    service = InvoiceService(store)
    invoice = await service.get(current_employee, invoice_id)
    pdf = await service.invoice_pdf(current_employee, invoice_id)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{invoice.meta.invoice_no}.pdf"'},
    )
