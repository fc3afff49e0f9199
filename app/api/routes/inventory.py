"""
Inventory Routes
Stock items and valuation
"""
from fastapi import APIRouter, Depends, status
from typing import List

from app.api.deps import get_store
from app.api.routes.auth import get_current_employee
from app.db.store import DocumentStore
from app.models.employee import Employee
from app.models.inventory import InventoryItem, InventoryItemCreate, InventoryItemUpdate, InventorySummary
from app.services.inventory import InventoryService

router = APIRouter()


@router.get("/", response_model=List[InventoryItem])
async def list_items(
    stock_filter: str = "all",
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """All items, or only those at or below their minimum level (`low_stock`)"""
    return await InventoryService(store).list_items(current_employee, stock_filter)


@router.get("/summary", response_model=InventorySummary)
async def inventory_summary(
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    return await InventoryService(store).summary(current_employee)


@router.post("/", response_model=InventoryItem, status_code=status.HTTP_201_CREATED)
async def create_item(
    data: InventoryItemCreate,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    return await InventoryService(store).create(current_employee, data)


@router.put("/{item_id}", response_model=InventoryItem)
async def update_item(
    item_id: str,
    data: InventoryItemUpdate,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    return await InventoryService(store).update(current_employee, item_id, data)


@router.delete("/{item_id}")
async def delete_item(
    item_id: str,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    await InventoryService(store).delete(current_employee, item_id)
    return {"message": "Inventory item deleted"}
