"""
Inventory Model
Stock items sold through invoices (`inventory` collection)
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class InventoryItem(BaseModel):
    id: Optional[str] = None
    name: str
    sku: str
    category: str = ""
    unit: str = "Nos"
    qty: float = 0
    min_level: float = 0
    cost_price: float = 0
    selling_price: float = 0
    hsn_code: str = ""
    gst_rate: float = 18
    last_updated: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        extra = "forbid"


class InventoryItemCreate(BaseModel):
    name: str
    sku: str
    category: str = ""
    unit: str = "Nos"
    qty: float = Field(0, ge=0)
    min_level: float = Field(0, ge=0)
    cost_price: float = Field(0, ge=0)
    selling_price: float = Field(0, ge=0)
    hsn_code: str = ""
    gst_rate: float = Field(18, ge=0, le=100)

    class Config:
        extra = "forbid"


class InventoryItemUpdate(BaseModel):
    name: Optional[str] = None
    sku: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    qty: Optional[float] = Field(None, ge=0)
    min_level: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    selling_price: Optional[float] = Field(None, ge=0)
    hsn_code: Optional[str] = None
    gst_rate: Optional[float] = Field(None, ge=0, le=100)

    class Config:
        extra = "forbid"


class InventorySummary(BaseModel):
    total_items: int
    total_value: float
    low_stock: int
