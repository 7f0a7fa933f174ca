"""
Pydantic schemas for the Inventory service.

These schemas describe the records exchanged with the data-access layer and
the structure of API responses.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict


class Warehouse(BaseModel):
    """Warehouse as seen by the alert computation."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    company_id: int
    name: str


class Product(BaseModel):
    """Product metadata joined onto a stock level."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: str
    sku: str
    product_type: str


class StockLevel(BaseModel):
    """
    Quantity of one product held in one warehouse.

    Attributes:
        product_id (int): Product held
        warehouse_id (int): Warehouse holding it
        quantity (int): Units on hand (never negative)
        updated_at (datetime): Last time the quantity changed
    """
    model_config = ConfigDict(from_attributes=True, frozen=True)

    product_id: int
    warehouse_id: int
    quantity: int
    updated_at: Optional[datetime] = None


class SalesActivity(BaseModel):
    """
    Sales of one product from one warehouse within a time window.

    Attributes:
        sale_count (int): Number of sale records in the window
        total_sold (int): Units sold across those records
    """
    model_config = ConfigDict(frozen=True)

    sale_count: int = 0
    total_sold: int = 0


class Supplier(BaseModel):
    """Supplier attached to an alert."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: str
    contact_email: Optional[str] = None


class SupplierCandidate(Supplier):
    """Supplier linked to a product, with its primary flag."""
    is_primary: bool = False

    def public(self) -> Supplier:
        return Supplier(id=self.id, name=self.name, contact_email=self.contact_email)


class LowStockAlert(BaseModel):
    """
    Alert for a product running low in a warehouse.

    Attributes:
        product_id (int): Product identifier
        product_name (str): Product name
        sku (str): Stock Keeping Unit
        warehouse_id (int): Warehouse identifier
        warehouse_name (str): Warehouse name
        current_stock (int): Units on hand
        threshold (int): Threshold applied for the product type
        days_until_stockout (int): Estimated days of stock left, None when indeterminate
        supplier (Supplier): Supplier to reorder from, None when the product has none
    """
    model_config = ConfigDict(frozen=True)

    product_id: int
    product_name: str
    sku: str
    warehouse_id: int
    warehouse_name: str
    current_stock: int
    threshold: int
    days_until_stockout: Optional[int]
    supplier: Optional[Supplier]


class LowStockAlertResponse(BaseModel):
    """Response body for the low-stock alert endpoint."""
    alerts: List[LowStockAlert]
    total_alerts: int


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""
    kind: str
    message: str
