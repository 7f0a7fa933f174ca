"""
Read operations for the Inventory service.

This module contains the database queries the low-stock alert computation
depends on.
"""
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from . import models
from .errors import NotFoundError


def get_company(db: Session, company_id: int) -> Optional[models.Company]:
    """
    Retrieve a company by ID.

    Args:
        db: Database session
        company_id: ID of the company to retrieve

    Returns:
        Company object or None if not found
    """
    return db.query(models.Company).filter(models.Company.id == company_id).first()


def list_warehouses(db: Session, company_id: int) -> List[models.Warehouse]:
    """
    List the warehouses of a company, ordered by ID.

    Args:
        db: Database session
        company_id: Owning company

    Returns:
        List of Warehouse objects (possibly empty)

    Raises:
        NotFoundError: if the company does not exist
    """
    if get_company(db, company_id) is None:
        raise NotFoundError(f"Company {company_id} not found")
    return (
        db.query(models.Warehouse)
        .filter(models.Warehouse.company_id == company_id)
        .order_by(models.Warehouse.id)
        .all()
    )


def list_inventory_with_product(
    db: Session, warehouse_id: int
) -> List[Tuple[models.InventoryRecord, models.Product]]:
    """
    List the stock levels held in a warehouse together with their products.

    Args:
        db: Database session
        warehouse_id: Warehouse to inspect

    Returns:
        List of (InventoryRecord, Product) pairs ordered by product ID
    """
    rows = (
        db.query(models.InventoryRecord, models.Product)
        .join(models.Product, models.Product.id == models.InventoryRecord.product_id)
        .filter(models.InventoryRecord.warehouse_id == warehouse_id)
        .order_by(models.Product.id)
        .all()
    )
    return [(record, product) for record, product in rows]


def sales_activity(
    db: Session, product_id: int, warehouse_id: int, since: datetime, until: datetime
) -> Tuple[int, int]:
    """
    Sales of a product from a warehouse in [since, until].

    Args:
        db: Database session
        product_id: Product sold
        warehouse_id: Warehouse it shipped from
        since: Start of the window (inclusive)
        until: End of the window (inclusive); later, future-dated rows are ignored

    Returns:
        Tuple of (sale_count, units_sold); a sale of zero units still counts
        as a sale
    """
    sale_count, total = (
        db.query(
            func.count(models.SalesRecord.id),
            func.coalesce(func.sum(models.SalesRecord.quantity_sold), 0),
        )
        .filter(
            models.SalesRecord.product_id == product_id,
            models.SalesRecord.warehouse_id == warehouse_id,
            models.SalesRecord.sold_at >= since,
            models.SalesRecord.sold_at <= until,
        )
        .one()
    )
    return int(sale_count or 0), int(total or 0)


def suppliers_for_product(db: Session, product_id: int) -> List[Tuple[models.Supplier, bool]]:
    """
    List the suppliers linked to a product.

    Args:
        db: Database session
        product_id: Product to look up

    Returns:
        List of (Supplier, is_primary) pairs, primary first, then by supplier ID
    """
    link = models.product_suppliers
    rows = (
        db.query(models.Supplier, link.c.is_primary)
        .join(link, link.c.supplier_id == models.Supplier.id)
        .filter(link.c.product_id == product_id)
        .order_by(link.c.is_primary.desc(), models.Supplier.id)
        .all()
    )
    return [(supplier, bool(is_primary)) for supplier, is_primary in rows]
