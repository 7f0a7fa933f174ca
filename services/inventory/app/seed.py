"""
Load a small demo dataset for local runs.

Usage:
    python -m app.seed

Does nothing if the demo company already exists.
"""
import logging
from datetime import datetime, timedelta
from sqlalchemy.orm import Session

from . import models
from .database import SessionLocal, engine

logger = logging.getLogger(__name__)

DEMO_COMPANY = "Acme Distribution"


def seed(db: Session, now: datetime = None) -> bool:
    """
    Insert the demo company with its warehouses, products, suppliers and sales.

    Args:
        db: Database session
        now: Reference time for sale timestamps (default: current UTC time)

    Returns:
        True if data was inserted, False if it was already present
    """
    if db.query(models.Company).filter(models.Company.name == DEMO_COMPANY).first():
        logger.info(f"Demo company '{DEMO_COMPANY}' already present, skipping seed")
        return False

    now = now or datetime.utcnow()
    company = models.Company(name=DEMO_COMPANY)
    main = models.Warehouse(name="Main Warehouse", company=company)
    east = models.Warehouse(name="East Depot", company=company)

    widget = models.Product(name="Widget A", sku="WID-001", product_type="simple")
    kit = models.Product(name="Starter Kit", sku="KIT-001", product_type="bundle")
    gadget = models.Product(name="Gadget B", sku="GAD-001", product_type="simple")

    supplier_x = models.Supplier(name="Supplier Corp", contact_email="orders@supplier.com")
    supplier_y = models.Supplier(name="Backup Parts Ltd", contact_email="sales@backupparts.com")

    db.add_all([company, main, east, widget, kit, gadget, supplier_x, supplier_y])
    db.flush()

    db.execute(models.product_suppliers.insert(), [
        {"product_id": widget.id, "supplier_id": supplier_x.id, "is_primary": True},
        {"product_id": widget.id, "supplier_id": supplier_y.id, "is_primary": False},
        {"product_id": kit.id, "supplier_id": supplier_y.id, "is_primary": False},
    ])

    db.add_all([
        models.InventoryRecord(product_id=widget.id, warehouse_id=main.id, quantity=5),
        models.InventoryRecord(product_id=kit.id, warehouse_id=main.id, quantity=3),
        models.InventoryRecord(product_id=gadget.id, warehouse_id=main.id, quantity=2),
        models.InventoryRecord(product_id=widget.id, warehouse_id=east.id, quantity=40),
        models.InventoryRecord(product_id=gadget.id, warehouse_id=east.id, quantity=8),
    ])

    # Gadget B in the main warehouse has no recent sales and is not reported
    db.add_all([
        models.SalesRecord(product_id=widget.id, warehouse_id=main.id,
                           quantity_sold=10, sold_at=now - timedelta(days=3)),
        models.SalesRecord(product_id=kit.id, warehouse_id=main.id,
                           quantity_sold=6, sold_at=now - timedelta(days=12)),
        models.SalesRecord(product_id=gadget.id, warehouse_id=main.id,
                           quantity_sold=30, sold_at=now - timedelta(days=90)),
        models.SalesRecord(product_id=gadget.id, warehouse_id=east.id,
                           quantity_sold=4, sold_at=now - timedelta(days=1)),
    ])
    db.commit()
    logger.info(f"Seeded demo company '{DEMO_COMPANY}' (id={company.id})")
    return True


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    models.Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        seed(db)
