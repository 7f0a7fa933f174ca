"""
SQLAlchemy ORM models for the Inventory service.

Defines the database schema for companies, warehouses, products, stock levels,
sales history and suppliers.
"""
from datetime import datetime
from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, String, Table, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from .database import Base


# Many-to-many link between products and suppliers
product_suppliers = Table(
    "product_suppliers",
    Base.metadata,
    Column("product_id", Integer, ForeignKey("products.id"), primary_key=True),
    Column("supplier_id", Integer, ForeignKey("suppliers.id"), primary_key=True),
    Column("is_primary", Boolean, nullable=False, default=False),
)


class Company(Base):
    """
    Company owning one or more warehouses.

    Attributes:
        id (int): Primary key
        name (str): Company name
    """
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)

    warehouses = relationship("Warehouse", back_populates="company")


class Warehouse(Base):
    """
    Warehouse belonging to exactly one company.

    Attributes:
        id (int): Primary key
        company_id (int): Owning company
        name (str): Warehouse name
    """
    __tablename__ = "warehouses"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String, nullable=False)

    company = relationship("Company", back_populates="warehouses")


class Product(Base):
    """
    Product catalog entry.

    Attributes:
        id (int): Primary key
        name (str): Product name
        sku (str): Stock Keeping Unit (unique)
        product_type (str): Category that selects the low-stock threshold
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    sku = Column(String, unique=True, index=True, nullable=False)
    product_type = Column(String, nullable=False, default="simple")

    suppliers = relationship("Supplier", secondary=product_suppliers, back_populates="products")


class InventoryRecord(Base):
    """
    Stock level of one product in one warehouse.

    Attributes:
        id (int): Primary key
        product_id (int): Product held
        warehouse_id (int): Warehouse holding it
        quantity (int): Units on hand
        updated_at (datetime): Last time the quantity changed
    """
    __tablename__ = "inventory"
    __table_args__ = (
        UniqueConstraint("product_id", "warehouse_id", name="uq_inventory_product_warehouse"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    product = relationship("Product")


class SalesRecord(Base):
    """
    Historical sale of a product from a warehouse. Rows are only ever appended.

    Attributes:
        id (int): Primary key
        product_id (int): Product sold
        warehouse_id (int): Warehouse it shipped from
        quantity_sold (int): Units sold
        sold_at (datetime): When the sale happened
    """
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"), nullable=False, index=True)
    quantity_sold = Column(Integer, nullable=False)
    sold_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


class Supplier(Base):
    """
    Supplier that products can be reordered from.

    Attributes:
        id (int): Primary key
        name (str): Supplier name
        contact_email (str): Ordering contact
    """
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    contact_email = Column(String, nullable=True)

    products = relationship("Product", secondary=product_suppliers, back_populates="suppliers")
