"""Shared fixtures for Inventory service tests."""

import os

os.environ["DATABASE_URL"] = "sqlite://"

from collections import Counter
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app import models, schemas
from app.alerts import AlertPolicy, CrudDataSource
from app.database import build_engine
from app.errors import DependencyFailure, NotFoundError

NOW = datetime(2026, 10, 1, 12, 0, 0)


class FakeDataSource:
    """In-memory data source with optional injected failures."""

    def __init__(self):
        self.companies = {}
        self.inventory = {}
        self.sales = {}
        self.suppliers = {}
        self.failures = {}
        self.calls = Counter()

    # --- builders ---

    def add_company(self, company_id):
        self.companies.setdefault(company_id, [])

    def add_warehouse(self, company_id, warehouse_id, name=None):
        warehouse = schemas.Warehouse(
            id=warehouse_id, company_id=company_id, name=name or f"Warehouse {warehouse_id}"
        )
        self.companies.setdefault(company_id, []).append(warehouse)
        self.inventory.setdefault(warehouse_id, [])
        return warehouse

    def add_stock(self, warehouse_id, product_id, quantity, product_type="simple"):
        product = schemas.Product(
            id=product_id, name=f"Product {product_id}", sku=f"SKU-{product_id:03d}",
            product_type=product_type,
        )
        stock = schemas.StockLevel(
            product_id=product_id, warehouse_id=warehouse_id, quantity=quantity
        )
        self.inventory.setdefault(warehouse_id, []).append((stock, product))
        return product

    def add_sale(self, product_id, warehouse_id, quantity, sold_at):
        self.sales.setdefault((product_id, warehouse_id), []).append((sold_at, quantity))

    def add_supplier(self, product_id, supplier_id, is_primary=False):
        self.suppliers.setdefault(product_id, []).append(schemas.SupplierCandidate(
            id=supplier_id, name=f"Supplier {supplier_id}",
            contact_email=f"orders@supplier{supplier_id}.com", is_primary=is_primary,
        ))

    def fail(self, method, times=None, key=None, error=DependencyFailure):
        """Make `method` raise `error`; `times=None` fails forever."""
        self.failures[method] = (times, key, error)

    # --- data source interface ---

    def _maybe_fail(self, method, key):
        self.calls[method] += 1
        if method not in self.failures:
            return
        times, only_key, error = self.failures[method]
        if only_key is not None and only_key != key:
            return
        if times is None:
            raise error(f"{method} unavailable")
        if times > 0:
            self.failures[method] = (times - 1, only_key, error)
            raise error(f"{method} unavailable")

    def list_warehouses(self, company_id):
        self._maybe_fail("list_warehouses", company_id)
        if company_id not in self.companies:
            raise NotFoundError(f"Company {company_id} not found")
        return list(self.companies[company_id])

    def list_inventory_with_product(self, warehouse_id):
        self._maybe_fail("list_inventory_with_product", warehouse_id)
        return list(self.inventory.get(warehouse_id, []))

    def sales_activity(self, product_id, warehouse_id, since, until):
        self._maybe_fail("sales_activity", (product_id, warehouse_id))
        in_window = [
            qty for sold_at, qty in self.sales.get((product_id, warehouse_id), [])
            if since <= sold_at <= until
        ]
        return schemas.SalesActivity(sale_count=len(in_window), total_sold=sum(in_window))

    def suppliers_for_product(self, product_id):
        self._maybe_fail("suppliers_for_product", product_id)
        return list(self.suppliers.get(product_id, []))


@pytest.fixture
def source():
    return FakeDataSource()


@pytest.fixture
def session_factory():
    engine = build_engine("sqlite://")
    models.Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    from app.main import app, get_alert_policy, get_data_source

    app.dependency_overrides[get_data_source] = lambda: CrudDataSource(session_factory)
    app.dependency_overrides[get_alert_policy] = lambda: AlertPolicy(max_concurrency=1)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
