"""
Low-stock alert computation.

For every warehouse of a company, each stock level is checked against the
threshold for its product type. Products below threshold with at least one
sale recorded in the trailing sales window become alerts, with an estimate of the
days left before stockout and the supplier to reorder from.

Lookups are blocking data-access calls; they run in worker threads and are
fanned out with asyncio.gather, bounded by a semaphore. Alerts are sorted once
all pairs have been evaluated, so evaluation order never affects the result.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from functools import wraps
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import crud, schemas
from .config import Settings
from .errors import DependencyFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlertPolicy:
    """
    Rules applied when computing alerts.

    Attributes:
        thresholds: product_type -> low-stock threshold
        default_threshold: threshold for product types missing from the table
        window_days: length of the trailing sales window
        lookup_retries: extra attempts for sales and supplier lookups
        max_concurrency: maximum number of lookups in flight
    """
    thresholds: Dict[str, int] = field(default_factory=lambda: {"simple": 20, "bundle": 10})
    default_threshold: int = 15
    window_days: int = 30
    lookup_retries: int = 2
    max_concurrency: int = 4

    @classmethod
    def from_settings(cls, settings: Settings) -> "AlertPolicy":
        return cls(
            thresholds=dict(settings.LOW_STOCK_THRESHOLDS),
            default_threshold=settings.DEFAULT_LOW_STOCK_THRESHOLD,
            window_days=settings.SALES_WINDOW_DAYS,
            lookup_retries=settings.ALERTS_LOOKUP_RETRIES,
            max_concurrency=settings.ALERTS_MAX_CONCURRENCY,
        )

    def threshold_for(self, product_type: Optional[str]) -> int:
        return self.thresholds.get(product_type, self.default_threshold)


def _wrap_db_errors(func: Callable) -> Callable:
    """
    Turn SQLAlchemy errors raised by a lookup into DependencyFailure.

    The original error is logged; only the lookup name reaches the caller.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error(f"Database error in {func.__name__}: {e}")
            raise DependencyFailure(f"Lookup '{func.__name__}' failed") from e
    return wrapper


class CrudDataSource:
    """
    Data source backed by the database.

    Each call opens its own short-lived session so calls can run
    concurrently in worker threads.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    @_wrap_db_errors
    def list_warehouses(self, company_id: int) -> List[schemas.Warehouse]:
        with self.session_factory() as db:
            return [
                schemas.Warehouse.model_validate(w)
                for w in crud.list_warehouses(db, company_id)
            ]

    @_wrap_db_errors
    def list_inventory_with_product(
        self, warehouse_id: int
    ) -> List[Tuple[schemas.StockLevel, schemas.Product]]:
        with self.session_factory() as db:
            return [
                (schemas.StockLevel.model_validate(record), schemas.Product.model_validate(product))
                for record, product in crud.list_inventory_with_product(db, warehouse_id)
            ]

    @_wrap_db_errors
    def sales_activity(
        self, product_id: int, warehouse_id: int, since: datetime, until: datetime
    ) -> schemas.SalesActivity:
        with self.session_factory() as db:
            sale_count, total_sold = crud.sales_activity(db, product_id, warehouse_id, since, until)
            return schemas.SalesActivity(sale_count=sale_count, total_sold=total_sold)

    @_wrap_db_errors
    def suppliers_for_product(self, product_id: int) -> List[schemas.SupplierCandidate]:
        with self.session_factory() as db:
            return [
                schemas.SupplierCandidate(
                    id=supplier.id,
                    name=supplier.name,
                    contact_email=supplier.contact_email,
                    is_primary=is_primary,
                )
                for supplier, is_primary in crud.suppliers_for_product(db, product_id)
            ]


def estimate_days_until_stockout(quantity: int, total_sold: int, window_days: int) -> Optional[int]:
    """
    Days of stock left at the average daily sale rate over the window.

    The average is total_sold / window_days; the result is
    floor(quantity / average), computed in integers. Returns None when the
    average is zero.
    """
    if total_sold <= 0:
        return None
    return max(0, (quantity * window_days) // total_sold)


def pick_supplier(candidates: Sequence[schemas.SupplierCandidate]) -> Optional[schemas.Supplier]:
    """Primary supplier first, then the lowest supplier ID."""
    if not candidates:
        return None
    chosen = min(candidates, key=lambda s: (not s.is_primary, s.id))
    return chosen.public()


def build_alert(
    warehouse: schemas.Warehouse,
    stock: schemas.StockLevel,
    product: schemas.Product,
    threshold: int,
    total_sold: int,
    supplier: Optional[schemas.Supplier],
    window_days: int,
) -> schemas.LowStockAlert:
    return schemas.LowStockAlert(
        product_id=product.id,
        product_name=product.name,
        sku=product.sku,
        warehouse_id=warehouse.id,
        warehouse_name=warehouse.name,
        current_stock=stock.quantity,
        threshold=threshold,
        days_until_stockout=estimate_days_until_stockout(stock.quantity, total_sold, window_days),
        supplier=supplier,
    )


class LowStockAlertService:
    """
    Computes low-stock alerts for a company.

    Args:
        source: Object providing list_warehouses, list_inventory_with_product,
            sales_activity and suppliers_for_product
        policy: Threshold, window, retry and concurrency rules
    """

    def __init__(self, source, policy: Optional[AlertPolicy] = None):
        self.source = source
        self.policy = policy or AlertPolicy()

    async def compute(
        self, company_id: int, now: Optional[datetime] = None
    ) -> List[schemas.LowStockAlert]:
        """
        Compute the ordered alerts for a company.

        Alerts are grouped by warehouse in the order the warehouses were
        listed, then ordered by product ID.

        Raises:
            NotFoundError: if the company does not exist
            DependencyFailure: if warehouses or stock levels cannot be listed
        """
        now = now or datetime.utcnow()
        since = now - timedelta(days=self.policy.window_days)
        limiter = asyncio.Semaphore(self.policy.max_concurrency)

        warehouses = await self._run(limiter, self.source.list_warehouses, company_id)
        stock_by_warehouse = await asyncio.gather(*[
            self._run(limiter, self.source.list_inventory_with_product, w.id)
            for w in warehouses
        ])

        rank = {w.id: i for i, w in enumerate(warehouses)}
        candidates = []
        for warehouse, rows in zip(warehouses, stock_by_warehouse):
            for stock, product in rows:
                threshold = self.policy.threshold_for(product.product_type)
                if stock.quantity >= threshold:
                    continue
                candidates.append((warehouse, stock, product, threshold))

        results = await asyncio.gather(*[
            self._evaluate(limiter, warehouse, stock, product, threshold, since, now)
            for warehouse, stock, product, threshold in candidates
        ])
        alerts = sorted(
            (alert for alert in results if alert is not None),
            key=lambda a: (rank[a.warehouse_id], a.product_id),
        )

        logger.info(
            f"Computed {len(alerts)} low stock alerts for company {company_id} "
            f"across {len(warehouses)} warehouses"
        )
        return alerts

    async def _evaluate(
        self,
        limiter: asyncio.Semaphore,
        warehouse: schemas.Warehouse,
        stock: schemas.StockLevel,
        product: schemas.Product,
        threshold: int,
        since: datetime,
        now: datetime,
    ) -> Optional[schemas.LowStockAlert]:
        try:
            activity = await self._run_with_retries(
                limiter, self.source.sales_activity, product.id, warehouse.id, since, now
            )
        except Exception:
            logger.warning(
                f"Sales lookup failed for product {product.id} in warehouse {warehouse.id}; "
                f"treating as no recent activity",
                exc_info=True,
            )
            return None

        if activity.sale_count <= 0:
            logger.debug(
                f"Skipping product {product.id} in warehouse {warehouse.id} - no recent sales"
            )
            return None

        try:
            candidates = await self._run_with_retries(
                limiter, self.source.suppliers_for_product, product.id
            )
            supplier = pick_supplier(candidates)
        except Exception:
            logger.warning(
                f"Supplier lookup failed for product {product.id}; omitting supplier",
                exc_info=True,
            )
            supplier = None

        return build_alert(
            warehouse, stock, product, threshold, activity.total_sold, supplier,
            self.policy.window_days,
        )

    async def _run(self, limiter: asyncio.Semaphore, func: Callable, *args) -> Any:
        """Run a blocking lookup in a worker thread once a slot is free."""
        async with limiter:
            return await asyncio.to_thread(func, *args)

    async def _run_with_retries(self, limiter: asyncio.Semaphore, func: Callable, *args) -> Any:
        """Run a lookup, retrying DependencyFailure up to lookup_retries times."""
        attempts = self.policy.lookup_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return await self._run(limiter, func, *args)
            except DependencyFailure:
                if attempt == attempts:
                    raise
                name = getattr(func, "__name__", "lookup")
                logger.warning(f"Retrying {name} (attempt {attempt + 1} of {attempts})")


async def compute_low_stock_alerts(
    company_id: int,
    source,
    policy: Optional[AlertPolicy] = None,
    now: Optional[datetime] = None,
) -> Tuple[List[schemas.LowStockAlert], int]:
    """
    Compute the low-stock alerts for a company.

    Returns:
        Tuple of (alerts, total_alerts)
    """
    alerts = await LowStockAlertService(source, policy).compute(company_id, now=now)
    return alerts, len(alerts)
