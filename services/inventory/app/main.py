"""
    Inventory Service API

    This module implements a FastAPI-based microservice that reports low-stock
    alerts for a company across all of its warehouses, backed by PostgreSQL.

    The service exposes:
    - Low-stock alerts: products below their type threshold that are still selling
    - Health endpoint: Provides service health status for monitoring and orchestration

    Errors are returned as {"kind": ..., "message": ...} bodies; internal
    details are logged, never returned.
"""
import logging
from fastapi import Depends, FastAPI, Path, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import models, schemas
from .alerts import AlertPolicy, CrudDataSource, compute_low_stock_alerts
from .config import Settings, get_settings
from .database import SessionLocal, engine
from .errors import AlertsError, ValidationError

logging.basicConfig(level=get_settings().LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create database tables
models.Base.metadata.create_all(bind=engine)

app = FastAPI(title="inventory-service")


def get_data_source() -> CrudDataSource:
    """Dependency providing the database-backed data source."""
    return CrudDataSource(SessionLocal)


def get_alert_policy(settings: Settings = Depends(get_settings)) -> AlertPolicy:
    """Dependency providing the alert policy built from settings."""
    return AlertPolicy.from_settings(settings)


def error_response(status_code: int, kind: str, message: str) -> JSONResponse:
    body = schemas.ErrorResponse(kind=kind, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(AlertsError)
async def alerts_error_handler(request: Request, exc: AlertsError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc.status_code, exc.kind, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = ", ".join(".".join(str(p) for p in err.get("loc", ())) for err in exc.errors())
    error = ValidationError(f"Invalid request parameters: {fields}")
    return error_response(error.status_code, error.kind, error.message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", "An unexpected error occurred"
    )


@app.get("/healthz", response_model=dict)
def health():
    """
    Health check endpoint for the inventory service.

    This endpoint is typically used by orchestrators (like Kubernetes) or load balancers
    to determine if the service is running and ready to accept requests.

    Returns:
        dict: A dictionary containing the health status of the service.
            - status (str): "healthy" if the service is operational.

    Example:
        GET /healthz
        Response: {"status": "healthy"}
    """
    return {"status": "healthy"}


@app.get(
    "/companies/{company_id}/alerts/low-stock",
    response_model=schemas.LowStockAlertResponse,
    responses={
        400: {"model": schemas.ErrorResponse},
        404: {"model": schemas.ErrorResponse},
        503: {"model": schemas.ErrorResponse},
    },
)
async def get_low_stock_alerts(
    company_id: int = Path(..., ge=1),
    source: CrudDataSource = Depends(get_data_source),
    policy: AlertPolicy = Depends(get_alert_policy),
):
    """
    List low-stock alerts for a company across all of its warehouses.

    Args:
        company_id: ID of the company
        source: Data source for warehouses, stock, sales and suppliers (injected)
        policy: Threshold and sales-window rules (injected)

    Returns:
        Alerts grouped by warehouse, then ordered by product ID, with their count

    Raises:
        NotFoundError: 404 if the company does not exist
        DependencyFailure: 503 if warehouses or stock levels cannot be read
    """
    alerts, total = await compute_low_stock_alerts(company_id, source, policy)
    return schemas.LowStockAlertResponse(alerts=alerts, total_alerts=total)
