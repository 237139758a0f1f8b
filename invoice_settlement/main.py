"""
Invoice Settlement Engine: FastAPI application.

This is the entry point for the application. Routers and
error handlers are registered here.
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from invoice_settlement.config import get_settings
from invoice_settlement.exceptions import SettlementError
from invoice_settlement.logging_config import configure_logging
from invoice_settlement.api.health import router as health_router
from invoice_settlement.api.invoices import router as invoices_router
from invoice_settlement.api.ledger import router as ledger_router

settings = get_settings()
configure_logging()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Keeps invoice status and the double-entry ledger in step",
)


@app.exception_handler(SettlementError)
async def settlement_error_handler(request: Request, exc: SettlementError):
    """Render engine errors as {error_code, message, details, retryable}."""
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(exc.to_dict()),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Schema failures use the same envelope as engine validation errors."""
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder({
            "error_code": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": {"errors": exc.errors()},
            "retryable": False,
        }),
    )


# Register routers
app.include_router(health_router)
app.include_router(invoices_router)
app.include_router(ledger_router)
