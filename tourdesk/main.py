"""
TourDesk Back-Office API - Main application entry point.

Pricing core of a tour operator: seasonal supplier rates in TRY, quotes and
bookings sold in EUR, and client payments checked against each booking total.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from tourdesk.api import bookings, exchange_rates, payments, pricing, seasonal_rates
from tourdesk.api.deps import DbSession
from tourdesk.config import get_settings
from tourdesk.services.errors import PricingError

settings = get_settings()
logger = logging.getLogger("tourdesk")

# Error kind -> HTTP status
ERROR_STATUS = {
    "NotFound": 404,
    "InvalidInput": 400,
    "NoApplicableRate": 422,
    "InvalidRate": 422,
    "PaymentExceedsBalance": 409,
    "Conflict": 409,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(f"Starting {settings.app_name} ({settings.cost_currency} -> {settings.sell_currency})")

    yield

    logger.info(f"Shutting down {settings.app_name}...")


app = FastAPI(
    title=settings.app_name,
    description="""
    ## TourDesk Back-Office API

    - **Quotes**: price hotel rooms, transfers, vehicles, guides and activities for a date
    - **Seasonal rates**: supplier costs per season, one active rate per date
    - **Exchange rates**: dated TRY/EUR history, resolved on the service date
    - **Bookings**: items frozen from quotes, payments capped by the booking total

    ### Tenancy
    Every endpoint is scoped by the `X-Tenant-ID` header.
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PricingError)
async def pricing_error_handler(request: Request, exc: PricingError):
    status_code = ERROR_STATUS.get(exc.kind, 400)
    if exc.kind == "InvalidRate":
        logger.error(f"{request.method} {request.url.path}: {exc.message} {exc.context}")
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"detail": exc.message, "error": exc.kind, "context": exc.context}),
    )


# Include routers
app.include_router(pricing.router, prefix="/pricing", tags=["Pricing"])
app.include_router(seasonal_rates.router, prefix="/seasonal-rates", tags=["Seasonal Rates"])
app.include_router(exchange_rates.router, prefix="/exchange-rates", tags=["Exchange Rates"])
app.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])
app.include_router(payments.router, prefix="/payments", tags=["Payments"])


@app.get("/", tags=["Health"])
async def root():
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": "1.0.0",
    }


@app.get("/health", tags=["Health"])
async def health_check(db: DbSession):
    """Detailed health check."""
    await db.execute(text("SELECT 1"))
    return {
        "status": "healthy",
        "database": "connected",
        "cost_currency": settings.cost_currency,
        "sell_currency": settings.sell_currency,
    }
