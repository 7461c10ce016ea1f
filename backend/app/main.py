"""
Main FastAPI application entry point.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.api import analytics, customers, forwarders, orders, shipping
from app.db.database import engine, Base, settings
from app.services.errors import ServiceError
from app import models  # noqa: F401

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Parcel Forwarding Platform",
    description="Shipping rates, order tracking and analytics for parcel forwarders",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


# Include routers
app.include_router(customers.router, prefix="/api/customers", tags=["customers"])
app.include_router(forwarders.router, prefix="/api/forwarders", tags=["forwarders"])
app.include_router(shipping.router, prefix="/api/shipping", tags=["shipping"])
app.include_router(orders.router, prefix="/api/orders", tags=["orders"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])


@app.get("/")
async def root():
    return {"message": "Parcel Forwarding Platform API"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
