"""
Order Entry API
Order submission, status lookup and reporting for B2B customers
"""

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import uvicorn
from contextlib import asynccontextmanager
import logging
from datetime import datetime
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app import config
from app.database import engine, Base, SessionLocal
from app.limiter import limiter
from app.models import activity_log, order, product, user  # noqa: F401  (register tables)
from app.routers import orders, products, reports, auth
from app.services.user_service import UserService
from app.services.activity_logger import ActivityLogger
from app.utils.error_handler import ErrorHandler, OrderValidationError, StoreError

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

async def bootstrap_admin():
    """Create the initial admin from ADMIN_USERNAME / ADMIN_PASSWORD"""
    if not (config.ADMIN_USERNAME and config.ADMIN_PASSWORD):
        logger.info("ADMIN_USERNAME/ADMIN_PASSWORD not set; skipping admin bootstrap")
        return
    db = SessionLocal()
    try:
        await UserService(db).ensure_admin(config.ADMIN_USERNAME, config.ADMIN_PASSWORD)
    finally:
        db.close()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    logger.info("Starting Order Entry API...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")
    await bootstrap_admin()

    yield

    logger.info("Shutting down Order Entry API...")

app = FastAPI(
    title="Order Entry API",
    description="Order submission, order status lookup and reporting for B2B customers",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["authentication"])
app.include_router(orders.router, prefix="/api/v1/orders", tags=["orders"])
app.include_router(products.router, prefix="/api/v1/products", tags=["products"])
app.include_router(reports.router, prefix="/api/v1/reports", tags=["reports"])

@app.get("/")
@limiter.limit("10/minute")
async def root(request: Request):
    """Service banner with the mounted API areas"""
    return {
        "service": "Order Entry API",
        "version": app.version,
        "endpoints": {
            "orders": "/api/v1/orders",
            "products": "/api/v1/products",
            "reports": "/api/v1/reports",
            "auth": "/api/v1/auth",
        },
        "docs": app.docs_url,
    }

@app.get("/health")
@limiter.limit("30/minute")
async def health_check(request: Request):
    """Liveness plus a round trip to the order store"""
    database = "ok"
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning(f"Health check could not reach the database: {e}")
        database = "unavailable"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "database": database,
        "slack_notifications": "configured" if config.SLACK_WEBHOOK_URL else "disabled",
        "timestamp": datetime.utcnow().isoformat()
    }

@app.exception_handler(OrderValidationError)
async def order_validation_exception_handler(request: Request, exc: OrderValidationError):
    return ErrorHandler.create_error_response(request, exc)

@app.exception_handler(StoreError)
async def store_exception_handler(request: Request, exc: StoreError):
    return ErrorHandler.create_error_response(request, exc)

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log unexpected failures with an error id and record them in the audit trail"""
    response = ErrorHandler.internal_error_response(request, exc)

    db = SessionLocal()
    try:
        await ActivityLogger(db).log_request(
            request,
            action="unhandled_error",
            status_code=500,
            error_message=f"{type(exc).__name__}: {exc}"
        )
    finally:
        db.close()

    return response

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
