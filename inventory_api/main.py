from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import uvicorn

from inventory_api.config import get_settings
from inventory_api.database import engine, Base
from inventory_api.api import auth, health, products, stocks, warehouses
from inventory_api.api.errors import register_exception_handlers

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info("Starting up application...")

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")

    yield

    logger.info("Shutting down application...")


app = FastAPI(
    title=settings.APP_NAME,
    description="""
    Backend for warehouse inventory management.

    - **Products**: catalogue items with unique article numbers and min/max stock levels
    - **Warehouses**: storage sites with a fixed capacity and ACTIVE/INACTIVE status
    - **Warehouse stocks**: quantity of a product held in a warehouse
    - **Auth**: username/password registration and login

    ## Rules

    - Reserved quantity never exceeds current quantity
    - The total quantity stored in a warehouse never exceeds its capacity
    - Products and warehouses referenced by stock records cannot be deleted
    - A warehouse holding stock cannot be switched from ACTIVE to INACTIVE

    ## Errors

    Every failure returns `{status, message, errors}`. `errors` maps field
    names to messages for validation failures (400) and carries the reason
    for business-rule failures (400, 404, 409).
    """,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include API routers
app.include_router(health.router, prefix="/api")
app.include_router(auth.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(warehouses.router, prefix="/api")
app.include_router(stocks.router, prefix="/api")


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/api/health/"
    }


def run():
    """Serve the application with uvicorn."""
    uvicorn.run("inventory_api.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
