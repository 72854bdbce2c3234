"""
API Backend - Main Application
Expense records: CRUD, search and aggregation over a file or database store
"""
import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .errors import (
    ConflictError, FieldError, InvalidRangeError, NotFoundError, StoreError, ValidationError
)
from .responses import utc_timestamp, validation_error_body
from .routers import admin, categories, expenses
from .stores import build_stores

# Configure logging
structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
    ]
)
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Expense API",
                environment=settings.ENVIRONMENT,
                backend=settings.STORE_BACKEND)

    stores = build_stores(settings)
    await stores.open()
    app.state.stores = stores

    logger.info("Expense API started successfully")

    yield

    # Shutdown
    logger.info("Shutting down Expense API")
    await stores.close()


# OpenAPI Tags
openapi_tags = [
    {"name": "Expenses", "description": "Expense records, search and aggregations"},
    {"name": "Categories", "description": "Named groupings for expenses"},
    {"name": "Admin", "description": "Shared-secret protected section"},
]

# Create FastAPI app
app = FastAPI(
    title="Expense API",
    description="""
## Expense records API

| Endpoint | Description |
|----------|-------------|
| `GET /expenses` | List all expenses |
| `GET /expenses/search` | Filter by category, amount range and date |
| `GET /expenses/summary-by-category` | Totals per category |
| `GET /expenses/average-daily` | Total and daily average over a date range |
| `POST/PUT/PATCH/DELETE /expenses/{id}` | Create, replace, patch, delete |
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=openapi_tags,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def access_log(request: Request, call_next):
    start = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        logger.info("Request handled",
                    method=request.method,
                    path=request.url.path,
                    status_code=status_code,
                    elapsed_ms=round((time.perf_counter() - start) * 1000, 1))


# Exception handlers
@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content=validation_error_body(exc.errors))


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        names = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append(FieldError(".".join(names) or "body", error.get("msg", "Invalid value")))
    return JSONResponse(status_code=400, content=validation_error_body(errors))


@app.exception_handler(InvalidRangeError)
async def invalid_range_exception_handler(request: Request, exc: InvalidRangeError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": f"{exc.entity} not found"})


@app.exception_handler(ConflictError)
async def conflict_exception_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(StoreError)
async def store_exception_handler(request: Request, exc: StoreError):
    error_id = str(uuid.uuid4())
    logger.error("Store failure",
                 error_id=error_id,
                 path=request.url.path,
                 method=request.method,
                 error=str(exc),
                 detail=exc.detail,
                 exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error_id": error_id}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    error_id = str(uuid.uuid4())
    logger.error("Unhandled exception",
                 error_id=error_id,
                 path=request.url.path,
                 method=request.method,
                 error=str(exc),
                 exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error_id": error_id}
    )


# Include routers
app.include_router(expenses.router, prefix="/expenses", tags=["Expenses"])
app.include_router(categories.router, prefix="/categories", tags=["Categories"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "expense-api",
        "timestamp": utc_timestamp(),
        "environment": settings.ENVIRONMENT,
        "backend": settings.STORE_BACKEND
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API info"""
    return {
        "name": "Expense API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }


def run_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """Run the API server."""
    import uvicorn
    uvicorn.run(
        "src.expense_api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    run_server()
