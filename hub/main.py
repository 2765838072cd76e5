"""
2B Hub API: catalog, retail POS, B2B orders, firms, notes and settings.
"""
import logging
import sys

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError
from starlette.exceptions import HTTPException as StarletteHTTPException

from hub.core.config import get_settings
from hub.database import engine
from hub.models import Base
from hub.routers import (
    auth, users, products, brands, suppliers,
    firms, sales, b2b_sales, notes, settings as settings_router,
)
from hub.services.errors import HubError

settings = get_settings()

# 1. LOGGING
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

# 2. TABLES
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.app_name,
    description="Internal operations API: pricing, retail and B2B sales, returns and swaps",
    version=settings.app_version,
    debug=settings.debug,
)

# 3. CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 4. ROUTERS
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(products.router, prefix="/api/products", tags=["Products"])
app.include_router(brands.router, prefix="/api/brands", tags=["Brands"])
app.include_router(suppliers.router, prefix="/api/suppliers", tags=["Suppliers"])
app.include_router(firms.router, prefix="/api/firms", tags=["Firms"])
app.include_router(sales.router, prefix="/api/sales", tags=["Retail Sales"])
app.include_router(b2b_sales.router, prefix="/api/b2b-sales", tags=["B2B Sales"])
app.include_router(notes.router, prefix="/api/notes", tags=["Notes"])
app.include_router(settings_router.router, prefix="/api/settings", tags=["Settings"])


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok", "version": settings.app_version}


# --- 5. ERROR HANDLING: every error body is {"error": "<message>"} ---
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{loc}: {first.get('msg')}" if loc else first.get("msg", message)
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(HubError)
async def hub_error_handler(request: Request, exc: HubError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"error": "Duplicate or conflicting record"})


@app.exception_handler(StaleDataError)
async def stale_data_handler(request: Request, exc: StaleDataError):
    logger.warning("Concurrent update on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=409, content={"error": "Record was modified concurrently"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})
