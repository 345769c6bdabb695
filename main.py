"""Main FastAPI application"""
import os
import logging
import logging.config
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from routes import router as api_router
from services.store import connect_store
from services.expenses_service import seed_initial_data
from starlette.exceptions import HTTPException as StarletteHTTPException

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

# --- Unified Logging Configuration with Rich ---
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(name)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "default": {
            "class": "rich.logging.RichHandler",
            "formatter": "default",
            "level": "DEBUG",
            "rich_tracebacks": True,
            "show_time": True,
            "show_path": False,
            "log_time_format": "%Y-%m-%d %H:%M:%S",
            "markup": False
        },
    },
    "loggers": {
        "uvicorn": {
             "handlers": ["default"],
             "level": "INFO",
             "propagate": False,
        },
        "uvicorn.error": {
            "handlers": ["default"],
            "level": "INFO",
            "propagate": False,
        },
        "uvicorn.access": {
            "handlers": ["default"],
            "level": "INFO",
            "propagate": False,
        },
        "": { # Root logger for our application
            "handlers": ["default"],
            "level": "INFO",
            "propagate": False,
        },
    },
}

logging.config.dictConfig(LOGGING_CONFIG)

logger = logging.getLogger(__name__)

load_dotenv() # Searches current dir and parents

MONGODB_URI = os.getenv("MONGODB_URI")
DB_NAME = os.getenv("DB_NAME", "expense_tracker")
MONGODB_TIMEOUT_MS = int(os.getenv("MONGODB_TIMEOUT_MS", "2000"))
SEED_SAMPLE_DATA = os.getenv("SEED_SAMPLE_DATA", "true").lower() == "true"
PORT = int(os.getenv("PORT", "5000"))
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]
RATE_LIMIT = os.getenv("RATE_LIMIT", "60/minute")
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "false").lower() == "true"

# Application state to hold the expense store
app_state = {}

# --- Rate Limiter Setup ---
limiter = Limiter(key_func=get_remote_address, default_limits=[RATE_LIMIT], enabled=RATE_LIMIT_ENABLED)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: MongoDB if reachable, otherwise in-memory
    app_state["expense_store"] = await connect_store(MONGODB_URI, DB_NAME, timeout_ms=MONGODB_TIMEOUT_MS)
    if SEED_SAMPLE_DATA:
        await seed_initial_data(app_state["expense_store"])
    logger.info(f"Configuration: SEED_SAMPLE_DATA = {SEED_SAMPLE_DATA}, RATE_LIMIT_ENABLED = {RATE_LIMIT_ENABLED}")

    yield # Application runs here

    # Shutdown
    store = app_state.pop("expense_store", None)
    if store is not None:
        logger.info("Closing database connection...")
        store.close()

app = FastAPI(
    title="Expense Tracker API",
    description="API for recording expenses and summarizing them by date range and category.",
    version="0.1.0",
    lifespan=lifespan
)

# --- Error responses as {"message": ...} ---
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=getattr(exc, "headers", None))

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"message": "Invalid request body or parameters."})

# SlowAPIMiddleware calls this handler without awaiting it, so it must stay sync
@app.exception_handler(RateLimitExceeded)
def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)}: {exc.detail}")
    return JSONResponse(status_code=429, content={"message": f"Rate limit exceeded: {exc.detail}"})

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"message": "Server error"})

app.state.limiter = limiter

# --- Middleware (Order Matters) ---
# 1. Rate Limiter Middleware (no-op unless RATE_LIMIT_ENABLED)
app.add_middleware(SlowAPIMiddleware)
# 2. CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api", tags=["api"])

# Make app state accessible via middleware
@app.middleware("http")
async def add_app_config_to_request(request: Request, call_next):
    """Adds the expense store to the request state."""
    request.state.expense_store = app_state.get("expense_store")
    response = await call_next(request)
    return response

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=PORT,
    )
