"""FastAPI application entry point."""

import logging
import os
import sys
import tomllib
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Must run before anything reads environment variables
load_dotenv()

# main.py is at /app/src/api/main.py, src is two levels up
_src_path = Path(__file__).parent.parent
sys.path.insert(0, str(_src_path))

from adapter.mongodb.connection import close_mongodb_client, get_database
from adapter.mongodb.indexes import ensure_all_indexes
from api.routes import health, users
from utils.config import get_settings
from utils.logging import setup_structured_logging

setup_structured_logging()

logger = logging.getLogger(__name__)

# pyproject.toml is the single source of truth for the version
_project_root = _src_path.parent
with open(_project_root / "pyproject.toml", "rb") as f:
    VERSION = tomllib.load(f)["project"]["version"]

SERVICE_NAME = "User Management API"
API_PREFIX = "/api/v1"

ERR_PARSE_BODY = users.ERR_PARSE_BODY
ERR_INVALID_PARAMS = "invalid request parameters"
ERR_INTERNAL = "internal server error"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: fail fast on bad config, prepare indexes, close the client."""
    settings = get_settings()

    db = get_database()
    if db is not None:
        if ensure_all_indexes(db):
            logger.info("MongoDB indexes verified/created successfully")
        else:
            logger.warning("Failed to create some MongoDB indexes")
    else:
        logger.warning("MongoDB unavailable, skipping index creation",
                       extra={"database": settings.mongo_db_name})

    yield

    close_mongodb_client()


app = FastAPI(
    title=SERVICE_NAME,
    description="CRUD API for user records stored in MongoDB",
    version=VERSION,
    lifespan=lifespan,
)

# "*" disables credentials; browsers reject credentials with a wildcard origin
cors_origins_env = os.getenv("CORS_ORIGINS", "*")
if cors_origins_env == "*":
    cors_origins = ["*"]
    allow_credentials = False
else:
    cors_origins = [origin.strip() for origin in cors_origins_env.split(",") if origin.strip()]
    allow_credentials = True

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Render binding failures as 400 with the error envelope."""
    errors = exc.errors()
    in_body = any(tuple(err.get("loc", ()))[:1] == ("body",) for err in errors)
    message = ERR_PARSE_BODY if in_body else ERR_INVALID_PARAMS

    logger.warning(message, extra={
        "method": request.method,
        "path": request.url.path,
        "error": str(errors)[:500],
    })
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTPException detail as the error envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Anything a route did not map still leaves as the error envelope."""
    logger.error(ERR_INTERNAL, exc_info=exc, extra={
        "method": request.method,
        "path": request.url.path,
        "error_type": type(exc).__name__,
    })
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": ERR_INTERNAL},
    )


app.include_router(health.router)
app.include_router(users.router, prefix=API_PREFIX)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        access_log=False,
        timeout_graceful_shutdown=10,
    )
