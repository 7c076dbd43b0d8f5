# app/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import AppError, DependencyError
from app.core.logging_config import configure_logging
from app.api.v1.api import api_router
from app.db.init_db import init_db, seed_initial_data
from app.db.session import SessionLocal

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A database we cannot reach is fatal; seeding problems are not.
    try:
        init_db()
    except Exception:
        logger.exception("Error connecting to the database")
        raise
    logger.info("Database ready: %s", settings.database_url.split("@")[-1])

    db = SessionLocal()
    try:
        seed_initial_data(db)
    finally:
        db.close()

    yield


# ---------- ERROR ENVELOPE ----------

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # submitted values (passwords included) are never echoed back
    errors = jsonable_encoder(
        [{k: v for k, v in e.items() if k not in ("input", "ctx")} for e in exc.errors()]
    )
    fields = sorted({str(e["loc"][-1]) for e in errors if e.get("loc")})
    message = "Invalid request"
    if any(e.get("type") == "missing" for e in errors):
        message = "All fields are required!"
    elif fields:
        message = f"Invalid value for: {', '.join(fields)}"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": message, "errors": errors},
    )


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    error = DependencyError("Something went wrong", error=str(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def create_application() -> FastAPI:
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        lifespan=lifespan,
    )

    # ---------- CORS ----------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.backend_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    @app.get("/", include_in_schema=False)
    def root():
        return {"message": "server is up and running!"}

    @app.get("/healthz", include_in_schema=False)
    def healthz():
        return {"status": "ok"}

    # ---------- ROUTERS ----------
    app.include_router(api_router, prefix=settings.api_prefix)

    return app


app = create_application()
