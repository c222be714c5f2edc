import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wagehire.api.routes import admin, auth, feedback, health, interviews, users
from wagehire.core import config
from wagehire.core.errors import AppError, Internal, ValidationFailed
from wagehire.core.logging_config import setup_logging
from wagehire.db.init_db import init_db

logger = logging.getLogger(__name__)


# ============================================
# LIFESPAN
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_LEVEL, config.LOG_DIR)
    if config.SECRET_KEY == config.DEFAULT_SECRET_KEY:
        logger.warning("SECRET_KEY is not set; using the development default")
    init_db()
    logger.info(f"Wagehire API started: environment={config.ENVIRONMENT}")
    yield


# ============================================
# FASTAPI APP INIT
# ============================================

app = FastAPI(title="Wagehire API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


# ============================================
# ERROR HANDLERS
# ============================================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    detail = errors[0]["msg"] if errors else ValidationFailed.default_detail
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": detail, "code": ValidationFailed.code, "errors": errors},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error: {request.method} {request.url.path}", exc_info=exc)
    error = Internal(str(exc)) if config.is_development() else Internal()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# ============================================
# REGISTER ALL ROUTERS
# ============================================

app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(interviews.router, prefix="/api")
app.include_router(feedback.router, prefix="/api")
app.include_router(admin.router, prefix="/api")
app.include_router(health.router, prefix="/api")


@app.get("/")
def root():
    return {"status": "Wagehire API running"}
