import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from kryos import models
from kryos.config import get_settings
from kryos.database import engine
from kryos.errors import KryosError
from kryos.logging_config import configure_logging
from kryos.schemas.responses import ErrorResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(get_settings().LOG_LEVEL)
    # Create tables
    models.Base.metadata.create_all(bind=engine)
    logger.info("Kryos API started", extra={"settings": repr(get_settings())})
    yield


app = FastAPI(
    title="Kryos Payments API",
    description="Payment orders, signature verification, transaction history and admin approval",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(KryosError)
async def kryos_error_handler(request: Request, exc: KryosError):
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        exc.message,
        extra={"path": request.url.path, "status_code": exc.status_code, "error_detail": exc.detail},
    )
    body = ErrorResponse(error=exc.message, detail=exc.detail)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "kryos-api"}


from kryos.routers import admin, media, payments, users  # noqa: E402
app.include_router(payments.router, prefix="/api/v1/payments", tags=["payments"])
app.include_router(admin.router, prefix="/api/v1/admin", tags=["admin"])
app.include_router(users.router, prefix="/api/v1/users", tags=["users"])
app.include_router(media.router, prefix="/api/v1/media", tags=["media"])
