import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .redis_client import redis_client
from .routers import admin, public
from .services.errors import AgendaError

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(title="Agenda Booking API")

app.include_router(public.router)
app.include_router(admin.router)


@app.exception_handler(AgendaError)
async def agenda_error_handler(request: Request, exc: AgendaError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.code})


@app.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError:
        logger.exception("Health check: database unavailable")
        db_ok = False

    redis_ok = None
    if redis_client is not None:
        try:
            redis_ok = bool(redis_client.ping())
        except RedisError:
            redis_ok = False

    return {"database": db_ok, "redis": redis_ok}
