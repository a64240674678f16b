import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings
from .database import engine
from .models.generated import Base
from .routers import bookings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s:%(name)s:%(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if settings.create_tables:
        Base.metadata.create_all(bind=engine)
    logger.info(f"Shop hours {settings.shop_open}-{settings.shop_close}, step {settings.slot_step_minutes}min")
    yield


app = FastAPI(title="Detailing Booking API", lifespan=lifespan)

app.include_router(bookings.router)


@app.get("/health")
def health():
    return {"status": "ok"}
