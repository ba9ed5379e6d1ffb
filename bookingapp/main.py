import logging

from fastapi import FastAPI

from bookingapp.core.config import settings
from bookingapp.core.logging import setup_logging
from bookingapp.db import models  # noqa: F401  registers tables on Base.metadata
from bookingapp.db.base import Base, engine
from bookingapp.api.routes import auth
from bookingapp.api.routes import providers as providers_router
from bookingapp.api.routes import services as services_router
from bookingapp.api.routes import schedules as schedules_router
from bookingapp.api.routes import availability as availability_router
from bookingapp.api.routes import bookings as bookings_router
from bookingapp.api.routes import waitlist as waitlist_router

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)


@app.on_event("startup")
def startup():
    setup_logging()
    Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.APP_NAME} started")


@app.get("/")
def root():
    return {"message": "Service Booking Scheduler API running"}


app.include_router(auth.router, prefix="/api/auth")
app.include_router(providers_router.router)
app.include_router(services_router.router)
app.include_router(schedules_router.router)
app.include_router(availability_router.router)
app.include_router(bookings_router.router)
app.include_router(waitlist_router.router)
