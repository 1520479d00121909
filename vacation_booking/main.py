# vacation_booking/main.py

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vacation_booking.config import ALLOWED_ORIGINS
from vacation_booking.logging_config import setup_logging
from vacation_booking.middleware import RequestIDMiddleware
from vacation_booking.routes.bookings import router as bookings_router
from vacation_booking.routes.health import router as health_router
from vacation_booking.routes.listings import router as listings_router
from vacation_booking.routes.metrics import router as metrics_router
from vacation_booking.routes.payment_webhook import router as payment_webhook_router
from vacation_booking.routes.reviews import router as reviews_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

API_PREFIX = "/api/v1"

app = FastAPI(
    title="Vacation Booking API",
    description="Pricing, availability and booking lifecycle for vacation rentals",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(bookings_router, prefix=API_PREFIX, tags=["Bookings"])
app.include_router(listings_router, prefix=API_PREFIX, tags=["Listings"])
app.include_router(reviews_router, prefix=API_PREFIX, tags=["Reviews"])
app.include_router(payment_webhook_router, prefix=API_PREFIX, tags=["Payments"])
