import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .routers import jobs, quotes

logger = logging.getLogger("washdesk")

app = FastAPI(
    title=settings.APP_NAME,
    description="Quote calculator and job booking for a window washing crew",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(quotes.router, prefix="/api")
app.include_router(jobs.router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok", "app": "washdesk"}


@app.on_event("startup")
def check_configuration():
    """Warn at startup about integrations that will refuse submissions."""
    missing = (
        settings.missing_record_settings()
        + settings.missing_calendar_settings()
    )
    if missing:
        logger.warning("Job submissions will fail until these are set: %s", ", ".join(missing))
    if settings.missing_smtp_settings():
        logger.warning("SMTP not configured: job emails are disabled")
