"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import (
    accounts,
    assets,
    fixed_deposits,
    goals,
    history,
    holdings,
    plans,
    recurring_deposits,
    sips,
    summary,
)
from config import settings
from database import init_db
from logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup."""
    init_db()
    logger.info("Instrument ledger started (environment=%s)", settings.ENVIRONMENT)
    yield


app = FastAPI(
    title="Instrument Ledger",
    description="Lifecycle tracking and valuation of personal financial instruments",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(accounts.router)
app.include_router(assets.router)
app.include_router(plans.router)
app.include_router(goals.router)
app.include_router(fixed_deposits.router)
app.include_router(recurring_deposits.router)
app.include_router(sips.router)
app.include_router(holdings.router)
app.include_router(history.router)
app.include_router(summary.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
