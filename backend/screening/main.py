"""FastAPI entry point for the address screening service."""

from __future__ import annotations

import logging
import os
from typing import Dict, List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from screening import __version__
from screening.api import api_router
from screening.db.engine import close_engine
from screening.screener import get_address_screener, reset_address_screener


LOGGER = logging.getLogger(__name__)


def _resolve_log_level(name: str) -> int:
	"""Map a level name to its number, defaulting to INFO for unknown names."""
	level = logging.getLevelName(name.strip().upper())
	return level if isinstance(level, int) else logging.INFO


logging.basicConfig(level=_resolve_log_level(os.getenv("LOG_LEVEL", "INFO")))

app = FastAPI(
	title="Address Screening Service",
	version=__version__,
	description="Screens blockchain addresses against a durable blacklist and a remote risk scoring API.",
)

default_cors: List[str] = ["*"]

env_origins = os.getenv("CORS_ALLOW_ORIGINS")
if env_origins:
	allowed_origins = [origin.strip() for origin in env_origins.split(",") if origin.strip()]
	if not allowed_origins:
		allowed_origins = default_cors
else:
	allowed_origins = default_cors

app.add_middleware(
	CORSMiddleware,
	allow_origins=allowed_origins,
	allow_credentials=False,
	allow_methods=["*"],
	allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/", response_class=PlainTextResponse)
def index() -> str:
	return "server index route hit"


@app.get("/health")
def healthcheck() -> Dict[str, str]:
	"""Basic readiness probe."""
	return {"status": "ok"}


@app.on_event("startup")
def startup_event() -> None:
	"""Build the screener eagerly so bad configuration stops the service before it serves."""
	get_address_screener()
	LOGGER.info("Address screening service ready")


@app.on_event("shutdown")
def shutdown_event() -> None:
	"""Release the screener and close the database engine when the service stops."""
	reset_address_screener()
	close_engine()
