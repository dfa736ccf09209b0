"""
api/routes/health.py
--------------------
Health-check endpoint — used by load balancers, Docker health probes, etc.
Also reports which capability backends this process is wired to.
"""
from __future__ import annotations

from fastapi import APIRouter

import config

router = APIRouter()


@router.get("/health", summary="Health check")
def health() -> dict:
    """Returns 200 OK when the service is running."""
    return {
        "status": "ok",
        "service": "adventure-planner",
        "places": "stub" if config.USE_STUB_PLACES else "google",
        "routing": "estimate" if config.USE_STUB_ROUTING else "google",
        "cache": config.CACHE_BACKEND,
    }
