from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/")
def root() -> dict:
    return {"message": "Hello from AI Insight API !"}


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint.

    Used by load balancers and monitoring systems to determine service health.

    Returns:
        dict: A dictionary with a single "status" key set to "ok".
    """

    return {"status": "ok"}


@router.get("/api/test")
def greet(name: str = "World") -> dict:
    """Smoke-test endpoint confirming the deployment answers requests."""

    return {"message": f"Hello {name}!"}
