from __future__ import annotations

from insight_engine.api.routes.analyze import router as analyze_router
from insight_engine.api.routes.health import router as health_router

__all__ = ["analyze_router", "health_router"]
