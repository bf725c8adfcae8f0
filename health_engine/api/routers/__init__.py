"""
API routers module.

This module contains all API route definitions organized by domain.
"""
from health_engine.api.routers.health import router as health_router
from health_engine.api.routers.medications import router as medications_router
from health_engine.api.routers.analytics import router as analytics_router

__all__ = ["health_router", "medications_router", "analytics_router"]
