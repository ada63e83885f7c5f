"""Main API router — combines all endpoint routers."""

from fastapi import APIRouter

from formguard.api.health import router as health_router
from formguard.api.customers import router as customers_router

api_router = APIRouter()

# Health check
api_router.include_router(health_router, tags=["Health"])

# Customers demo resource
api_router.include_router(customers_router, tags=["Customers"])
