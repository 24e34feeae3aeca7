"""Agregador de routers de la API."""
from fastapi import APIRouter

from devconnector.api.routers import health, profile

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(profile.router)
