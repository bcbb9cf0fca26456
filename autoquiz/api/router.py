"""
API router - aggregates all route modules.
"""
from fastapi import APIRouter
from autoquiz.api.survey import router as survey_router
from autoquiz.api.places import router as places_router
from autoquiz.api.health import router as health_router

api_router = APIRouter()
api_router.include_router(survey_router)
api_router.include_router(places_router)
api_router.include_router(health_router)
