"""
API router
Combines all endpoint routers, mounted under /api
"""

from fastapi import APIRouter

from app.api.v1.endpoints import admin, auth, contact, dashboard, health, quiz, resultats

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
api_router.include_router(resultats.router, prefix="/resultats", tags=["Results"])
api_router.include_router(quiz.router, prefix="/quiz", tags=["Quiz"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(contact.router, prefix="/contact", tags=["Contact"])
