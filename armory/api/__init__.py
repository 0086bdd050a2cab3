from fastapi import APIRouter
from .routes import weapons

api_router = APIRouter()

api_router.include_router(weapons.router, prefix="/weapons", tags=["weapons"])
