from fastapi import APIRouter

from quicktrip.api.v1.endpoints import places

api_router = APIRouter()

api_router.include_router(places.router, prefix="/places", tags=["places"])
