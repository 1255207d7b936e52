from fastapi import APIRouter
from salesync.api.routers import sync

api_router = APIRouter()
api_router.include_router(sync.router, prefix="/sync", tags=["sync"])
