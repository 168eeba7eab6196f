# eventvax/api/v1/api.py

from fastapi import APIRouter
from eventvax.api.v1.endpoints import events, metadata, sync

# This is the main router for the v1 API.
api_router = APIRouter()

api_router.include_router(events.router)
api_router.include_router(metadata.router)
api_router.include_router(sync.router)
