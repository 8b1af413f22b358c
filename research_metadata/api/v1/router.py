from fastapi import APIRouter

from research_metadata.api.v1.metadata import router as metadata_router

api_router = APIRouter()
api_router.include_router(metadata_router)
