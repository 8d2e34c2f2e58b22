from fastapi import APIRouter

from app.api.routes import draft

api_router = APIRouter()
api_router.include_router(draft.router)
