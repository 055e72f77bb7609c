from fastapi import APIRouter

from architect.api import chat, scrape

api_router = APIRouter(prefix="/api")

api_router.include_router(scrape.router, prefix="/scrape", tags=["Scrape"])
api_router.include_router(chat.router, prefix="/chat", tags=["Chat"])
