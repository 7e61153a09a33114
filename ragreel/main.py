"""
Ragreel - QR video knowledge base
Main FastAPI application entry point
"""

import logging

from fastapi import FastAPI

from ragreel.api.v1.router import api_router
from ragreel.core.config import get_settings

settings = get_settings()
logging.basicConfig(level=settings.log_level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

app = FastAPI(
    title=settings.app_name,
    description="Text knowledge base stored as QR code video frames",
    version="0.1.0",
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    return {"message": "Welcome to Ragreel - QR video knowledge base"}


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "ragreel"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
