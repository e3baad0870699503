#!/usr/bin/env python3
"""
Development server for the Udyam Union API.
Usage: python run.py
"""
import uvicorn
from app.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.APP_ENV == "development",
        log_level="debug" if settings.APP_DEBUG else "info",
    )
