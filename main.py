#!/usr/bin/env python3
"""
Promptsmith server
Main entry point for the application
"""

from promptsmith.main import app
from promptsmith.config import settings
import uvicorn

if __name__ == "__main__":
    print("Starting Promptsmith server...")
    print(f"Server will run on http://{settings.HOST}:{settings.PORT}")
    print(f"API Documentation available at http://{settings.HOST}:{settings.PORT}/docs")

    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
