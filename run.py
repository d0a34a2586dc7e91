#!/usr/bin/env python3
"""
ColumnLens Startup Script
Run this to start the FastAPI backend server
"""
import uvicorn

from columnlens.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "columnlens.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,  # Auto-reload on code changes
        log_level=settings.log_level
    )
