#!/usr/bin/env python3
"""
Main entry point for the MedRAG backend
Run with `python main.py` or `uvicorn main:app`
"""

from medrag.config import Settings
from medrag.main import create_app

settings = Settings.from_env()
app = create_app(settings)

if __name__ == "__main__":
    import uvicorn

    print(f"Starting MedRAG backend on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)
