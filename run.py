#!/usr/bin/env python3
"""
Local development server for the upsell API.

Point the extension's APP_URL at a tunnel to this port, then:
    python run.py
"""
import uvicorn
from dotenv import load_dotenv

load_dotenv()

if __name__ == "__main__":
    from upsell.config import settings

    print(f"{settings.app_name} {settings.app_version}")
    print("  offers:   POST http://localhost:8000/api/offer")
    print("  signing:  POST http://localhost:8000/api/sign-changeset")
    print("  install:  GET  http://localhost:8000/api/oauth/install?shop=<store>")

    uvicorn.run(
        "upsell.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
