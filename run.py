"""
Pivot Report — API runner.

Usage:
    python run.py          → FastAPI on settings.API_PORT
"""

import uvicorn

from pivot_report.core.config import settings


def run_fastapi() -> None:
    """Start the acquisition API."""
    print(f"🚀 FastAPI → http://localhost:{settings.API_PORT}")
    if settings.DEBUG:
        print(f"📄 Docs    → http://localhost:{settings.API_PORT}/api/docs")
    uvicorn.run(
        "pivot_report.main:app",
        host="0.0.0.0",
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run_fastapi()
