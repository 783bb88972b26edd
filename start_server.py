#!/usr/bin/env python3
"""
Startup script for the DocScore API.

Reads HOST / PORT / WORKERS plus the DOCSCORE_* and VISION_LLM_* settings
from the environment (or .env) and hands over to uvicorn.
"""

import os
import shutil

import uvicorn

from docscore.config import Settings


def _banner(settings: Settings, host: str, port: int, workers: int) -> None:
    tesseract = settings.tesseract_cmd or shutil.which("tesseract")

    print("=" * 60)
    print("DocScore API Server")
    print("=" * 60)
    print(f"\n  Listening on {host}:{port} ({workers} worker{'s' if workers != 1 else ''})")
    print(f"  Tesseract: {tesseract or 'NOT FOUND (image and scanned PDF scoring will fail)'}")
    print(f"  OCR languages: {settings.ocr_lang}")
    if settings.vision_configured:
        print(f"  Vision labels: {settings.vision_llm_model} @ {settings.vision_llm_base_url}")
    else:
        print("  Vision labels: off (OCR text only)")
    print(f"  Auth: {'Basic, %d user(s)' % len(settings.auth_users) if settings.auth_enabled else 'disabled'}")
    print(f"\nAPI Documentation: http://localhost:{port}/docs")
    print("=" * 60)


def main():
    settings = Settings.from_env()

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    workers = int(os.getenv("WORKERS", "1"))

    _banner(settings, host, port, workers)

    # uvicorn only honours reload for a single worker
    uvicorn.run(
        "app:app",
        host=host,
        port=port,
        workers=workers,
        reload=workers == 1 and os.getenv("DOCSCORE_RELOAD", "0") == "1",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
