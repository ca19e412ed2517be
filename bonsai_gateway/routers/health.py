# bonsai_gateway/routers/health.py
from fastapi import APIRouter
from pathlib import Path

from bonsai_gateway.config import get_settings

router = APIRouter(tags=["health"])

VERSION = "0.1.0"


@router.get("/health")
def health_check():
    s = get_settings()
    return {
        "success": True,
        "status": "ok",
        "version": VERSION,
        "port": s.PORT,
        "dataDir": str(Path(s.DATA_DIR).resolve()),
        "allowedOrigins": s.ALLOWED_ORIGINS,
        "providerMode": s.PROVIDER_MODE,
        # which vendors have a key (never the keys themselves)
        "configured": s.configured_vendors(),
    }
