# bonsai_gateway/routers/cua.py
from fastapi import APIRouter
import logging

from bonsai_gateway.core.errors import NotConfiguredError, UpstreamError
from bonsai_gateway.services.scrapybara import get_scrapybara

logger = logging.getLogger("bonsai.cua")

router = APIRouter(prefix="/cua", tags=["cua"])


@router.get("/scrapybara/status")
def scrapybara_status():
    """Connection probe; failures are reported in the body with HTTP 200."""
    try:
        status = get_scrapybara().instance_status()
    except NotConfiguredError:
        return {"success": False, "connected": False, "error": "Scrapybara API key not configured"}
    except UpstreamError as e:
        if e.upstream_status is None:
            return {"success": False, "connected": False, "error": "Connection timeout or network error"}
        return {"success": False, "connected": False, "error": "Failed to connect to Scrapybara API"}
    except Exception:
        logger.exception("Scrapybara connection error")
        return {"success": False, "connected": False, "error": "Connection timeout or network error"}
    return {"success": True, **status}
