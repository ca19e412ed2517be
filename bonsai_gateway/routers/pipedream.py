# bonsai_gateway/routers/pipedream.py
from fastapi import APIRouter
import logging

from bonsai_gateway.core.errors import ApiError, InternalError
from bonsai_gateway.services.pipedream import get_pipedream

logger = logging.getLogger("bonsai.pipedream")

router = APIRouter(prefix="/pipedream", tags=["pipedream"])


@router.post("/test")
def test_pipedream_connection():
    try:
        account = get_pipedream().whoami()
    except ApiError:
        raise
    except Exception:
        logger.exception("Pipedream connection test error")
        raise InternalError("Pipedream connection failed")
    return {"success": True, "status": "connected", **account}
