from fastapi import APIRouter
from datetime import datetime, timezone
from packages.mis_core.config import MISConfig

router = APIRouter()
config = MISConfig.load()

@router.get("/health")
async def health_check():
    """
    Server Liveness Probe.
    Returns status, version, and current timestamp.
    """
    return {
        "status": "ok",
        "version": config.VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
