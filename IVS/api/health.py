from fastapi import APIRouter, Depends
from datetime import datetime, timezone
from packages.ivs_core.config import IVSConfig
from IVS.api.dependencies import get_config

router = APIRouter()

@router.get("/health")
async def health_check(config: IVSConfig = Depends(get_config)):
    """
    Server Liveness Probe.
    Returns status, version, and current timestamp.
    """
    return {
        "status": "ok",
        "version": config.VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
