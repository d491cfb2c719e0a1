"""System endpoints — health check, remote operation listing."""

from fastapi import APIRouter

from pivot_report.services.orchestrator import session_registry
from pivot_report.services.remote.api_config import remote_config_loader

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/health")
async def health_check():
    """Basic liveness probe."""
    return {
        "status": "ok",
        "remote_operations": remote_config_loader.list_ids(),
        "sessions": session_registry.states(),
    }
