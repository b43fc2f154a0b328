from typing import Any, Dict

from fastapi import APIRouter

from ..core.runtime import get_runtime
from ..plugins import get_plugins

router = APIRouter()


@router.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """Health check endpoint that verifies backend status"""
    provider_status = await get_runtime().health()

    all_healthy = all(
        status["status"] in ["healthy", "unavailable"]
        for status in provider_status.values()
    )
    available_providers = sum(
        1 for status in provider_status.values()
        if status["status"] == "healthy"
    )

    return {
        "status": "healthy" if all_healthy and available_providers > 0 else "degraded",
        "providers": provider_status,
        "available_providers": available_providers,
        "total_providers": len(provider_status),
    }


@router.get("/plugins")
async def list_plugins() -> Dict[str, Any]:
    return {
        "plugins": [
            {
                "name": plugin.name,
                "description": plugin.description,
                "actions": [
                    {"name": action.name, "similes": list(action.similes), "description": action.description}
                    for action in plugin.actions
                ],
            }
            for plugin in get_plugins()
        ]
    }
