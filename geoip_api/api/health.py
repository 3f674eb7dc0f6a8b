"""
Liveness probe - never touches the database
"""

from fastapi import APIRouter

from ..config import HEALTH_PATH
from .response_builders import build_health_response

router = APIRouter()


@router.api_route(HEALTH_PATH, methods=["GET", "HEAD"], include_in_schema=False)
async def healthz():
    return build_health_response()
