"""Environment data router - FastAPI endpoints for environment configuration"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ...auth import require_internal_key, require_public_key, require_secret_key
from ...database import get_db
from ...shared.results import unwrap
from .schemas import EnvironmentDataPayload, EnvironmentDataResponse
from .service import PUBLIC_DATA_KEYS, EnvironmentDataService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/environments/{env_id}/data", tags=["Environment Data"])


def get_environment_data_service(db: Session = Depends(get_db)) -> EnvironmentDataService:
    """Dependency injection for EnvironmentDataService"""
    return EnvironmentDataService(db)


@router.get("", dependencies=[Depends(require_public_key)])
async def fetch_public_data(
    env_id: str,
    service: EnvironmentDataService = Depends(get_environment_data_service),
) -> dict[str, Any]:
    """Legacy fields plus the data keys that are safe to expose publicly"""
    return await service.fetch_subset(env_id, PUBLIC_DATA_KEYS)


@router.get("/app", dependencies=[Depends(require_internal_key)])
async def fetch_app_data(
    env_id: str,
    ids: list[str] = Query(default=[]),
    service: EnvironmentDataService = Depends(get_environment_data_service),
) -> dict[str, Any]:
    """Legacy fields plus the requested data keys (internal callers only)"""
    return await service.fetch_subset(env_id, ids)


@router.get("/{key}", dependencies=[Depends(require_secret_key)])
async def get_data(
    env_id: str,
    key: str,
    service: EnvironmentDataService = Depends(get_environment_data_service),
) -> Any:
    return unwrap(await service.get_one(env_id, key))


@router.post("", response_model=EnvironmentDataResponse, dependencies=[Depends(require_secret_key)])
async def upsert_data(
    env_id: str,
    payload: EnvironmentDataPayload,
    response: Response,
    service: EnvironmentDataService = Depends(get_environment_data_service),
):
    """Create (201) or replace (200) an environment data slot"""
    data = unwrap(await service.upsert(env_id, payload))
    response.status_code = status.HTTP_201_CREATED if data.pop("created") else status.HTTP_200_OK
    return data


@router.put("", response_model=EnvironmentDataResponse, dependencies=[Depends(require_secret_key)])
async def update_data(
    env_id: str,
    payload: EnvironmentDataPayload,
    service: EnvironmentDataService = Depends(get_environment_data_service),
):
    """Replace the value of an existing slot"""
    return unwrap(await service.update(env_id, payload))


@router.delete(
    "/{key}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_secret_key)]
)
async def delete_data(
    env_id: str,
    key: str,
    service: EnvironmentDataService = Depends(get_environment_data_service),
):
    unwrap(await service.delete(env_id, key))
