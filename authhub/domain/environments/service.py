"""Environment service - merged configuration view for an environment"""

import logging
from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from ...shared.results import DataReturn
from ...utils.keys import normalize_key
from .repository import EnvironmentDataRepository, EnvironmentRepository
from .schemas import EnvironmentDataPayload

logger = logging.getLogger(__name__)

# Data keys readable with just the environment public key
PUBLIC_DATA_KEYS = ["enableSignUp", "enableSignUpB2BOnly"]


def canonical_key(raw: str) -> str:
    """Canonical form of a caller key (empty when nothing usable or too long)"""
    try:
        return normalize_key(raw)
    except ValueError:
        return ""


def serialize_data_row(row) -> dict:
    return {
        "id": row.id,
        "value": row.value,
        "createdAt": row.created_at,
        "updatedAt": row.updated_at,
    }


class EnvironmentService:
    """Legacy relational columns of an environment"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = EnvironmentRepository()

    async def get_data(self, environment_id: str) -> dict:
        """Legacy fields as a flat mapping (empty when the environment does not exist)"""
        environment = self.repo.get_environment(self.db, environment_id)
        if not environment:
            logger.warning(f"⚠️ Environment {environment_id} not found while fetching legacy data")
            return {}

        return {
            "environmentId": environment.id,
            "environmentName": environment.name,
            "appURL": environment.app_url,
            "authProvider": environment.auth_provider.value if environment.auth_provider else None,
            "tokenExpiration": environment.token_expiration,
            "refreshTokenExpiration": environment.refresh_token_expiration,
            "projectId": environment.project.id,
            "appName": environment.project.app_name,
        }


class EnvironmentDataService:
    """Service layer for the environment key-value configuration slots"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = EnvironmentDataRepository()
        self.environments = EnvironmentService(db)

    async def fetch(self, environment_id: str, keys: Optional[Iterable[str]] = None) -> dict[str, Any]:
        """Data rows as {canonical key: value}; restricted to `keys` when given"""
        ids = None
        if keys is not None:
            ids = [key for key in (canonical_key(k) for k in keys) if key]

        rows = self.repo.list_data(self.db, environment_id, ids)
        return {row.id: row.value for row in rows}

    async def fetch_all(self, environment_id: str) -> dict[str, Any]:
        """Legacy fields merged with every data row of the environment"""
        legacy = await self.environments.get_data(environment_id)
        data = await self.fetch(environment_id)
        return {**legacy, **data}

    async def fetch_subset(self, environment_id: str, keys: Iterable[str]) -> dict[str, Any]:
        """Legacy fields plus the requested rows; unknown keys are simply absent"""
        legacy = await self.environments.get_data(environment_id)
        data = await self.fetch(environment_id, keys)
        return {**legacy, **data}

    async def get_one(self, environment_id: str, key: str) -> DataReturn[Any]:
        """Value stored under the canonical form of `key`"""
        canonical = canonical_key(key)
        row = self.repo.get_data(self.db, environment_id, canonical) if canonical else None

        if not row:
            error = f"Environment data ID {canonical or key} not found"
            logger.warning(f"⚠️ {error} (ENV: {environment_id})")
            return DataReturn.not_found(error)

        return DataReturn(data=row.value)

    async def upsert(self, environment_id: str, payload: EnvironmentDataPayload) -> DataReturn[dict]:
        """Create the row or replace its value wholly (no deep merge)"""
        canonical = canonical_key(payload.id)
        if not canonical:
            return DataReturn.bad_request(f"Invalid environment data ID {payload.id!r}")

        row, created = self.repo.upsert_data(self.db, environment_id, canonical, payload.value)
        logger.info(f"Upserted environment data {payload.id} (ENV: {environment_id})")

        return DataReturn(data={**serialize_data_row(row), "created": created})

    async def update(self, environment_id: str, payload: EnvironmentDataPayload) -> DataReturn[dict]:
        """Replace the value of an existing row"""
        canonical = canonical_key(payload.id)
        row = self.repo.get_data(self.db, environment_id, canonical) if canonical else None

        if not row:
            return DataReturn.not_found(f"Environment data {canonical or payload.id} not found")

        row = self.repo.update_data(self.db, row, payload.value)
        logger.info(f"Updated environment data {payload.id} (ENV: {environment_id})")

        return DataReturn(data=serialize_data_row(row))

    async def delete(self, environment_id: str, key: str) -> DataReturn[None]:
        """Delete a row; deleting a missing (or already deleted) key is NotFound"""
        canonical = canonical_key(key)
        row = self.repo.get_data(self.db, environment_id, canonical) if canonical else None

        if not row:
            error = f"Environment data ID {canonical or key} not found"
            logger.warning(f"⚠️ {error} (ENV: {environment_id})")
            return DataReturn.not_found(error)

        self.repo.delete_data(self.db, row)
        logger.info(f"Deleted environment data {key} (ENV: {environment_id})")

        return DataReturn()
