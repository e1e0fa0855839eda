"""Request credential checks for environment-scoped endpoints.

Each environment carries a public key (safe to ship to browsers) and a secret
key (server-side only). Internal services use a shared INTERNAL_API_KEY.
"""

import hmac
import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from .config import INTERNAL_API_KEY
from .database import get_db
from .domain.environments.repository import EnvironmentRepository
from .models import Environment

logger = logging.getLogger(__name__)


def _get_environment_or_404(db: Session, env_id: str) -> Environment:
    environment = EnvironmentRepository.get_environment(db, env_id)
    if not environment:
        raise HTTPException(status_code=404, detail=f"Environment {env_id} not found")
    return environment


async def require_public_key(
    env_id: str,
    tl_public_key: Optional[str] = Header(None, alias="tl-public-key"),
    db: Session = Depends(get_db),
) -> Environment:
    """Allow the request when the header carries the environment public key"""
    environment = _get_environment_or_404(db, env_id)
    if not tl_public_key or not hmac.compare_digest(tl_public_key, environment.public_key):
        logger.warning(f"⚠️ Invalid public key for environment {env_id}")
        raise HTTPException(status_code=401, detail="Invalid public key")
    return environment


async def require_secret_key(
    env_id: str,
    tl_env_secret_key: Optional[str] = Header(None, alias="tl-env-secret-key"),
    db: Session = Depends(get_db),
) -> Environment:
    """Allow the request when the header carries the environment secret key"""
    environment = _get_environment_or_404(db, env_id)
    if not tl_env_secret_key or not hmac.compare_digest(tl_env_secret_key, environment.secret_key):
        logger.warning(f"⚠️ Invalid secret key for environment {env_id}")
        raise HTTPException(status_code=401, detail="Invalid secret key")
    return environment


async def require_internal_key(
    tl_internal_key: Optional[str] = Header(None, alias="tl-internal-key"),
) -> None:
    """Allow server-to-server calls that present INTERNAL_API_KEY"""
    if not INTERNAL_API_KEY:
        logger.error("❌ INTERNAL_API_KEY not configured")
        raise HTTPException(status_code=500, detail="Internal key not configured")
    if not tl_internal_key or not hmac.compare_digest(tl_internal_key, INTERNAL_API_KEY):
        raise HTTPException(status_code=401, detail="Invalid internal key")
