"""Token storage service - validity checks and single-use consumption.

Token generation lives with the auth flows that issue tokens; this layer only
stores them and answers whether a token may still be used.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import TokenStorage, TokenType, utc_now
from ...shared.results import DataReturn
from .repository import TokenStorageRepository

logger = logging.getLogger(__name__)


class TokenSubjectKind(str, enum.Enum):
    User = "User"
    InvitedUser = "InvitedUser"


# What relation_id points at, decided by the token type alone
TOKEN_SUBJECTS = {
    TokenType.MagicLogin: TokenSubjectKind.User,
    TokenType.Refresh: TokenSubjectKind.User,
    TokenType.ConfirmEmail: TokenSubjectKind.User,
    TokenType.ResetPassword: TokenSubjectKind.User,
    TokenType.InviteUser: TokenSubjectKind.InvitedUser,
}


@dataclass(frozen=True)
class TokenSubject:
    kind: TokenSubjectKind
    id: str


def token_subject(record: TokenStorage) -> TokenSubject:
    return TokenSubject(kind=TOKEN_SUBJECTS[record.type], id=record.relation_id)


def is_token_valid(record: TokenStorage, now: Optional[datetime] = None) -> bool:
    """Valid iff now < expires, evaluated at the moment of the call"""
    return (now or utc_now()) < record.expires


class TokenStorageService:
    """Service layer for token storage"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TokenStorageRepository()

    async def store(
        self,
        token: str,
        type: TokenType,
        relation_id: str,
        expires: datetime,
        environment_id: Optional[str] = None,
    ) -> TokenStorage:
        record = self.repo.create(self.db, token, type, relation_id, expires, environment_id)
        logger.info(f"Stored {type.value} token (ENV: {environment_id or 'platform'})")
        return record

    async def get_valid(
        self, token: str, type: Optional[TokenType] = None, now: Optional[datetime] = None
    ) -> DataReturn[TokenStorage]:
        """Return the token row if it exists, matches `type` and has not expired"""
        record = self.repo.get(self.db, token)

        if not record or (type is not None and record.type != type):
            return DataReturn.not_found("Token not found")

        if not is_token_valid(record, now):
            logger.info(f"Rejected expired {record.type.value} token")
            return DataReturn.not_found("Token expired")

        return DataReturn(data=record)

    async def consume(
        self, token: str, type: TokenType, now: Optional[datetime] = None
    ) -> DataReturn[TokenSubject]:
        """Validate and delete the token; returns what it pointed at.

        The delete is conditional on the row still being there and unexpired, so
        of two callers racing on one token only the first gets the subject.
        """
        now = now or utc_now()
        result = await self.get_valid(token, type, now)
        if not result.ok:
            return DataReturn(status_code=result.status_code, error=result.error)

        subject = token_subject(result.data)
        if not self.repo.delete_valid(self.db, token, type, now):
            logger.info(f"Lost race consuming {type.value} token")
            return DataReturn.not_found("Token not found")

        logger.info(f"Consumed {type.value} token for {subject.kind.value} {subject.id}")

        return DataReturn(data=subject)

    async def revoke_for_relation(self, type: TokenType, relation_id: str) -> int:
        records = self.repo.list_for_relation(self.db, type, relation_id)
        for record in records:
            self.repo.delete(self.db, record, commit=False)
        self.db.commit()
        return len(records)

    async def delete_expired(self, now: Optional[datetime] = None) -> int:
        deleted = self.repo.delete_expired(self.db, now or utc_now())
        if deleted:
            logger.info(f"🧹 Deleted {deleted} expired tokens")
        return deleted
