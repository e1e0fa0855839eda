"""Token storage repository - Database operations for single-use tokens"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import TokenStorage, TokenType


class TokenStorageRepository:
    """Repository for token storage rows"""

    @staticmethod
    def create(
        db: Session,
        token: str,
        type: TokenType,
        relation_id: str,
        expires: datetime,
        environment_id: Optional[str] = None,
    ) -> TokenStorage:
        record = TokenStorage(
            token=token,
            type=type,
            relation_id=relation_id,
            expires=expires,
            environment_id=environment_id,
        )
        db.add(record)
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def get(db: Session, token: str) -> Optional[TokenStorage]:
        """Primary-key lookup"""
        return db.get(TokenStorage, token)

    @staticmethod
    def list_for_relation(db: Session, type: TokenType, relation_id: str) -> list[TokenStorage]:
        return (
            db.query(TokenStorage)
            .filter(TokenStorage.type == type, TokenStorage.relation_id == relation_id)
            .order_by(TokenStorage.expires.desc())
            .all()
        )

    @staticmethod
    def delete(db: Session, record: TokenStorage, commit: bool = True) -> None:
        db.delete(record)
        if commit:
            db.commit()

    @staticmethod
    def delete_valid(db: Session, token: str, type: TokenType, now: datetime) -> int:
        """Delete the token only while it is still unexpired. Returns the number deleted"""
        deleted = (
            db.query(TokenStorage)
            .filter(
                TokenStorage.token == token,
                TokenStorage.type == type,
                TokenStorage.expires > now,
            )
            .delete(synchronize_session="fetch")
        )
        db.commit()
        return deleted

    @staticmethod
    def delete_expired(db: Session, now: datetime) -> int:
        """Remove every row whose expiry has passed. Returns the number deleted"""
        deleted = (
            db.query(TokenStorage)
            .filter(TokenStorage.expires <= now)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted
