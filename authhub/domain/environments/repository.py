"""Environment repository - Database operations for environments and their data rows"""

from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ...models import Environment, EnvironmentData


class EnvironmentRepository:
    """Repository for environment database operations"""

    @staticmethod
    def get_environment(db: Session, environment_id: str) -> Optional[Environment]:
        """Get an environment with its project loaded"""
        return (
            db.query(Environment)
            .options(joinedload(Environment.project))
            .filter(Environment.id == environment_id)
            .first()
        )


class EnvironmentDataRepository:
    """Repository for environment key-value rows (ids are already canonical here)"""

    @staticmethod
    def list_data(
        db: Session, environment_id: str, ids: Optional[list[str]] = None
    ) -> list[EnvironmentData]:
        query = db.query(EnvironmentData).filter(EnvironmentData.environment_id == environment_id)
        if ids is not None:
            query = query.filter(EnvironmentData.id.in_(ids))
        return query.all()

    @staticmethod
    def get_data(db: Session, environment_id: str, key: str) -> Optional[EnvironmentData]:
        """Composite primary-key lookup"""
        return db.get(EnvironmentData, {"id": key, "environment_id": environment_id})

    @staticmethod
    def upsert_data(db: Session, environment_id: str, key: str, value: Any) -> tuple[EnvironmentData, bool]:
        """Create the row or replace its value wholly. Returns (row, created)"""
        row = EnvironmentDataRepository.get_data(db, environment_id, key)
        if row is not None:
            return EnvironmentDataRepository.update_data(db, row, value), False

        row = EnvironmentData(id=key, environment_id=environment_id, value=value)
        db.add(row)
        try:
            db.commit()
        except IntegrityError:
            # Another writer created the key since our read; last writer wins
            db.rollback()
            row = EnvironmentDataRepository.get_data(db, environment_id, key)
            if row is None:
                raise
            return EnvironmentDataRepository.update_data(db, row, value), False

        db.refresh(row)
        return row, True

    @staticmethod
    def update_data(db: Session, row: EnvironmentData, value: Any) -> EnvironmentData:
        row.value = value
        db.commit()
        db.refresh(row)
        return row

    @staticmethod
    def delete_data(db: Session, row: EnvironmentData) -> None:
        db.delete(row)
        db.commit()
