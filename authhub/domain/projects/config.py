"""Polymorphic project configuration bindings.

A ProjectConfigOnEnvironment row points at either a Role or a CustomField
depending on relation_type. There is no foreign key for relation_id, so the
target is checked here before a binding is written.
"""

import logging
from dataclasses import dataclass
from typing import Union

from sqlalchemy.orm import Session

from ...models import ConfigRelationType, CustomField, ProjectConfigOnEnvironment, Role
from ...shared.results import DataReturn

logger = logging.getLogger(__name__)

RELATION_TARGETS = {
    ConfigRelationType.CustomFields: CustomField,
    ConfigRelationType.UserRoles: Role,
}


@dataclass(frozen=True)
class ConfigRelation:
    tag: ConfigRelationType
    id: str

    @classmethod
    def parse(cls, tag: Union[str, ConfigRelationType], id: str) -> "ConfigRelation":
        """Build a relation from untrusted input; unknown tags raise ValueError"""
        try:
            tag = ConfigRelationType(tag)
        except ValueError:
            raise ValueError(f"Unknown relation type {tag!r}") from None
        if not id:
            raise ValueError("Relation id is required")
        return cls(tag=tag, id=id)

    @classmethod
    def from_row(cls, row: ProjectConfigOnEnvironment) -> "ConfigRelation":
        return cls.parse(row.relation_type, row.relation_id)


class ProjectConfigRepository:
    """Repository for environment/project configuration bindings"""

    @staticmethod
    def get(db: Session, environment_id: str, project_id: str):
        return db.get(
            ProjectConfigOnEnvironment,
            {"environment_id": environment_id, "project_id": project_id},
        )

    @staticmethod
    def resolve(db: Session, relation: ConfigRelation) -> Union[Role, CustomField, None]:
        """Load the Role or CustomField the relation points at"""
        return db.get(RELATION_TARGETS[relation.tag], relation.id)

    @staticmethod
    def bind(
        db: Session, environment_id: str, project_id: str, relation: ConfigRelation
    ) -> DataReturn[ProjectConfigOnEnvironment]:
        """Create or repoint the binding for an environment/project pair"""
        if ProjectConfigRepository.resolve(db, relation) is None:
            return DataReturn.not_found(f"{relation.tag.value} {relation.id} not found")

        row = ProjectConfigRepository.get(db, environment_id, project_id)
        if row is None:
            row = ProjectConfigOnEnvironment(environment_id=environment_id, project_id=project_id)
            db.add(row)

        row.relation_type = relation.tag
        row.relation_id = relation.id
        db.commit()
        db.refresh(row)

        logger.info(
            f"Bound {relation.tag.value} {relation.id} to project {project_id} (ENV: {environment_id})"
        )
        return DataReturn(data=row)
