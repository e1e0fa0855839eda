"""Project repository - Database operations for projects and their environments"""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...models import Environment, Project


class ProjectRepository:
    """Repository for project database operations"""

    @staticmethod
    def get_projects(db: Session, user_owner_id: str) -> list[Project]:
        return (
            db.query(Project)
            .options(selectinload(Project.environments))
            .filter(Project.user_owner_id == user_owner_id)
            .order_by(Project.created_at.desc())
            .all()
        )

    @staticmethod
    def get_project_by_id(db: Session, project_id: str) -> Optional[Project]:
        return (
            db.query(Project)
            .options(selectinload(Project.environments))
            .filter(Project.id == project_id)
            .first()
        )

    @staticmethod
    def create_project(db: Session, project: Project, environment: Environment) -> Project:
        """Insert a project together with its first environment (not committed)"""
        project.environments.append(environment)
        db.add(project)
        db.flush()
        return project

    @staticmethod
    def update_project(db: Session, project: Project, **updates) -> Project:
        for key, value in updates.items():
            if value is not None and hasattr(project, key):
                setattr(project, key, value)

        db.commit()
        db.refresh(project)
        return project

    @staticmethod
    def delete_project(db: Session, project: Project) -> None:
        """Delete a project; environments and everything under them go with it"""
        db.delete(project)
        db.commit()
