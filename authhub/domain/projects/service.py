"""Project service - provisioning and lifecycle of projects"""

import logging
import secrets
from typing import Optional

from sqlalchemy.orm import Session

from ...config import (
    DEFAULT_ENVIRONMENT_NAME,
    INTERNAL_EMAIL_DOMAIN,
    REFRESH_TOKEN_EXPIRATION_DEFAULT,
    TOKEN_EXPIRATION_DEFAULT,
)
from ...models import AuthProvider, Environment, Project, User
from ...shared.results import DataReturn
from ...utils.names import get_first_name
from ..email.components import new_project_notification_template, welcome_founder_template
from ..email.service import EmailService, EmailTemplateService, InternalFromTypes
from .repository import ProjectRepository
from .schemas import ProjectCreate, ProjectUpdateGeneralInfo

logger = logging.getLogger(__name__)


def generate_environment_keys() -> tuple[str, str]:
    """Fresh (public, secret) API credentials for an environment"""
    return f"pk_{secrets.token_hex(24)}", f"sk_{secrets.token_hex(32)}"


class ProjectService:
    """Service layer for project business logic"""

    def __init__(self, db: Session, email_service: Optional[EmailService] = None):
        self.db = db
        self.repo = ProjectRepository()
        self.email_service = email_service

    async def get_projects(self, owner: User) -> list[Project]:
        return self.repo.get_projects(self.db, owner.id)

    async def get_by_id(self, project_id: str) -> DataReturn[Project]:
        project = self.repo.get_project_by_id(self.db, project_id)
        if not project:
            return DataReturn.not_found(f"Project {project_id} not found")
        return DataReturn(data=project)

    async def create(self, owner: User, payload: ProjectCreate) -> DataReturn[Project]:
        """Create a project with its first environment and default email templates"""
        logger.info(f"📥 Creating project {payload.appName!r} for user {owner.id}")

        # An owner's first project becomes their main project
        is_first_project = not self.repo.get_projects(self.db, owner.id)

        public_key, secret_key = generate_environment_keys()
        project = Project(app_name=payload.appName, user_owner_id=owner.id, main=is_first_project)
        environment = Environment(
            name=DEFAULT_ENVIRONMENT_NAME,
            app_url=payload.appURL,
            public_key=public_key,
            secret_key=secret_key,
            token_expiration=TOKEN_EXPIRATION_DEFAULT,
            refresh_token_expiration=REFRESH_TOKEN_EXPIRATION_DEFAULT,
            auth_provider=AuthProvider.MagicLogin,
        )

        try:
            self.repo.create_project(self.db, project, environment)
            await EmailTemplateService(self.db).create_defaults(environment.id, commit=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(project)
        logger.info(f"✅ Created project {project.id} with environment {environment.id}")

        if self.email_service:
            await self.email_service.send_internal(
                InternalFromTypes.SUPPORT,
                to=f"support@{INTERNAL_EMAIL_DOMAIN}",
                subject=f"New project: {project.app_name}",
                content=new_project_notification_template(project.app_name, owner.email, environment.id),
            )
            if is_first_project:
                await self.email_service.send_internal(
                    InternalFromTypes.FOUNDER,
                    to=owner.email,
                    subject="Welcome to AuthHub",
                    content=welcome_founder_template(get_first_name(owner.full_name)),
                )

        return DataReturn(data=project)

    async def update_general_info(
        self, project_id: str, payload: ProjectUpdateGeneralInfo
    ) -> DataReturn[Project]:
        project = self.repo.get_project_by_id(self.db, project_id)
        if not project:
            return DataReturn.not_found(f"Project {project_id} not found")

        project = self.repo.update_project(self.db, project, app_name=payload.appName)
        logger.info(f"Updated general info of project {project_id}")
        return DataReturn(data=project)

    async def delete(self, project_id: str) -> DataReturn[None]:
        """Delete a project and, by cascade, everything under its environments"""
        project = self.repo.get_project_by_id(self.db, project_id)
        if not project:
            return DataReturn.not_found(f"Project {project_id} not found")

        environment_ids = [environment.id for environment in project.environments]
        self.repo.delete_project(self.db, project)
        logger.info(f"🗑️ Deleted project {project_id} (environments: {environment_ids})")
        return DataReturn()
