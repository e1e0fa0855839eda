# tests/test_projects.py
"""Tests for project provisioning and configuration bindings."""

import pytest
from pydantic import ValidationError

from authhub.domain.email import service as email_service_module
from authhub.domain.email.service import INTERNAL_EMAILS, EmailService, InternalFromTypes
from authhub.domain.projects.config import ConfigRelation, ProjectConfigRepository
from authhub.domain.projects.schemas import ProjectCreate, ProjectUpdateGeneralInfo
from authhub.domain.projects.service import ProjectService
from authhub.models import (
    ConfigRelationType,
    CustomField,
    CustomFieldRelationType,
    CustomFieldType,
    EmailTemplate,
    EmailTemplateType,
    Environment,
    Role,
)
from authhub.shared.results import StatusCodes


@pytest.fixture
def fake_mjml(monkeypatch):
    monkeypatch.setattr(email_service_module, "compile_mjml_to_html", lambda mjml: "<html/>")


# =============================================================================
# Schemas
# =============================================================================

class TestProjectSchemas:

    def test_trims_url_and_name(self):
        payload = ProjectCreate(appName="  Acme ", appURL="https://acme.example.com/")

        assert payload.appName == "Acme"
        assert payload.appURL == "https://acme.example.com"

    @pytest.mark.parametrize("name", ["", "   ", "x" * 26])
    def test_rejects_bad_names(self, name):
        with pytest.raises(ValidationError):
            ProjectCreate(appName=name, appURL="https://acme.example.com")

    @pytest.mark.parametrize("url", ["acme.example.com", "ftp://acme.example.com", "https://"])
    def test_rejects_bad_urls(self, url):
        with pytest.raises(ValidationError):
            ProjectCreate(appName="Acme", appURL=url)


# =============================================================================
# Service
# =============================================================================

class TestProjectService:

    async def test_create_provisions_environment_and_templates(self, db, owner):
        result = await ProjectService(db).create(
            owner, ProjectCreate(appName="Rocket", appURL="https://rocket.example.com")
        )

        project = result.data
        assert result.ok
        assert project.main is True
        assert [environment.name for environment in project.environments] == ["Production"]
        environment = project.environments[0]
        assert environment.public_key.startswith("pk_")
        assert environment.secret_key.startswith("sk_")
        assert environment.token_expiration == "1d"
        assert environment.refresh_token_expiration == "5d"
        types = {
            template.type
            for template in db.query(EmailTemplate).filter_by(environment_id=environment.id)
        }
        assert types == set(EmailTemplateType)

    async def test_second_project_is_not_main(self, db, owner, project):
        result = await ProjectService(db).create(
            owner, ProjectCreate(appName="Second", appURL="https://second.example.com")
        )

        assert result.data.main is False

    async def test_environment_keys_are_unique_per_project(self, db, owner):
        service = ProjectService(db)
        first = await service.create(owner, ProjectCreate(appName="A", appURL="https://a.example.com"))
        second = await service.create(owner, ProjectCreate(appName="B", appURL="https://b.example.com"))

        assert first.data.environments[0].public_key != second.data.environments[0].public_key

    async def test_create_notifies_support_and_welcomes_owner(self, db, owner, transport, fake_mjml):
        service = ProjectService(db, email_service=EmailService(db, transport=transport))

        await service.create(owner, ProjectCreate(appName="Rocket", appURL="https://rocket.example.com"))

        support, welcome = transport.sent
        assert support.subject == "New project: Rocket"
        assert support.from_address == INTERNAL_EMAILS[InternalFromTypes.SUPPORT]["from"]
        assert welcome.to == "owner@example.com"
        assert welcome.from_address == INTERNAL_EMAILS[InternalFromTypes.FOUNDER]["from"]

    async def test_notification_failure_does_not_undo_project(self, db, owner, failing_transport, fake_mjml):
        service = ProjectService(db, email_service=EmailService(db, transport=failing_transport))

        result = await service.create(owner, ProjectCreate(appName="Rocket", appURL="https://rocket.example.com"))

        assert result.ok
        assert (await service.get_by_id(result.data.id)).ok

    async def test_get_projects_lists_only_owned(self, db, owner, project):
        projects = await ProjectService(db).get_projects(owner)

        assert [p.id for p in projects] == [project.id]

    async def test_update_general_info(self, db, project):
        result = await ProjectService(db).update_general_info(
            project.id, ProjectUpdateGeneralInfo(appName="Renamed")
        )

        assert result.data.app_name == "Renamed"

    async def test_missing_project_is_not_found(self, db):
        service = ProjectService(db)

        assert (await service.get_by_id("nope")).status_code == StatusCodes.NotFound
        assert (
            await service.update_general_info("nope", ProjectUpdateGeneralInfo(appName="X"))
        ).status_code == StatusCodes.NotFound
        assert (await service.delete("nope")).status_code == StatusCodes.NotFound

    async def test_delete_removes_environments(self, db, project, environment):
        environment_id = environment.id

        result = await ProjectService(db).delete(project.id)

        assert result.ok
        db.expunge_all()
        assert db.get(Environment, environment_id) is None


# =============================================================================
# Configuration bindings
# =============================================================================

class TestConfigRelation:

    def test_parse_accepts_known_tags(self):
        relation = ConfigRelation.parse("UserRoles", "role-1")

        assert relation == ConfigRelation(tag=ConfigRelationType.UserRoles, id="role-1")

    def test_parse_rejects_unknown_tag(self):
        with pytest.raises(ValueError, match="Unknown relation type"):
            ConfigRelation.parse("Billing", "x")

    def test_parse_requires_id(self):
        with pytest.raises(ValueError):
            ConfigRelation.parse(ConfigRelationType.CustomFields, "")

    def test_bind_and_resolve(self, db, project, environment):
        role = Role(name="admin", environment_id=environment.id)
        field = CustomField(
            name="plan",
            type=CustomFieldType.String,
            relation_type=CustomFieldRelationType.User,
            environment_id=environment.id,
        )
        db.add_all([role, field])
        db.commit()

        first = ProjectConfigRepository.bind(
            db, environment.id, project.id, ConfigRelation(ConfigRelationType.UserRoles, role.id)
        )
        assert isinstance(ProjectConfigRepository.resolve(db, ConfigRelation.from_row(first.data)), Role)

        ProjectConfigRepository.bind(
            db, environment.id, project.id, ConfigRelation(ConfigRelationType.CustomFields, field.id)
        )
        row = ProjectConfigRepository.get(db, environment.id, project.id)
        assert row.relation_type == ConfigRelationType.CustomFields
        assert ProjectConfigRepository.resolve(db, ConfigRelation.from_row(row)).name == "plan"

    def test_bind_to_missing_target_is_not_found(self, db, project, environment):
        result = ProjectConfigRepository.bind(
            db, environment.id, project.id, ConfigRelation(ConfigRelationType.UserRoles, "ghost")
        )

        assert result.status_code == StatusCodes.NotFound
        assert ProjectConfigRepository.get(db, environment.id, project.id) is None
