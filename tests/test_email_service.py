# tests/test_email_service.py
"""
Tests for transactional and internal email sending.

Every failure mode must come back as an EmailResult and never raise.
"""

import logging
from datetime import datetime

import pytest

from authhub.domain.email import service as email_service_module
from authhub.domain.email.service import (
    INTERNAL_EMAILS,
    EmailSendStatus,
    EmailService,
    EmailTemplateService,
    InternalFromTypes,
)
from authhub.domain.email.transport import EmailMessage
from authhub.models import EmailTemplate, EmailTemplateType


def add_template(db, environment, **overrides):
    fields = dict(
        type=EmailTemplateType.MagicLink,
        name="Magic Link",
        subject="Sign in to <%= appName %>",
        from_name="<%= appName %> Team",
        from_email="no-reply@acme.example.com",
        preview="Hello <%= user.firstName %>",
        content="<p>Hi <% if (userFullName) { %><%= userFullName %><% } else { %>there<% } %></p>",
        reply_to="help@acme.example.com",
        enabled=True,
        environment_id=environment.id,
    )
    fields.update(overrides)
    template = EmailTemplate(**fields)
    db.add(template)
    db.commit()
    return template


@pytest.fixture
def emails(db, transport):
    return EmailService(db, transport=transport)


# =============================================================================
# Database-templated path
# =============================================================================

class TestSend:

    async def test_renders_and_sends(self, db, emails, transport, environment, end_user):
        add_template(db, environment)

        result = await emails.send(
            to="ada@example.com",
            email_template_type=EmailTemplateType.MagicLink,
            environment_id=environment.id,
            user_id=end_user.id,
        )

        assert result.status == EmailSendStatus.SENT
        assert result.success
        assert result.message_id == "msg-1"
        message = transport.sent[0]
        assert message.from_address == "Acme Team <no-reply@acme.example.com>"
        assert message.subject == "Sign in to Acme"
        assert message.html == "<p>Hi Ada Lovelace</p>"
        assert message.reply_to == "help@acme.example.com"
        assert message.scheduled_at is None

    async def test_missing_user_name_falls_back(self, db, emails, transport, environment):
        add_template(db, environment)

        await emails.send("x@example.com", EmailTemplateType.MagicLink, environment.id)

        assert transport.sent[0].html == "<p>Hi there</p>"

    async def test_no_template_of_type_makes_no_transport_call(
        self, db, emails, transport, environment
    ):
        add_template(db, environment, type=EmailTemplateType.Welcome)

        result = await emails.send("x@example.com", EmailTemplateType.Invite, environment.id)

        assert result.status == EmailSendStatus.SKIPPED
        assert not result.success
        assert transport.sent == []

    async def test_disabled_template_makes_no_transport_call(
        self, db, emails, transport, environment
    ):
        add_template(db, environment, enabled=False)

        result = await emails.send("x@example.com", EmailTemplateType.MagicLink, environment.id)

        assert result.status == EmailSendStatus.SKIPPED
        assert "disabled" in result.error
        assert transport.sent == []

    async def test_unknown_user_is_skipped(self, db, emails, transport, environment):
        add_template(db, environment)

        result = await emails.send(
            "x@example.com", EmailTemplateType.MagicLink, environment.id, user_id="ghost"
        )

        assert result.status == EmailSendStatus.SKIPPED
        assert transport.sent == []

    async def test_content_sees_rendered_preview(self, db, emails, transport, environment, end_user):
        add_template(
            db,
            environment,
            preview="Welcome <%= user.firstName %> to <%= appName %>",
            content="<span><%= preview %></span>",
        )

        await emails.send("ada@example.com", EmailTemplateType.MagicLink, environment.id, end_user.id)

        assert transport.sent[0].html == "<span>Welcome Ada to Acme</span>"

    async def test_context_carries_caller_data_and_fresh_summaries(
        self, db, emails, transport, environment, end_user
    ):
        add_template(
            db,
            environment,
            content=(
                "<%= environment.authURL %>/magic/<%= token %>|<%= environment.project.id %>|"
                "<%= user.email %>|<%= user.emailConfirmed %>"
            ),
        )

        await emails.send(
            "ada@example.com",
            EmailTemplateType.MagicLink,
            environment.id,
            user_id=end_user.id,
            data={"token": "tok123", "environment": {"name": "stale"}},
        )

        assert transport.sent[0].html == (
            f"https://acme.example.com/api/auth/magic/tok123|{environment.project_id}|"
            "ada@example.com|True"
        )

    async def test_build_context(self, emails, environment, end_user):
        result = await emails.build_context(environment.id, end_user.id, {"token": "t"})

        context = result.data
        assert context["token"] == "t"
        assert context["appName"] == "Acme"
        assert context["environment"]["appURLEncoded"] == "https%3A%2F%2Facme.example.com"
        assert context["user"]["firstName"] == "Ada"
        assert context["user"]["lastSignIn"] == datetime(2026, 1, 1, 12, 0)
        assert context["userFullName"] == "Ada Lovelace"

    async def test_render_failure_is_logged_and_not_sent(
        self, db, emails, transport, environment, caplog
    ):
        add_template(db, environment, content="<% if (a) { %>never closed")

        with caplog.at_level(logging.ERROR):
            result = await emails.send("x@example.com", EmailTemplateType.MagicLink, environment.id)

        assert result.status == EmailSendStatus.RENDER_FAILED
        assert transport.sent == []
        assert f"MagicLink - Env: {environment.id}" in caplog.text

    async def test_dispatch_failure_is_swallowed(self, db, failing_transport, environment, caplog):
        add_template(db, environment)
        emails = EmailService(db, transport=failing_transport)

        with caplog.at_level(logging.ERROR):
            result = await emails.send("x@example.com", EmailTemplateType.MagicLink, environment.id)

        assert result.status == EmailSendStatus.DISPATCH_FAILED
        assert "provider unavailable" in result.error
        assert "Sign in to Acme" in caplog.text
        assert environment.id in caplog.text

    async def test_scheduled_send(self, db, emails, transport, environment, caplog):
        add_template(db, environment)
        when = datetime(2030, 5, 1, 9, 30)

        with caplog.at_level(logging.INFO):
            result = await emails.send(
                "x@example.com", EmailTemplateType.MagicLink, environment.id, scheduled_at=when
            )

        assert result.status == EmailSendStatus.SCHEDULED
        assert transport.sent[0].scheduled_at == when
        assert "scheduled" in caplog.text


# =============================================================================
# Default templates
# =============================================================================

class TestDefaultTemplates:

    async def test_every_default_renders(self, db, emails, transport, environment, end_user):
        await EmailTemplateService(db).create_defaults(environment.id)

        for template_type in EmailTemplateType:
            result = await emails.send(
                "ada@example.com",
                template_type,
                environment.id,
                user_id=end_user.id,
                data={"token": "abc", "inviter": {"fullName": "Grace Hopper"}},
            )
            assert result.status == EmailSendStatus.SENT, template_type

        assert len(transport.sent) == len(EmailTemplateType)
        magic_link = transport.sent[0]
        assert magic_link.subject == "Sign in to Acme"
        assert "https://acme.example.com/api/auth/magic/abc" in magic_link.html
        assert "Hey Ada," in magic_link.html
        invite = transport.sent[-1]
        assert invite.subject == "Grace Hopper invited you to Acme"

    async def test_set_enabled_toggles_sending(self, db, emails, transport, environment):
        templates = EmailTemplateService(db)
        await templates.create_defaults(environment.id)

        await templates.set_enabled(EmailTemplateType.Welcome, environment.id, False)
        result = await emails.send("x@example.com", EmailTemplateType.Welcome, environment.id)

        assert result.status == EmailSendStatus.SKIPPED
        assert len(await templates.list_templates(environment.id)) == 5


# =============================================================================
# Internal path
# =============================================================================

class TestSendInternal:

    @pytest.fixture(autouse=True)
    def fake_mjml(self, monkeypatch):
        monkeypatch.setattr(
            email_service_module, "compile_mjml_to_html", lambda mjml: f"<html>{len(mjml)}</html>"
        )

    async def test_sends_from_fixed_identity(self, emails, transport):
        result = await emails.send_internal(
            InternalFromTypes.FOUNDER, "owner@example.com", "Welcome", "<mjml></mjml>"
        )

        assert result.status == EmailSendStatus.SENT
        message = transport.sent[0]
        assert message.from_address == INTERNAL_EMAILS[InternalFromTypes.FOUNDER]["from"]
        assert message.html == "<html>13</html>"
        assert message.reply_to is None

    async def test_accepts_channel_name(self, emails, transport):
        result = await emails.send_internal("support", "ops@example.com", "Alert", "<mjml/>")

        assert result.success
        assert transport.sent[0].from_address == INTERNAL_EMAILS[InternalFromTypes.SUPPORT]["from"]

    async def test_unknown_channel_is_skipped(self, emails, transport):
        result = await emails.send_internal("marketing", "x@example.com", "Hi", "<mjml/>")

        assert result.status == EmailSendStatus.SKIPPED
        assert transport.sent == []

    async def test_dispatch_failure_is_swallowed(self, db, failing_transport):
        emails = EmailService(db, transport=failing_transport)

        result = await emails.send_internal(
            InternalFromTypes.SUPPORT, "x@example.com", "Hi", "<mjml/>", scheduled_at=datetime(2030, 1, 1)
        )

        assert result.status == EmailSendStatus.DISPATCH_FAILED

    async def test_compile_failure_is_swallowed(self, emails, transport, monkeypatch):
        def broken(_mjml):
            raise Exception("Failed to compile MJML template: bad")

        monkeypatch.setattr(email_service_module, "compile_mjml_to_html", broken)

        result = await emails.send_internal(InternalFromTypes.SUPPORT, "x@example.com", "Hi", "<mjml")

        assert result.status == EmailSendStatus.RENDER_FAILED
        assert transport.sent == []


class TestResendParams:

    def test_optional_fields_only_when_set(self):
        message = EmailMessage("A <a@x.io>", "b@x.io", "S", "<p/>")

        assert message.to_resend_params() == {
            "from": "A <a@x.io>",
            "to": ["b@x.io"],
            "subject": "S",
            "html": "<p/>",
        }

    def test_scheduled_at_is_iso_formatted(self):
        message = EmailMessage(
            "A <a@x.io>", ["b@x.io"], "S", "<p/>", reply_to="r@x.io", scheduled_at=datetime(2030, 1, 2, 3, 4)
        )

        params = message.to_resend_params()
        assert params["reply_to"] == "r@x.io"
        assert params["scheduled_at"] == "2030-01-02T03:04:00"
