"""
Email service - renders environment templates and hands them to the provider

Email is a side channel: a missing template, a broken template or a provider
failure is logged and reported in the returned EmailResult, never raised into
the flow (sign up, invite, password reset) that triggered the send.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union
from urllib.parse import quote

from markupsafe import Markup
from sqlalchemy.orm import Session

from ...config import API_ROOT_URL, FOUNDER_NAME, INTERNAL_EMAIL_DOMAIN, INTERNAL_EMAIL_FROM_NAME
from ...models import EmailTemplate, EmailTemplateType, Environment, User
from ...shared.results import DataReturn
from ...utils.names import get_first_name
from .components import compile_mjml_to_html
from .defaults import DEFAULT_FROM_EMAIL_LOCAL_PART, DEFAULT_FROM_NAME, DEFAULT_TEMPLATES
from .repository import EmailContextRepository, EmailTemplateRepository
from .templating import TemplateRenderError, render_text_template
from .transport import EmailMessage, EmailTransport, ResendTransport

logger = logging.getLogger(__name__)


class InternalFromTypes(str, enum.Enum):
    SUPPORT = "support"
    FOUNDER = "founder"


INTERNAL_EMAILS = {
    InternalFromTypes.SUPPORT: {
        "from": f"{INTERNAL_EMAIL_FROM_NAME} Support Team <support@{INTERNAL_EMAIL_DOMAIN}>",
        "url": API_ROOT_URL,
    },
    InternalFromTypes.FOUNDER: {
        "from": f"{FOUNDER_NAME} <founders@{INTERNAL_EMAIL_DOMAIN}>",
        "url": API_ROOT_URL,
    },
}


class EmailSendStatus(str, enum.Enum):
    SENT = "sent"
    SCHEDULED = "scheduled"
    SKIPPED = "skipped"  # nothing to send: template, environment or user missing
    RENDER_FAILED = "render_failed"
    DISPATCH_FAILED = "dispatch_failed"


@dataclass
class EmailResult:
    """Outcome of a send; callers are free to ignore it"""

    status: EmailSendStatus
    message_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status in (EmailSendStatus.SENT, EmailSendStatus.SCHEDULED)


@dataclass
class RenderedEmail:
    from_name: str
    subject: str
    preview: str
    html: str


def environment_summary(environment: Environment) -> dict:
    app_url = environment.app_url or ""
    return {
        "id": environment.id,
        "name": environment.name,
        "appURL": app_url,
        "appURLEncoded": quote(app_url, safe=""),
        "authURL": f"{app_url}/api/auth",
        "project": {
            "id": environment.project.id,
            "appName": environment.project.app_name,
        },
    }


def user_summary(user: User) -> dict:
    return {
        "id": user.id,
        "fullName": user.full_name,
        "email": user.email,
        "lastSignIn": user.last_sign_in,
        "emailConfirmed": user.email_confirmed,
        "profilePicture": user.profile_picture,
        "firstName": get_first_name(user.full_name),
    }


def render_email_template(template: EmailTemplate, context: dict[str, Any]) -> RenderedEmail:
    """Evaluate a stored template; preview is rendered first and exposed to content"""
    from_name = render_text_template(template.from_name, context, html=False)
    subject = render_text_template(template.subject, context, html=False)
    preview = render_text_template(template.preview, context)
    html = render_text_template(template.content, {**context, "preview": Markup(preview)})
    return RenderedEmail(from_name=from_name, subject=subject, preview=preview, html=html)


class EmailTemplateService:
    """Service layer for per-environment email templates"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = EmailTemplateRepository()

    async def get_by_type(
        self, email_template_type: EmailTemplateType, environment_id: str
    ) -> DataReturn[EmailTemplate]:
        """The enabled template of a type for an environment"""
        template = self.repo.get_by_type(self.db, email_template_type, environment_id)

        if not template:
            return DataReturn.not_found(
                f"Email template {email_template_type.value} not found (ENV: {environment_id})"
            )
        if not template.enabled:
            return DataReturn.not_found(
                f"Email template {email_template_type.value} is disabled (ENV: {environment_id})"
            )

        return DataReturn(data=template)

    async def list_templates(self, environment_id: str) -> list[EmailTemplate]:
        return self.repo.list_templates(self.db, environment_id)

    async def set_enabled(
        self, email_template_type: EmailTemplateType, environment_id: str, enabled: bool
    ) -> DataReturn[EmailTemplate]:
        template = self.repo.get_by_type(self.db, email_template_type, environment_id)
        if not template:
            return DataReturn.not_found(f"Email template {email_template_type.value} not found")

        template = self.repo.update_template(self.db, template, enabled=enabled)
        logger.info(
            f"{'Enabled' if enabled else 'Disabled'} email template {email_template_type.value} "
            f"(ENV: {environment_id})"
        )
        return DataReturn(data=template)

    async def create_defaults(
        self, environment_id: str, sender_domain: str = INTERNAL_EMAIL_DOMAIN, commit: bool = True
    ) -> list[EmailTemplate]:
        """Seed the built-in templates for a fresh environment"""
        templates = [
            EmailTemplate(
                type=template_type,
                name=definition["name"],
                subject=definition["subject"],
                preview=definition["preview"],
                content=definition["content"],
                from_name=DEFAULT_FROM_NAME,
                from_email=f"{DEFAULT_FROM_EMAIL_LOCAL_PART}@{sender_domain}",
                enabled=True,
                environment_id=environment_id,
            )
            for template_type, definition in DEFAULT_TEMPLATES.items()
        ]
        self.repo.create_templates(self.db, templates, commit=commit)
        logger.info(f"Created {len(templates)} default email templates (ENV: {environment_id})")
        return templates


class EmailService:
    """Transactional (tenant templates) and internal (platform) email sending"""

    def __init__(self, db: Session, transport: Optional[EmailTransport] = None):
        self.db = db
        self.transport = transport or ResendTransport()
        self.templates = EmailTemplateService(db)
        self.context_repo = EmailContextRepository()

    async def build_context(
        self, environment_id: str, user_id: Optional[str] = None, data: Optional[dict] = None
    ) -> DataReturn[dict]:
        """Caller data enriched with fresh environment and user summaries"""
        context = dict(data or {})

        environment = self.context_repo.get_environment(self.db, environment_id)
        if not environment:
            return DataReturn.not_found(f"Environment {environment_id} not found")

        context["environment"] = environment_summary(environment)
        context["appName"] = environment.project.app_name
        context["appURL"] = environment.app_url

        if user_id:
            user = self.context_repo.get_user(self.db, user_id)
            if not user:
                return DataReturn.not_found(f"User {user_id} not found")

            context["user"] = user_summary(user)
            context["userFullName"] = user.full_name
            context["userFirstName"] = context["user"]["firstName"]

        return DataReturn(data=context)

    async def send(
        self,
        to: Union[str, list[str]],
        email_template_type: EmailTemplateType,
        environment_id: str,
        user_id: Optional[str] = None,
        data: Optional[dict] = None,
        scheduled_at: Optional[datetime] = None,
    ) -> EmailResult:
        """Render the environment's template of this type and send it"""
        template_result = await self.templates.get_by_type(email_template_type, environment_id)
        if not template_result.ok:
            logger.warning(f"⚠️ Skipping email: {template_result.error}")
            return EmailResult(status=EmailSendStatus.SKIPPED, error=template_result.error)

        context_result = await self.build_context(environment_id, user_id, data)
        if not context_result.ok:
            logger.warning(
                f"⚠️ Skipping email {email_template_type.value} - Env: {environment_id}: "
                f"{context_result.error}"
            )
            return EmailResult(status=EmailSendStatus.SKIPPED, error=context_result.error)

        template = template_result.data
        try:
            rendered = render_email_template(template, context_result.data)
        except TemplateRenderError as e:
            logger.error(
                f"❌ Error on rendering email {email_template_type.value} - Env: {environment_id}: {e}"
            )
            return EmailResult(status=EmailSendStatus.RENDER_FAILED, error=str(e))

        message = EmailMessage(
            from_address=f"{rendered.from_name} <{template.from_email}>",
            to=to,
            subject=rendered.subject,
            html=rendered.html,
            reply_to=template.reply_to,
            scheduled_at=scheduled_at,
        )
        return await self._dispatch(message, email_template_type.value, environment_id)

    async def send_internal(
        self,
        from_channel: Union[str, InternalFromTypes],
        to: Union[str, list[str]],
        subject: str,
        content: str,
        scheduled_at: Optional[datetime] = None,
    ) -> EmailResult:
        """Send a trusted MJML component from one of the platform identities"""
        try:
            internal_email = INTERNAL_EMAILS[InternalFromTypes(from_channel)]
        except ValueError:
            logger.error(f"❌ Invalid internal email type {from_channel!r}")
            return EmailResult(status=EmailSendStatus.SKIPPED, error="Invalid internal email type")

        try:
            html = compile_mjml_to_html(content)
        except Exception as e:
            logger.error(f"❌ Error on rendering internal email {subject!r}: {e}")
            return EmailResult(status=EmailSendStatus.RENDER_FAILED, error=str(e))

        message = EmailMessage(
            from_address=internal_email["from"],
            to=to,
            subject=subject,
            html=html,
            scheduled_at=scheduled_at,
        )
        return await self._dispatch(message, f'"{subject}" (internal)', None)

    async def _dispatch(
        self, message: EmailMessage, label: str, environment_id: Optional[str]
    ) -> EmailResult:
        try:
            response = await self.transport.send(message)
        except Exception as e:
            logger.error(
                f"❌ Error on sending email {label} ({message.subject!r}) - Env: {environment_id}: {e}"
            )
            return EmailResult(status=EmailSendStatus.DISPATCH_FAILED, error=str(e))

        if message.scheduled_at:
            logger.info(f"📅 Email {label} scheduled for {message.scheduled_at.isoformat()}")
            status = EmailSendStatus.SCHEDULED
        else:
            logger.info(f"✅ Email {label} sent")
            status = EmailSendStatus.SENT

        return EmailResult(status=status, message_id=(response or {}).get("id"))
