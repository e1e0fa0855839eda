"""Email repository - templates and the records an email context is built from"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import EmailTemplate, EmailTemplateType, Environment, User


class EmailTemplateRepository:
    """Repository for email template database operations"""

    @staticmethod
    def get_by_type(
        db: Session, email_template_type: EmailTemplateType, environment_id: str
    ) -> Optional[EmailTemplate]:
        return (
            db.query(EmailTemplate)
            .filter(
                EmailTemplate.type == email_template_type,
                EmailTemplate.environment_id == environment_id,
            )
            .first()
        )

    @staticmethod
    def list_templates(db: Session, environment_id: str) -> list[EmailTemplate]:
        return (
            db.query(EmailTemplate)
            .filter(EmailTemplate.environment_id == environment_id)
            .order_by(EmailTemplate.type)
            .all()
        )

    @staticmethod
    def create_templates(db: Session, templates: list[EmailTemplate], commit: bool = True) -> None:
        db.add_all(templates)
        if commit:
            db.commit()

    @staticmethod
    def update_template(db: Session, template: EmailTemplate, **updates) -> EmailTemplate:
        for key, value in updates.items():
            if value is not None and hasattr(template, key):
                setattr(template, key, value)

        db.commit()
        db.refresh(template)
        return template


class EmailContextRepository:
    """Fresh reads of the environment and user an email is about"""

    @staticmethod
    def get_environment(db: Session, environment_id: str) -> Optional[Environment]:
        return (
            db.query(Environment)
            .options(joinedload(Environment.project))
            .filter(Environment.id == environment_id)
            .first()
        )

    @staticmethod
    def get_user(db: Session, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()
