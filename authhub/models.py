import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    event,
    inspect,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_id():
    """Generate a unique string primary key"""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Enums
class AuthProvider(str, enum.Enum):
    MagicLogin = "MagicLogin"
    EmailAndPassword = "EmailAndPassword"


class CustomDomainStatus(str, enum.Enum):
    Verifying = "Verifying"
    Verified = "Verified"
    Failed = "Failed"


class ConfigRelationType(str, enum.Enum):
    CustomFields = "CustomFields"
    UserRoles = "UserRoles"


class CustomFieldType(str, enum.Enum):
    String = "String"
    Int = "Int"
    Boolean = "Boolean"
    JSON = "JSON"


class CustomFieldRelationType(str, enum.Enum):
    User = "User"
    CMS = "CMS"


class EmailTemplateType(str, enum.Enum):
    MagicLink = "MagicLink"
    ForgotPassword = "ForgotPassword"
    ConfirmEmail = "ConfirmEmail"
    Welcome = "Welcome"
    Invite = "Invite"


class TokenType(str, enum.Enum):
    MagicLogin = "MagicLogin"
    Refresh = "Refresh"
    ConfirmEmail = "ConfirmEmail"
    ResetPassword = "ResetPassword"
    InviteUser = "InviteUser"


class User(Base):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("email", "environment_id", name="uq_users_email_env"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), index=True, nullable=False)
    password = Column(String(255), nullable=True)  # Hash; null for magic-login users
    last_sign_in = Column(DateTime, nullable=True)
    email_confirmed = Column(Boolean, default=False, nullable=False)
    profile_picture = Column(String(500), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    # Null for platform users (project owners)
    environment_id = Column(
        String(36), ForeignKey("environments.id", ondelete="CASCADE"), nullable=True, index=True
    )
    role_id = Column(String(36), ForeignKey("roles.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    environment = relationship("Environment", back_populates="users")
    role = relationship("Role")
    projects = relationship("Project", back_populates="user_owner", cascade="all, delete-orphan")
    subscriptions = relationship(
        "UserSubscription", back_populates="user", cascade="all, delete-orphan"
    )


class UserSubscription(Base):
    __tablename__ = "user_subscriptions"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Placeholder for the payment provider's subscription id; no integration here
    payment_provider_subscription_id = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="subscriptions")


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=generate_id)
    app_name = Column(String(255), nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    main = Column(Boolean, default=False, nullable=False)
    # users -> environments -> projects -> users is a cycle, so this FK is added after the tables
    user_owner_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE", use_alter=True, name="fk_projects_user_owner"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user_owner = relationship("User", back_populates="projects", foreign_keys=[user_owner_id])
    environments = relationship(
        "Environment", back_populates="project", cascade="all, delete-orphan"
    )


class Environment(Base):
    __tablename__ = "environments"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    # API credentials: globally unique, never rewritten once issued
    public_key = Column(String(255), unique=True, nullable=False, index=True)
    secret_key = Column(String(255), unique=True, nullable=False, index=True)
    token_expiration = Column(String(20), nullable=False)  # e.g. "1d", "30m"
    refresh_token_expiration = Column(String(20), nullable=True)
    app_url = Column(String(500), nullable=False)
    auth_provider = Column(
        Enum(AuthProvider, name="auth_provider"), default=AuthProvider.MagicLogin, nullable=False
    )
    # Custom domain verification
    custom_domain = Column(String(255), nullable=True)
    custom_domain_txt_record = Column(String(255), nullable=True)
    custom_domain_status = Column(Enum(CustomDomainStatus, name="custom_domain_status"), nullable=True)
    custom_domain_txt_status = Column(
        Enum(CustomDomainStatus, name="custom_domain_txt_status"), nullable=True
    )
    custom_domain_last_validation_at = Column(DateTime, nullable=True)
    custom_domain_start_validation_at = Column(DateTime, nullable=True)
    project_id = Column(
        String(36), ForeignKey("projects.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False, index=True,
    )
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    project = relationship("Project", back_populates="environments")
    users = relationship("User", back_populates="environment", cascade="all, delete-orphan")
    roles = relationship("Role", back_populates="environment", cascade="all, delete-orphan")
    custom_fields = relationship(
        "CustomField", back_populates="environment", cascade="all, delete-orphan"
    )
    project_configs = relationship(
        "ProjectConfigOnEnvironment", back_populates="environment", cascade="all, delete-orphan"
    )
    email_templates = relationship(
        "EmailTemplate", back_populates="environment", cascade="all, delete-orphan"
    )
    email_domains = relationship(
        "EmailDomain", back_populates="environment", cascade="all, delete-orphan"
    )
    tokens = relationship("TokenStorage", back_populates="environment", cascade="all, delete-orphan")
    data = relationship("EnvironmentData", back_populates="environment", cascade="all, delete-orphan")


@event.listens_for(Environment.public_key, "set", active_history=True)
@event.listens_for(Environment.secret_key, "set", active_history=True)
def _reject_credential_rewrite(target, value, oldvalue, _initiator):
    if inspect(target).persistent and oldvalue is not None and value != oldvalue:
        raise ValueError("Environment keys are immutable once issued")


class EnvironmentData(Base):
    """Open-ended configuration slot; id is the canonical key, unique per environment"""

    __tablename__ = "environment_data"

    id = Column(String(255), primary_key=True)
    environment_id = Column(
        String(36), ForeignKey("environments.id", ondelete="CASCADE"), primary_key=True
    )
    value = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    environment = relationship("Environment", back_populates="data")


class Role(Base):
    __tablename__ = "roles"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    environment_id = Column(
        String(36), ForeignKey("environments.id", ondelete="CASCADE"), nullable=True, index=True
    )
    created_at = Column(DateTime, server_default=func.now())

    environment = relationship("Environment", back_populates="roles")


class CustomField(Base):
    __tablename__ = "custom_fields"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    type = Column(Enum(CustomFieldType, name="custom_field_type"), nullable=False)
    relation_type = Column(
        Enum(CustomFieldRelationType, name="custom_field_relation_type"), nullable=False
    )
    environment_id = Column(
        String(36), ForeignKey("environments.id", ondelete="CASCADE"), nullable=True, index=True
    )
    created_at = Column(DateTime, server_default=func.now())

    environment = relationship("Environment", back_populates="custom_fields")


class ProjectConfigOnEnvironment(Base):
    """Binds an environment/project pair to a Role or CustomField (no FK: target varies)"""

    __tablename__ = "project_configs_on_environments"

    environment_id = Column(
        String(36), ForeignKey("environments.id", ondelete="CASCADE"), primary_key=True
    )
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True)
    relation_id = Column(String(36), nullable=False)
    relation_type = Column(Enum(ConfigRelationType, name="config_relation_type"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    environment = relationship("Environment", back_populates="project_configs")


class EmailTemplate(Base):
    __tablename__ = "email_templates"
    __table_args__ = (
        UniqueConstraint("type", "environment_id", name="uq_email_templates_type_env"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    type = Column(Enum(EmailTemplateType, name="email_template_type"), nullable=False)
    name = Column(String(255), nullable=False)
    # subject, from_name, content and preview are text templates evaluated at send time
    subject = Column(String(500), nullable=False)
    from_name = Column(String(255), nullable=False)
    from_email = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    preview = Column(String(500), nullable=True)
    reply_to = Column(String(255), nullable=True)
    enabled = Column(Boolean, default=True, nullable=False)
    environment_id = Column(
        String(36), ForeignKey("environments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    environment = relationship("Environment", back_populates="email_templates")


class EmailDomain(Base):
    __tablename__ = "email_domains"

    id = Column(String(36), primary_key=True, default=generate_id)
    external_id = Column(String(255), unique=True, nullable=False)  # Provider-side domain id
    domain = Column(String(255), unique=True, nullable=False)
    status = Column(String(50), nullable=False, default="pending")
    environment_id = Column(
        String(36), ForeignKey("environments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    environment = relationship("Environment", back_populates="email_domains")


class TokenStorage(Base):
    """Single-use, time-bounded credential keyed by the opaque token string"""

    __tablename__ = "token_storage"

    token = Column(String(255), primary_key=True)
    type = Column(Enum(TokenType, name="token_type"), nullable=False)
    # Meaning depends on type; never validated here
    relation_id = Column(String(255), nullable=False, index=True)
    expires = Column(DateTime, nullable=False)
    # Null for platform-level tokens
    environment_id = Column(
        String(36), ForeignKey("environments.id", ondelete="CASCADE"), nullable=True, index=True
    )
    created_at = Column(DateTime, server_default=func.now())

    environment = relationship("Environment", back_populates="tokens")
