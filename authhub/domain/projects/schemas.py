"""Project domain schemas - Pydantic models for validation"""

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_app_name, validate_url


class ProjectCreate(BaseModel):
    """Schema for creating a new project"""

    appName: str
    appURL: str

    @field_validator("appName")
    @classmethod
    def validate_name(cls, v):
        return validate_app_name(v)

    @field_validator("appURL")
    @classmethod
    def validate_app_url(cls, v):
        return validate_url(v)


class ProjectUpdateGeneralInfo(BaseModel):
    """Schema for renaming a project"""

    appName: str

    @field_validator("appName")
    @classmethod
    def validate_name(cls, v):
        return validate_app_name(v)
