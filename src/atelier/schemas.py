"""Request bodies accepted by the API."""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Credentials for ``POST /api/auth/login``.

    ``username`` may be a user email or a member id.
    """

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=1)


class MemberUpdate(BaseModel):
    """Profile fields a member may change on their own record."""

    name_he: Optional[str] = None
    name_en: Optional[str] = None
    role_he: Optional[str] = None
    role_en: Optional[str] = None
    bio_he: Optional[str] = None
    bio_en: Optional[str] = None
    image_url: Optional[str] = None


class GalleryItemFields(BaseModel):
    title_he: Optional[str] = None
    title_en: Optional[str] = None
    description_he: Optional[str] = None
    description_en: Optional[str] = None
    image_url: Optional[str] = None


class CourseFields(BaseModel):
    """Course body; ``title_*`` is accepted as a synonym of ``name_*``."""

    name_he: Optional[str] = Field(None, validation_alias=AliasChoices("name_he", "title_he"))
    name_en: Optional[str] = Field(None, validation_alias=AliasChoices("name_en", "title_en"))
    description_he: Optional[str] = None
    description_en: Optional[str] = None
