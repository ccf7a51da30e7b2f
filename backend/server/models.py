"""Pydantic request models for the mock admin backend."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

APPLICATION_STATUSES = ("Pending", "Reviewed", "Accepted", "Rejected")
ROLES = ("user", "admin", "hr")


class RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# --- Shared ---


class IdsRequest(RequestModel):
    ids: list[str] = Field(default_factory=list)


# --- Careers ---


class CareerCreate(RequestModel):
    title_en: str
    title_ar: str
    department_en: str
    department_ar: str
    location_en: str
    location_ar: str
    employment_type_en: str = Field(alias="employmentType_en")
    employment_type_ar: str = Field(alias="employmentType_ar")
    short_description_en: Optional[str] = Field(default=None, alias="shortDescription_en")
    short_description_ar: Optional[str] = Field(default=None, alias="shortDescription_ar")
    description_en: Optional[str] = None
    description_ar: Optional[str] = None
    responsibilities_en: list[str] = Field(default_factory=list)
    responsibilities_ar: list[str] = Field(default_factory=list)
    requirements_en: list[str] = Field(default_factory=list)
    requirements_ar: list[str] = Field(default_factory=list)
    is_active: bool = Field(default=True, alias="isActive")
    order: Optional[int] = None


class CareerUpdate(RequestModel):
    """Partial update: only fields present in the body change."""
    title_en: Optional[str] = None
    title_ar: Optional[str] = None
    department_en: Optional[str] = None
    department_ar: Optional[str] = None
    location_en: Optional[str] = None
    location_ar: Optional[str] = None
    employment_type_en: Optional[str] = Field(default=None, alias="employmentType_en")
    employment_type_ar: Optional[str] = Field(default=None, alias="employmentType_ar")
    short_description_en: Optional[str] = Field(default=None, alias="shortDescription_en")
    short_description_ar: Optional[str] = Field(default=None, alias="shortDescription_ar")
    description_en: Optional[str] = None
    description_ar: Optional[str] = None
    responsibilities_en: Optional[list[str]] = None
    responsibilities_ar: Optional[list[str]] = None
    requirements_en: Optional[list[str]] = None
    requirements_ar: Optional[list[str]] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")
    order: Optional[int] = None


# --- Applications ---


class StatusRequest(RequestModel):
    status: str


# --- Auth ---


class LoginRequest(RequestModel):
    email: str
    password: str


class LogoutRequest(RequestModel):
    token: Optional[str] = None


class ForgotPasswordRequest(RequestModel):
    email: str


class ResetPasswordRequest(RequestModel):
    new_password: str = Field(alias="newPassword")


class ChangePasswordRequest(RequestModel):
    email: str
    new_password: str = Field(alias="newPassword")
