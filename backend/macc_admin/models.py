"""Pydantic models for the dashboard's resources.

The backend speaks flat bilingual fields (`title_en`, `title_ar`, ...).
Here every such pair is folded into one `Localized` value on the way in
and flattened back by `to_wire()` on the way out, so a record can never
carry one locale without the other.
"""

from typing import Annotated, Any, ClassVar, Generic, Iterable, Literal, Optional, TypeVar, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

T = TypeVar("T")

ApplicationStatus = Literal["Pending", "Reviewed", "Accepted", "Rejected"]
APPLICATION_STATUSES: tuple[str, ...] = get_args(ApplicationStatus)

Role = Literal["user", "admin", "hr"]
ROLES: tuple[str, ...] = get_args(Role)

EMPLOYMENT_TYPES_EN = ("Full-Time", "Part-Time", "Contract")
EMPLOYMENT_TYPES_AR = ("دوام كامل", "دوام جزئي", "عقد")


class Localized(BaseModel, Generic[T]):
    en: T
    ar: T


class WireModel(BaseModel):
    """Base for records exchanged with the backend.

    Subclasses list their bilingual groups in `localized_fields`
    (attribute name -> wire stem, e.g. "employment_type" -> "employmentType").
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    localized_fields: ClassVar[dict[str, str]] = {}

    @model_validator(mode="before")
    @classmethod
    def fold_localized(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not cls.localized_fields:
            return data
        data = dict(data)
        for attr, stem in cls.localized_fields.items():
            en_key, ar_key = f"{stem}_en", f"{stem}_ar"
            if en_key not in data and ar_key not in data:
                continue
            en, ar = data.pop(en_key, None), data.pop(ar_key, None)
            if en is None and ar is None:
                continue
            # A half-filled pair is padded with the empty value of its type
            if en is None:
                en = [] if isinstance(ar, list) else ""
            if ar is None:
                ar = [] if isinstance(en, list) else ""
            data[attr] = {"en": en, "ar": ar}
        return data

    def to_wire(self) -> dict:
        """Dump with backend field names and flat `_en/_ar` pairs."""
        data = {}
        for name, field in type(self).model_fields.items():
            value = getattr(self, name)
            if value is None:
                continue
            if name in self.localized_fields:
                stem = self.localized_fields[name]
                data[f"{stem}_en"] = value.en
                data[f"{stem}_ar"] = value.ar
            else:
                data[field.alias or name] = _wire(value)
        return data


def _wire(value: Any) -> Any:
    if isinstance(value, WireModel):
        return value.to_wire()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, list):
        return [_wire(v) for v in value]
    return value


# --- Shared ---


class ImageRef(WireModel):
    image_link: str = Field(alias="imageLink")
    public_id: Optional[str] = None


# --- Services ---


class ServiceHeader(WireModel):
    localized_fields = {"title": "title", "sub_title": "sub_title", "description": "description"}

    title: Localized[str]
    sub_title: Localized[str]
    description: Localized[str]
    image: Optional[ImageRef] = None


class ServiceItem(WireModel):
    localized_fields = {"title": "title", "category": "category", "description": "description"}

    id: Optional[str] = Field(default=None, alias="_id")
    title: Localized[str]
    category: Localized[str]
    description: Localized[str]
    image: Optional[ImageRef] = None
    custom_id: Optional[str] = Field(default=None, alias="customId")
    order: int = 0  # Caller-assigned; gaps and duplicates allowed


class ServiceSection(WireModel):
    id: str = Field(alias="_id")
    header: ServiceHeader
    services: list[ServiceItem] = Field(default_factory=list)
    is_active: bool = Field(default=True, alias="isActive")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")


# --- Careers ---


class Career(WireModel):
    localized_fields = {
        "title": "title",
        "department": "department",
        "location": "location",
        "employment_type": "employmentType",
        "short_description": "shortDescription",
        "description": "description",
        "responsibilities": "responsibilities",
        "requirements": "requirements",
    }

    id: str = Field(alias="_id")
    title: Localized[str]
    department: Localized[str]
    location: Localized[str]
    employment_type: Localized[str]
    short_description: Optional[Localized[str]] = None
    description: Optional[Localized[str]] = None
    responsibilities: Optional[Localized[list[str]]] = None
    requirements: Optional[Localized[list[str]]] = None
    is_active: bool = Field(default=True, alias="isActive")
    order: Optional[int] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")


# --- Applications ---


class UnresolvedCareer(BaseModel):
    """Application points at a career by id only."""
    kind: Literal["unresolved"] = "unresolved"
    id: str


class ResolvedCareer(BaseModel):
    """Application carries the populated career."""
    kind: Literal["resolved"] = "resolved"
    career: Career

    @property
    def id(self) -> str:
        return self.career.id


CareerRef = Annotated[Union[UnresolvedCareer, ResolvedCareer], Field(discriminator="kind")]


class CvFile(WireModel):
    file_url: str = Field(alias="fileUrl")
    public_id: Optional[str] = None


class Application(WireModel):
    id: str = Field(alias="_id")
    career: CareerRef
    full_name: str = Field(alias="fullName")
    email: str
    phone: str = ""
    cv: Optional[CvFile] = None
    status: ApplicationStatus = "Pending"
    created_at: Optional[str] = Field(default=None, alias="createdAt")

    @field_validator("career", mode="before")
    @classmethod
    def tag_career(cls, v):
        """The backend sends a bare id, the populated career, or null once the
        career has been deleted (kept as unresolved with an empty id)."""
        if v is None:
            return {"kind": "unresolved", "id": ""}
        if isinstance(v, str):
            return {"kind": "unresolved", "id": v}
        if isinstance(v, Career):
            return ResolvedCareer(career=v)
        if isinstance(v, dict) and "kind" not in v:
            return {"kind": "resolved", "career": v}
        return v

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        """Accept the lowercase variants older records carry."""
        if isinstance(v, str):
            lowered = v.lower()
            if lowered == "viewed":
                return "Reviewed"
            for status in APPLICATION_STATUSES:
                if status.lower() == lowered:
                    return status
        return v

    @property
    def career_id(self) -> str:
        return self.career.id

    @property
    def is_resolved(self) -> bool:
        return isinstance(self.career, ResolvedCareer)

    def resolve(self, careers: Iterable[Career]) -> "Application":
        """Return a copy whose career is populated from `careers` when found."""
        if self.is_resolved:
            return self
        match = next((c for c in careers if c.id == self.career.id), None)
        if match is None:
            return self
        return self.model_copy(update={"career": ResolvedCareer(career=match)})

    def resolved_career(self) -> Career:
        if not isinstance(self.career, ResolvedCareer):
            raise LookupError(f"Career {self.career.id} is not resolved; call resolve() first")
        return self.career.career

    def to_wire(self) -> dict:
        data = super().to_wire()
        if isinstance(self.career, ResolvedCareer):
            data["career"] = self.career.career.to_wire()
        else:
            data["career"] = self.career.id or None
        return data


# --- Users ---


class User(WireModel):
    """Account as read back from the API. Password is never present."""
    id: str = Field(alias="_id")
    username: str = Field(alias="userName")
    email: str
    role: Role = "user"
    image: Optional[ImageRef] = None
    is_active: bool = Field(default=True, alias="isActive")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")


# --- Dashboard ---


class DashboardStats(BaseModel):
    applications: int = 0
    services: int = 0
    careers: int = 0
