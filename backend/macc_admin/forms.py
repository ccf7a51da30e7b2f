"""Create/edit dialogs.

A dialog owns a draft (a flat dict keyed by wire field names) seeded from an
empty template or from the entity being edited. Submitting validates the
draft synchronously; only a clean draft reaches the resource client. On
failure the dialog stays open with the draft intact.
"""

import logging
import re
from pathlib import Path
from typing import Annotated, Any, Callable, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError
from pydantic_core import PydanticCustomError

from macc_admin.errors import FALLBACK_MESSAGE, AdminError
from macc_admin.models import EMPLOYMENT_TYPES_AR, EMPLOYMENT_TYPES_EN, Career, Role, ServiceItem, ServiceSection, User

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# --- Multi-line fields ---


def lines_to_list(text: Optional[str]) -> list[str]:
    """Textarea -> list: one entry per line, trimmed, blank lines dropped."""
    return [line.strip() for line in (text or "").split("\n") if line.strip()]


def list_to_lines(items: Optional[list[str]]) -> str:
    return "\n".join(items or [])


# --- Schema helpers ---


def _min_length(n: int, message: str) -> AfterValidator:
    def check(value: str) -> str:
        if len(value) < n:
            raise PydanticCustomError("too_short", message)
        return value
    return AfterValidator(check)


def _email(value: str) -> str:
    if not EMAIL_RE.match(value):
        raise PydanticCustomError("email", "Invalid email address")
    return value


def _min_order(value: int) -> int:
    if value < 1:
        raise PydanticCustomError("too_small", "Order must be at least 1")
    return value


def required_str(message: str = "String must contain at least 2 character(s)"):
    return Annotated[str, _min_length(2, message)]


def _field_errors(error: ValidationError) -> dict[str, str]:
    """First message per field, keyed by the draft's field name."""
    errors: dict[str, str] = {}
    for e in error.errors():
        field = str(e["loc"][0]) if e["loc"] else "__root__"
        errors.setdefault(field, e["msg"])
    return errors


class DraftSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ServiceSectionDraft(DraftSchema):
    title_en: required_str("Title (EN) is required")
    title_ar: required_str("Title (AR) is required")
    sub_title_en: required_str("Subtitle (EN) is required")
    sub_title_ar: required_str("Subtitle (AR) is required")
    description_en: required_str("Description (EN) is required")
    description_ar: required_str("Description (AR) is required")
    is_active: bool = Field(default=True, alias="isActive")


class ServiceItemDraft(DraftSchema):
    title_en: required_str("Title (EN) is required")
    title_ar: required_str("Title (AR) is required")
    category_en: required_str("Category (EN) is required")
    category_ar: required_str("Category (AR) is required")
    description_en: required_str("Description (EN) is required")
    description_ar: required_str("Description (AR) is required")
    order: Annotated[int, AfterValidator(_min_order)]


class CareerDraft(DraftSchema):
    title_en: required_str()
    title_ar: required_str()
    department_en: required_str()
    department_ar: required_str()
    location_en: required_str()
    location_ar: required_str()
    employment_type_en: required_str() = Field(alias="employmentType_en")
    employment_type_ar: required_str() = Field(alias="employmentType_ar")
    short_description_en: str = Field(default="", alias="shortDescription_en")
    short_description_ar: str = Field(default="", alias="shortDescription_ar")
    description_en: str = ""
    description_ar: str = ""
    responsibilities_en: str = ""
    responsibilities_ar: str = ""
    requirements_en: str = ""
    requirements_ar: str = ""
    is_active: bool = Field(default=True, alias="isActive")


class UserDraft(DraftSchema):
    username: required_str("Username must be at least 2 characters") = Field(alias="userName")
    email: Annotated[str, AfterValidator(_email)]
    password: str = ""
    role: Role = "admin"
    is_active: bool = Field(default=True, alias="isActive")


# --- Dialogs ---


class DialogForm:
    """Shared open / edit / validate / submit cycle.

    Subclasses declare `schema` and `template`, and implement `seed`,
    `payload`, `create` and `update`. `check` adds rules that depend on
    whether the dialog is creating or editing.
    """

    schema: type[DraftSchema]
    template: dict[str, Any] = {}
    created_message = "Created"
    updated_message = "Updated"

    def __init__(self, client, notifier=None, on_success: Optional[Callable[[], Any]] = None):
        self.client = client
        self.notifier = notifier
        self.on_success = on_success
        self.is_open = False
        self.entity: Any = None
        self.draft: dict[str, Any] = {}
        self.errors: dict[str, str] = {}
        self.image: Optional[Path] = None
        self.preview: Optional[str] = None
        self.submitting = False

    @property
    def is_edit(self) -> bool:
        return self.entity is not None

    def open(self, entity: Any = None) -> None:
        """Seed a fresh draft. Reopening discards whatever was typed before."""
        self.entity = entity
        self.draft = self.seed(entity) if entity is not None else dict(self.template)
        self.errors = {}
        self.image = None
        self.preview = self.current_image(entity) if entity is not None else None
        self.is_open = True

    def close(self) -> None:
        self.is_open = False
        self.entity = None
        self.image = None
        self.preview = None

    def set(self, field: str, value: Any) -> None:
        if field not in self.draft:
            raise KeyError(f"Unknown field: {field}")
        self.draft[field] = value

    def fill(self, **values: Any) -> None:
        for field, value in values.items():
            self.set(field, value)

    def select_image(self, path) -> None:
        """Pick a local file. It is only read when the dialog submits."""
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"No such image: {path}")
        self.image = path
        self.preview = path.resolve().as_uri()

    # --- Subclass hooks ---

    def seed(self, entity: Any) -> dict[str, Any]:
        raise NotImplementedError

    def current_image(self, entity: Any) -> Optional[str]:
        image = getattr(entity, "image", None)
        return image.image_link if image is not None else None

    def check(self) -> dict[str, str]:
        return {}

    def payload(self, values: DraftSchema) -> dict[str, Any]:
        return values.model_dump(by_alias=True)

    def create(self, payload: dict[str, Any]) -> Any:
        return self.client.create(payload, image=self.image)

    def update(self, payload: dict[str, Any]) -> Any:
        return self.client.update(self.entity.id, payload, image=self.image)

    # --- Validate / submit ---

    def _validated(self) -> tuple[Optional[DraftSchema], dict[str, str]]:
        try:
            values = self.schema.model_validate(self.draft)
            errors: dict[str, str] = {}
        except ValidationError as e:
            values, errors = None, _field_errors(e)
        return values, errors

    def validate(self) -> dict[str, str]:
        """Field -> message for every rule the draft breaks; empty when clean."""
        _, errors = self._validated()
        for field, message in self.check().items():
            errors.setdefault(field, message)
        self.errors = errors
        return errors

    def submit(self) -> bool:
        if not self.is_open:
            return False
        values, errors = self._validated()
        extra = self.check()
        for field, message in extra.items():
            errors.setdefault(field, message)
        self.errors = errors
        if errors:
            # Schema errors render inline; mode-dependent rules are announced
            for message in extra.values():
                self._notify("error", message)
            return False

        self.submitting = True
        try:
            if self.is_edit:
                self.update(self.payload(values))
            else:
                self.create(self.payload(values))
        except AdminError as e:
            logger.error("Submit failed: %s", getattr(e, "detail", None) or e)
            self._notify("error", getattr(e, "server_message", None) or FALLBACK_MESSAGE)
            return False
        finally:
            self.submitting = False

        self._notify("success", self.updated_message if self.is_edit else self.created_message)
        self.close()
        if self.on_success:
            self.on_success()
        return True

    def _notify(self, level: str, message: str) -> None:
        if self.notifier is not None:
            getattr(self.notifier, level)(message)


class ServiceSectionForm(DialogForm):
    """Section header. The header image is optional on create and update."""

    schema = ServiceSectionDraft
    template = {
        "title_en": "",
        "title_ar": "",
        "sub_title_en": "",
        "sub_title_ar": "",
        "description_en": "",
        "description_ar": "",
        "isActive": True,
    }
    created_message = "Service created"
    updated_message = "Service updated"

    def seed(self, section: ServiceSection) -> dict[str, Any]:
        draft = dict(self.template)
        draft.update({k: v for k, v in section.header.to_wire().items() if k in draft})
        draft["isActive"] = section.is_active
        return draft

    def current_image(self, section: ServiceSection) -> Optional[str]:
        image = section.header.image
        return image.image_link if image is not None else None

    def payload(self, values: ServiceSectionDraft) -> dict[str, Any]:
        data = values.model_dump(by_alias=True)
        is_active = data.pop("isActive")
        payload = {f"header[{k}]": v for k, v in data.items()}
        payload["isActive"] = is_active
        return payload


class ServiceItemForm(DialogForm):
    """One item inside a section. New items must come with an image."""

    schema = ServiceItemDraft
    template = {
        "title_en": "",
        "title_ar": "",
        "category_en": "",
        "category_ar": "",
        "description_en": "",
        "description_ar": "",
        "order": 0,
    }
    created_message = "Item added successfully"
    updated_message = "Item updated successfully"

    def __init__(self, client, section: ServiceSection, notifier=None, on_success=None):
        super().__init__(client, notifier, on_success)
        self.section = section

    def open(self, entity: Optional[ServiceItem] = None) -> None:
        super().open(entity)
        if entity is None:
            self.draft["order"] = len(self.section.services) + 1

    def seed(self, item: ServiceItem) -> dict[str, Any]:
        draft = dict(self.template)
        draft.update({k: v for k, v in item.to_wire().items() if k in draft})
        return draft

    def check(self) -> dict[str, str]:
        if not self.is_edit and self.image is None:
            return {"image": "Image is required"}
        return {}

    def create(self, payload: dict[str, Any]) -> Any:
        return self.client.add_item(self.section.id, payload, image=self.image)

    def update(self, payload: dict[str, Any]) -> Any:
        return self.client.update_item(self.section.id, self.entity.id, payload, image=self.image)


class ServiceItemsDialog:
    """Item manager for one section: list, add/edit form, confirm-then-delete.

    Mutations refresh the owning services page, then re-read the section
    from its fresh collection.
    """

    def __init__(self, controller, section: ServiceSection):
        self.controller = controller
        self.section = section
        self.pending_delete: Optional[str] = None
        self.form = ServiceItemForm(controller.client, section, controller.notifier, on_success=self.refresh)

    @property
    def items(self) -> list[ServiceItem]:
        return self.section.services

    def refresh(self) -> None:
        self.controller.fetch_data()
        self.section = self.controller.find(self.section.id) or self.section
        self.form.section = self.section

    def add(self) -> ServiceItemForm:
        self.form.open()
        return self.form

    def edit(self, item_id: str) -> ServiceItemForm:
        item = next((i for i in self.items if i.id == item_id), None)
        if item is None:
            raise KeyError(f"No item {item_id} in section {self.section.id}")
        self.form.open(item)
        return self.form

    def request_delete(self, item_id: str) -> None:
        self.pending_delete = item_id

    def cancel_delete(self) -> None:
        self.pending_delete = None

    def confirm_delete(self) -> bool:
        if self.pending_delete is None:
            return False
        item_id, self.pending_delete = self.pending_delete, None
        try:
            self.controller.client.delete_item(self.section.id, item_id)
        except AdminError as e:
            logger.error("Failed to delete item %s: %s", item_id, getattr(e, "detail", None) or e)
            self.controller.notifier.error("Failed to delete item")
            return False
        self.controller.notifier.success("Item deleted")
        self.refresh()
        return True


class CareerForm(DialogForm):
    """Job post. Responsibilities and requirements are edited as text, one per line."""

    schema = CareerDraft
    template = {
        "title_en": "",
        "title_ar": "",
        "department_en": "",
        "department_ar": "",
        "location_en": "",
        "location_ar": "",
        "employmentType_en": EMPLOYMENT_TYPES_EN[0],
        "employmentType_ar": EMPLOYMENT_TYPES_AR[0],
        "shortDescription_en": "",
        "shortDescription_ar": "",
        "description_en": "",
        "description_ar": "",
        "responsibilities_en": "",
        "responsibilities_ar": "",
        "requirements_en": "",
        "requirements_ar": "",
        "isActive": True,
    }
    list_fields = ("responsibilities_en", "responsibilities_ar", "requirements_en", "requirements_ar")
    created_message = "Career posted"
    updated_message = "Career updated"

    def seed(self, career: Career) -> dict[str, Any]:
        draft = dict(self.template)
        draft.update({k: v for k, v in career.to_wire().items() if k in draft})
        for field in self.list_fields:
            value = draft[field]
            draft[field] = list_to_lines(value) if isinstance(value, list) else (value or "")
        return draft

    def current_image(self, career: Career) -> Optional[str]:
        return None

    def payload(self, values: CareerDraft) -> dict[str, Any]:
        payload = values.model_dump(by_alias=True)
        for field in self.list_fields:
            payload[field] = lines_to_list(payload[field])
        return payload


class UserForm(DialogForm):
    """Account. Password is required on create; blank on edit keeps the current one."""

    schema = UserDraft
    template = {
        "userName": "",
        "email": "",
        "password": "",
        "role": "admin",
        "isActive": True,
    }
    created_message = "User created successfully"
    updated_message = "User updated successfully"

    def seed(self, user: User) -> dict[str, Any]:
        draft = dict(self.template)
        draft.update({k: v for k, v in user.to_wire().items() if k in draft})
        draft["password"] = ""
        return draft

    def check(self) -> dict[str, str]:
        if not self.is_edit and not self.draft.get("password"):
            return {"password": "Password is required when creating a new user"}
        return {}

    def payload(self, values: UserDraft) -> dict[str, Any]:
        payload = values.model_dump(by_alias=True)
        if not payload["password"]:
            del payload["password"]
        return payload
