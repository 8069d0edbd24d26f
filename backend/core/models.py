"""Modèles Pydantic pour l'API et le stockage des menus."""
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MenuCategory = Literal["primary", "secondary", "administration"]
MenuRole = Literal["user", "data-steward", "admin"]

# Ordre d'affichage des sections de navigation.
CATEGORIES: tuple[str, ...] = ("primary", "secondary", "administration")
# Du moins au plus privilégié.
ROLES: tuple[str, ...] = ("user", "data-steward", "admin")
ROLE_RANK: dict[str, int] = {role: rank for rank, role in enumerate(ROLES)}

MENU_ID_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


def _strip_required(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValueError("ne peut pas être vide")
        return stripped
    return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class MenuItem(_CamelModel):
    """Une entrée de navigation, telle que stockée dans ``menusettings``."""

    menu_id: str = Field(..., alias="menuId", pattern=MENU_ID_PATTERN, max_length=128)
    label: str = Field(..., max_length=256)
    path: str = Field(..., max_length=512)
    category: MenuCategory = "primary"
    order: int = Field(0, ge=0, strict=True)
    required_role: MenuRole = Field("user", alias="requiredRole")
    is_enabled: bool = Field(True, alias="isEnabled", strict=True)
    icon: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator("label", "path", mode="before")
    @classmethod
    def _non_empty(cls, value: object) -> object:
        return _strip_required(value)

    def definition(self) -> dict[str, object]:
        """Champs persistés hors horodatages, avec les noms du stockage."""
        return self.model_dump(by_alias=True, exclude={"created_at", "updated_at"})


class MenuItemUpdate(_CamelModel):
    label: Optional[str] = Field(default=None, max_length=256)
    path: Optional[str] = Field(default=None, max_length=512)
    category: Optional[MenuCategory] = None
    order: Optional[int] = Field(default=None, ge=0, strict=True)
    required_role: Optional[MenuRole] = Field(default=None, alias="requiredRole")
    is_enabled: Optional[bool] = Field(default=None, alias="isEnabled", strict=True)
    icon: Optional[str] = None

    @field_validator("label", "path", mode="before")
    @classmethod
    def _non_empty(cls, value: object) -> object:
        return _strip_required(value)

    def changes(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class EnabledPayload(_CamelModel):
    is_enabled: bool = Field(..., alias="isEnabled", strict=True)


class BulkEnabledPayload(_CamelModel):
    menu_ids: list[str] = Field(..., alias="menuIds")
    is_enabled: bool = Field(..., alias="isEnabled", strict=True)


class OrderPayload(_CamelModel):
    order: int = Field(..., ge=0, strict=True)


class VisibleMenuEntry(_CamelModel):
    menu_id: str = Field(..., alias="menuId")
    label: str
    path: str
    order: int
    icon: Optional[str] = None


class VisibleMenuGroup(_CamelModel):
    category: MenuCategory
    items: list[VisibleMenuEntry] = Field(default_factory=list)


class InitializationReport(_CamelModel):
    created: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    updated: list[str] = Field(default_factory=list)

    @property
    def created_count(self) -> int:
        return len(self.created)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def summary(self) -> str:
        return f"created: {self.created_count}, skipped: {self.skipped_count}"


class User(BaseModel):
    username: str
    role: MenuRole = "user"
