"""Exceptions du registre des menus."""
from __future__ import annotations

from dataclasses import dataclass


class MenuRegistryError(Exception):
    """Classe de base des erreurs levées par le registre des menus."""


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str
    menu_id: str | None = None

    def as_dict(self) -> dict[str, str | None]:
        return {"field": self.field, "message": self.message, "menuId": self.menu_id}

    def __str__(self) -> str:
        prefix = f"{self.menu_id}." if self.menu_id else ""
        return f"{prefix}{self.field}: {self.message}"


class ValidationError(MenuRegistryError):
    """Un ou plusieurs champs d'un élément de menu sont invalides."""

    def __init__(self, violations: list[FieldViolation]) -> None:
        self.violations = list(violations)
        super().__init__("; ".join(str(violation) for violation in self.violations))


class DuplicateKeyError(MenuRegistryError):
    def __init__(self, menu_id: str, message: str | None = None) -> None:
        self.menu_id = menu_id
        super().__init__(message or f"Élément de menu déjà existant: {menu_id}")


class NotFoundError(MenuRegistryError):
    def __init__(self, menu_id: str) -> None:
        self.menu_id = menu_id
        super().__init__(f"Élément de menu introuvable: {menu_id}")


class StoreUnavailableError(MenuRegistryError):
    """Le stockage MongoDB est injoignable ou a dépassé le délai imparti."""


__all__ = [
    "DuplicateKeyError",
    "FieldViolation",
    "MenuRegistryError",
    "NotFoundError",
    "StoreUnavailableError",
    "ValidationError",
]
