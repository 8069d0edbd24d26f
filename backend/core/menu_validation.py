"""Validation et normalisation des éléments de menu.

Toutes les violations sont collectées avant de lever l'erreur, afin qu'un
chargement en masse puisse signaler tous les problèmes d'un seul coup.
"""
from __future__ import annotations

from collections import Counter
from typing import Any, Iterable, Mapping

from pydantic import ValidationError as PydanticValidationError

from backend.core import models
from backend.core.errors import FieldViolation, ValidationError

_LEGACY_DROPPED_KEYS = {"_id", "__v", "subcategory", "parentId", "roles", "text"}

_CATEGORY_ALIASES: dict[str, str] = {
    "admin": "administration",
    "administration": "administration",
    "primary": "primary",
    "secondary": "secondary",
}


def _violations_from_pydantic(
    exc: PydanticValidationError, menu_id: str | None
) -> list[FieldViolation]:
    violations: list[FieldViolation] = []
    for error in exc.errors():
        location = error.get("loc") or ()
        field = ".".join(str(part) for part in location) or "__root__"
        violations.append(FieldViolation(field=field, message=error.get("msg", "invalide"), menu_id=menu_id))
    return violations


def _candidate_menu_id(candidate: Any) -> str | None:
    if isinstance(candidate, Mapping):
        value = candidate.get("menuId", candidate.get("menu_id"))
        return value if isinstance(value, str) else None
    return None


def collect_violations(candidate: Any) -> list[FieldViolation]:
    """Renvoie toutes les violations de ``candidate`` sans lever d'erreur."""
    if isinstance(candidate, models.MenuItem):
        return []
    menu_id = _candidate_menu_id(candidate)
    if not isinstance(candidate, Mapping):
        return [FieldViolation(field="__root__", message="un objet est attendu", menu_id=menu_id)]
    try:
        models.MenuItem.model_validate(dict(candidate))
    except PydanticValidationError as exc:
        return _violations_from_pydantic(exc, menu_id)
    return []


def validate(candidate: Any) -> models.MenuItem:
    """Valide un élément candidat et renvoie sa forme normalisée.

    Raises:
        ValidationError: une violation par champ invalide.
    """
    if isinstance(candidate, models.MenuItem):
        return candidate
    violations = collect_violations(candidate)
    if violations:
        raise ValidationError(violations)
    return models.MenuItem.model_validate(dict(candidate))


def validate_many(candidates: Iterable[Any]) -> list[models.MenuItem]:
    """Valide un lot et signale en une fois les violations de tous les candidats.

    Les ``menuId`` en double dans le lot sont aussi signalés comme violations.
    """
    items: list[Any] = list(candidates)
    violations: list[FieldViolation] = []
    for candidate in items:
        violations.extend(collect_violations(candidate))

    ids = [
        candidate.menu_id if isinstance(candidate, models.MenuItem) else _candidate_menu_id(candidate)
        for candidate in items
    ]
    duplicates = sorted(menu_id for menu_id, count in Counter(filter(None, ids)).items() if count > 1)
    for menu_id in duplicates:
        violations.append(FieldViolation(field="menuId", message="identifiant dupliqué", menu_id=menu_id))

    if violations:
        raise ValidationError(violations)
    return [validate(candidate) for candidate in items]


def _lowest_role(roles: Iterable[object]) -> str | None:
    known = [str(role).strip().lower() for role in roles if str(role).strip().lower() in models.ROLE_RANK]
    if not known:
        return None
    return min(known, key=models.ROLE_RANK.__getitem__)


def is_legacy_document(document: Mapping[str, Any]) -> bool:
    if "text" in document or "roles" in document:
        return True
    if "subcategory" in document or "parentId" in document:
        return True
    category = document.get("category")
    return isinstance(category, str) and category not in models.CATEGORIES


def normalize_legacy(document: Mapping[str, Any]) -> dict[str, Any]:
    """Traduit un document des anciens scripts vers le schéma canonique.

    ``text`` devient ``label`` ; une liste ``roles`` devient le rôle le moins
    privilégié qu'elle contient ; les catégories avec majuscule ou ``admin``
    prennent leur orthographe canonique. Les catégories inconnues sont
    conservées telles quelles pour que la validation les rejette.
    """
    normalized = {key: value for key, value in document.items() if key not in _LEGACY_DROPPED_KEYS}

    if "label" not in normalized and "text" in document:
        normalized["label"] = document["text"]

    if "requiredRole" not in normalized:
        roles = document.get("roles")
        if isinstance(roles, str):
            roles = [roles]
        if isinstance(roles, (list, tuple)):
            lowest = _lowest_role(roles)
            if lowest:
                normalized["requiredRole"] = lowest

    category = normalized.get("category")
    if isinstance(category, str):
        key = category.strip().lower()
        normalized["category"] = _CATEGORY_ALIASES.get(key, category)

    return normalized


__all__ = [
    "collect_violations",
    "is_legacy_document",
    "normalize_legacy",
    "validate",
    "validate_many",
]
