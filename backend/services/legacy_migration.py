"""Migration des documents de menu écrits par les anciens scripts.

Les anciens scripts écrivaient ``text`` au lieu de ``label``, une liste
``roles`` au lieu de ``requiredRole``, des catégories avec majuscule et,
faute d'index unique, parfois deux fois le même ``menuId``. Cette passe
réécrit ces documents dans le schéma canonique et ne garde qu'un document
par ``menuId`` (le plus récemment modifié).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from backend.core import menu_validation
from backend.core.errors import FieldViolation, ValidationError
from backend.core.storage import MenuRegistryStore, project_document

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class MigrationReport:
    migrated: list[str] = field(default_factory=list)
    duplicates_removed: list[str] = field(default_factory=list)
    invalid: list[FieldViolation] = field(default_factory=list)
    unchanged: int = 0

    @property
    def ok(self) -> bool:
        return not self.invalid

    def summary(self) -> str:
        return (
            f"migrated: {len(self.migrated)}, duplicates removed: {len(self.duplicates_removed)}, "
            f"invalid: {len(self.invalid)}, unchanged: {self.unchanged}"
        )


def _timestamp(document: dict[str, Any]) -> datetime:
    value = document.get("updatedAt") or document.get("createdAt")
    if not isinstance(value, datetime):
        return _EPOCH
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def migrate_legacy_documents(store: MenuRegistryStore, *, dry_run: bool = False) -> MigrationReport:
    """Normalise les documents legacy sur place ; les documents invalides sont signalés, pas modifiés."""

    report = MigrationReport()
    by_menu_id: dict[Any, list[dict[str, Any]]] = {}
    for document in store.raw_documents():
        by_menu_id.setdefault(document.get("menuId"), []).append(document)

    groups: list[tuple[dict[str, Any], list[dict[str, Any]]]] = []
    for menu_id, documents in by_menu_id.items():
        if menu_id is None:
            groups.extend((document, []) for document in documents)
            continue
        documents.sort(key=_timestamp, reverse=True)
        groups.append((documents[0], documents[1:]))

    for keeper, extras in groups:
        menu_id = keeper.get("menuId")

        for extra in extras:
            report.duplicates_removed.append(str(menu_id))
            logger.info("[MENU] Doublon supprimé: %s (_id=%s)", menu_id, extra.get("_id"))
            if not dry_run:
                store.delete_raw(extra["_id"])

        if not menu_validation.is_legacy_document(keeper):
            canonical = project_document(keeper)
            if not menu_validation.collect_violations(canonical):
                report.unchanged += 1
                continue

        candidate = project_document(menu_validation.normalize_legacy(keeper))
        created_at = candidate.pop("createdAt", None)
        candidate.pop("updatedAt", None)
        try:
            item = menu_validation.validate(candidate)
        except ValidationError as exc:
            report.invalid.extend(exc.violations)
            logger.warning("[MENU] Document legacy invalide (%s): %s", menu_id, exc)
            continue

        report.migrated.append(item.menu_id)
        logger.info("[MENU] Document migré: %s", item.menu_id)
        if not dry_run:
            store.replace_raw(
                keeper["_id"],
                item,
                created_at=created_at if isinstance(created_at, datetime) else None,
            )

    logger.info("[MENU] Migration legacy terminée (%s)", report.summary())
    return report


__all__ = ["MigrationReport", "migrate_legacy_documents"]
