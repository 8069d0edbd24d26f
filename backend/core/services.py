"""Services métier du registre des menus : navigation et administration."""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Iterable, Mapping

from backend.core import menu_validation, models
from backend.core.errors import FieldViolation, NotFoundError, ValidationError
from backend.core.storage import MenuRegistryStore

logger = logging.getLogger(__name__)

_DEFINITION_FIELDS = {"label", "path", "category", "requiredRole", "icon", "order", "isEnabled"}


def role_satisfies(role: str, required_role: str) -> bool:
    """Contrôle hiérarchique : un rôle satisfait toute exigence moins privilégiée."""
    return models.ROLE_RANK[role] >= models.ROLE_RANK[required_role]


def _normalize_role(role: str | None) -> str:
    normalized = (role or "").strip().lower()
    if normalized not in models.ROLE_RANK:
        raise ValidationError([FieldViolation(field="role", message=f"rôle inconnu: {role!r}")])
    return normalized


def visible_items(store: MenuRegistryStore, role: str) -> list[models.VisibleMenuGroup]:
    """Calcule la navigation visible pour ``role``.

    Les groupes suivent ``models.CATEGORIES`` et les groupes vides sont omis.
    Dans un groupe, les éléments sont triés par ``order`` puis ``menuId``.
    """
    caller_role = _normalize_role(role)
    grouped: dict[str, list[models.MenuItem]] = defaultdict(list)
    for item in store.find_all({"isEnabled": True}):
        if not item.is_enabled:
            continue
        if role_satisfies(caller_role, item.required_role):
            grouped[item.category].append(item)

    groups: list[models.VisibleMenuGroup] = []
    for category in models.CATEGORIES:
        items = sorted(grouped.get(category, []), key=lambda item: (item.order, item.menu_id))
        if not items:
            continue
        groups.append(
            models.VisibleMenuGroup(
                category=category,
                items=[
                    models.VisibleMenuEntry(
                        menu_id=item.menu_id,
                        label=item.label,
                        path=item.path,
                        order=item.order,
                        icon=item.icon,
                    )
                    for item in items
                ],
            )
        )
    return groups


def list_items(store: MenuRegistryStore, category: str | None = None) -> list[models.MenuItem]:
    if category is not None and category not in models.CATEGORIES:
        raise ValidationError([FieldViolation(field="category", message=f"catégorie inconnue: {category!r}")])
    return store.find_all({"category": category} if category else None)


def get_item(store: MenuRegistryStore, menu_id: str) -> models.MenuItem:
    item = store.find_one(menu_id)
    if item is None:
        raise NotFoundError(menu_id)
    return item


def set_enabled(store: MenuRegistryStore, menu_id: str, enabled: bool) -> models.MenuItem:
    get_item(store, menu_id)
    item, _ = store.upsert(menu_id, {"isEnabled": bool(enabled)})
    logger.info("[MENU] %s %s", menu_id, "activé" if item.is_enabled else "désactivé")
    return item


def toggle_enabled(store: MenuRegistryStore, menu_id: str) -> models.MenuItem:
    current = get_item(store, menu_id)
    return set_enabled(store, menu_id, not current.is_enabled)


def bulk_set_enabled(
    store: MenuRegistryStore, menu_ids: Iterable[str], enabled: bool
) -> list[models.MenuItem]:
    """Active ou désactive plusieurs éléments en une fois.

    Tous les identifiants sont vérifiés avant la première écriture.

    Raises:
        ValidationError: la liste est vide.
        NotFoundError: au moins un identifiant est inconnu (tous sont listés).
    """
    unique_ids = list(dict.fromkeys(menu_ids))
    if not unique_ids:
        raise ValidationError([FieldViolation(field="menuIds", message="au moins un identifiant est requis")])
    missing = [menu_id for menu_id in unique_ids if store.find_one(menu_id) is None]
    if missing:
        raise NotFoundError(", ".join(missing))

    items = [store.upsert(menu_id, {"isEnabled": bool(enabled)})[0] for menu_id in unique_ids]
    logger.info(
        "[MENU] %s élément(s) %s: %s",
        len(items),
        "activé(s)" if enabled else "désactivé(s)",
        ", ".join(unique_ids),
    )
    return items


def reorder(store: MenuRegistryStore, menu_id: str, new_order: int) -> models.MenuItem:
    """Déplace ``menu_id`` dans sa catégorie ; les autres éléments gardent leur position."""
    get_item(store, menu_id)
    item, _ = store.upsert(menu_id, {"order": new_order})
    logger.info("[MENU] %s déplacé en position %s (%s)", menu_id, item.order, item.category)
    return item


def upsert_definition(
    store: MenuRegistryStore, menu_id: str, fields: Mapping[str, Any]
) -> tuple[models.MenuItem, bool]:
    """Modifie la définition de ``menu_id`` et la crée si elle est absente.

    ``fields`` utilise les noms du stockage (``requiredRole``, ``isEnabled``).
    """
    unknown = sorted(set(fields) - _DEFINITION_FIELDS)
    if unknown:
        raise ValidationError(
            [FieldViolation(field=key, message="champ non modifiable", menu_id=menu_id) for key in unknown]
        )
    item, created = store.upsert(menu_id, fields)
    logger.info("[MENU] Définition %s: %s", "créée" if created else "mise à jour", menu_id)
    return item, created


def create_item(store: MenuRegistryStore, candidate: Any) -> models.MenuItem:
    item = store.insert(menu_validation.validate(candidate))
    logger.info("[MENU] Élément créé: %s", item.menu_id)
    return item


def delete_item(store: MenuRegistryStore, menu_id: str) -> None:
    if not store.remove(menu_id):
        raise NotFoundError(menu_id)
    logger.info("[MENU] Élément supprimé: %s", menu_id)


__all__ = [
    "bulk_set_enabled",
    "create_item",
    "delete_item",
    "get_item",
    "list_items",
    "reorder",
    "role_satisfies",
    "set_enabled",
    "toggle_enabled",
    "upsert_definition",
    "visible_items",
]
