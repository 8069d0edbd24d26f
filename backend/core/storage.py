"""Stockage des éléments de menu dans une collection MongoDB."""
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo import errors as mongo_errors

from backend.core import db, menu_validation, models
from backend.core.config import Settings
from backend.core.errors import DuplicateKeyError, StoreUnavailableError, ValidationError

logger = logging.getLogger(__name__)

MENU_ID_INDEX = "menuId_unique"

_SORT = [("category", ASCENDING), ("order", ASCENDING), ("menuId", ASCENDING)]
_STORED_FIELDS = {
    "menuId",
    "label",
    "path",
    "category",
    "order",
    "requiredRole",
    "isEnabled",
    "icon",
    "createdAt",
    "updatedAt",
}
_IMMUTABLE_FIELDS = {"_id", "menuId", "createdAt", "updatedAt"}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def project_document(document: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in document.items() if key in _STORED_FIELDS}


def _to_item(document: Mapping[str, Any]) -> models.MenuItem:
    return menu_validation.validate(project_document(menu_validation.normalize_legacy(document)))


@contextmanager
def _store_errors(menu_id: str | None = None) -> Iterator[None]:
    """Traduit les erreurs pymongo en erreurs du registre."""
    try:
        yield
    except mongo_errors.DuplicateKeyError as exc:
        raise DuplicateKeyError(menu_id or "?") from exc
    except (mongo_errors.ConnectionFailure, mongo_errors.ExecutionTimeout) as exc:
        logger.warning("[MENU] Stockage indisponible: %s", exc)
        raise StoreUnavailableError(str(exc)) from exc


class MenuRegistryStore:
    """Accès par ``menuId`` à la collection ``menusettings``.

    La collection est fournie par l'appelant : le store n'ouvre ni ne ferme
    jamais de connexion.
    """

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    @classmethod
    def from_client(cls, client: MongoClient, config: Settings | None = None) -> "MenuRegistryStore":
        return cls(db.get_menu_collection(client, config))

    @property
    def collection(self) -> Collection:
        return self._collection

    def ensure_indexes(self) -> None:
        """Crée l'index unique sur ``menuId``.

        Raises:
            DuplicateKeyError: des documents partagent déjà un ``menuId`` (données
                des anciens scripts) ; ``eunify-menu migrate-legacy`` les fusionne.
        """
        with _store_errors():
            try:
                self._collection.create_index([("menuId", ASCENDING)], unique=True, name=MENU_ID_INDEX)
            except mongo_errors.DuplicateKeyError as exc:
                duplicates = ", ".join(self._duplicate_menu_ids()) or "?"
                raise DuplicateKeyError(
                    duplicates,
                    f"menuId en double ({duplicates}) : lancer 'eunify-menu migrate-legacy' "
                    "avant de créer l'index unique",
                ) from exc

    def _duplicate_menu_ids(self) -> list[str]:
        pipeline = [
            {"$group": {"_id": "$menuId", "count": {"$sum": 1}}},
            {"$match": {"count": {"$gt": 1}}},
            {"$sort": {"_id": 1}},
        ]
        return [str(entry["_id"]) for entry in self._collection.aggregate(pipeline)]

    def find_one(self, menu_id: str) -> Optional[models.MenuItem]:
        with _store_errors(menu_id):
            document = self._collection.find_one({"menuId": menu_id}, {"_id": 0})
        if document is None:
            return None
        return _to_item(document)

    def find_all(self, filter: Mapping[str, Any] | None = None) -> list[models.MenuItem]:
        with _store_errors():
            documents = list(self._collection.find(dict(filter or {}), {"_id": 0}).sort(_SORT))
        items: list[models.MenuItem] = []
        for document in documents:
            try:
                items.append(_to_item(document))
            except ValidationError as exc:
                logger.warning(
                    "[MENU] Document ignoré (menuId=%s): %s", document.get("menuId"), exc
                )
        return items

    def count(self, filter: Mapping[str, Any] | None = None) -> int:
        with _store_errors():
            return self._collection.count_documents(dict(filter or {}))

    def insert(self, item: models.MenuItem) -> models.MenuItem:
        now = _now()
        document = {**item.definition(), "createdAt": now, "updatedAt": now}
        with _store_errors(item.menu_id):
            self._collection.insert_one(document)
        return _to_item(document)

    def upsert(self, menu_id: str, fields: Mapping[str, Any]) -> tuple[models.MenuItem, bool]:
        """Insère ``menu_id`` ou fusionne ``fields`` dans l'élément existant.

        Renvoie l'élément stocké et un booléen indiquant sa création.
        ``updatedAt`` ne bouge que si au moins un champ normalisé change.
        """
        changes = {key: value for key, value in fields.items() if key not in _IMMUTABLE_FIELDS}
        current = self.find_one(menu_id)

        if current is None:
            item = menu_validation.validate({**changes, "menuId": menu_id})
            try:
                return self.insert(item), True
            except DuplicateKeyError:
                # Inséré en parallèle : on fusionne.
                current = self.find_one(menu_id)
                if current is None:
                    raise

        stored = current.definition()
        merged = menu_validation.validate({**stored, **changes}).definition()
        update = {key: value for key, value in merged.items() if stored.get(key) != value}
        if not update:
            return current, False

        with _store_errors(menu_id):
            document = self._collection.find_one_and_update(
                {"menuId": menu_id},
                {"$set": {**update, "updatedAt": _now()}},
                projection={"_id": 0},
                return_document=ReturnDocument.AFTER,
            )
        if document is None:
            # Supprimé entre la lecture et l'écriture.
            return self.upsert(menu_id, fields)
        return _to_item(document), False

    def remove(self, menu_id: str) -> bool:
        with _store_errors(menu_id):
            result = self._collection.delete_one({"menuId": menu_id})
        return result.deleted_count > 0

    def raw_documents(self) -> list[dict[str, Any]]:
        """Tous les documents bruts, ``_id`` compris."""
        with _store_errors():
            return list(self._collection.find({}).sort([("menuId", ASCENDING), ("_id", ASCENDING)]))

    def replace_raw(self, raw_id: Any, item: models.MenuItem, created_at: datetime | None = None) -> None:
        document = {**item.definition(), "createdAt": created_at or _now(), "updatedAt": _now()}
        with _store_errors(item.menu_id):
            self._collection.replace_one({"_id": raw_id}, document)

    def delete_raw(self, raw_id: Any) -> None:
        with _store_errors():
            self._collection.delete_one({"_id": raw_id})


__all__ = ["MENU_ID_INDEX", "MenuRegistryStore", "project_document"]
