"""Routes de configuration des menus de navigation."""
from __future__ import annotations

import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from backend.api.auth import get_current_user, require_admin
from backend.core import models, services
from backend.core.errors import (
    DuplicateKeyError,
    MenuRegistryError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from backend.core.storage import MenuRegistryStore
from backend.services.menu_initializer import initialize_registry

logger = logging.getLogger(__name__)

router = APIRouter()


def get_menu_store(request: Request) -> MenuRegistryStore:
    store = getattr(request.app.state, "menu_store", None)
    if store is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Registre des menus indisponible")
    return store


def _raise_http(exc: MenuRegistryError) -> NoReturn:
    if isinstance(exc, ValidationError):
        raise HTTPException(
            status_code=422,
            detail={"message": "Élément de menu invalide", "violations": [v.as_dict() for v in exc.violations]},
        ) from exc
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, DuplicateKeyError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if isinstance(exc, StoreUnavailableError):
        logger.error("[MENU] Registre indisponible: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Registre des menus indisponible",
        ) from exc
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


@router.get("/navigation", response_model=list[models.VisibleMenuGroup])
def get_navigation(
    current_user: models.User = Depends(get_current_user),
    store: MenuRegistryStore = Depends(get_menu_store),
) -> list[models.VisibleMenuGroup]:
    try:
        return services.visible_items(store, current_user.role)
    except MenuRegistryError as exc:
        _raise_http(exc)


@router.post("/initialize", response_model=models.InitializationReport)
def initialize_menu(
    _: models.User = Depends(require_admin),
    store: MenuRegistryStore = Depends(get_menu_store),
) -> models.InitializationReport:
    try:
        store.ensure_indexes()
        return initialize_registry(store)
    except MenuRegistryError as exc:
        _raise_http(exc)


@router.get("/", response_model=list[models.MenuItem])
def list_menu_items(
    category: Optional[str] = None,
    _: models.User = Depends(require_admin),
    store: MenuRegistryStore = Depends(get_menu_store),
) -> list[models.MenuItem]:
    try:
        return services.list_items(store, category)
    except MenuRegistryError as exc:
        _raise_http(exc)


@router.post("/", response_model=models.MenuItem, status_code=status.HTTP_201_CREATED)
def create_menu_item(
    payload: models.MenuItem,
    _: models.User = Depends(require_admin),
    store: MenuRegistryStore = Depends(get_menu_store),
) -> models.MenuItem:
    try:
        return services.create_item(store, payload)
    except MenuRegistryError as exc:
        _raise_http(exc)


@router.patch("/bulk-toggle", response_model=list[models.MenuItem])
def bulk_toggle_menu_items(
    payload: models.BulkEnabledPayload,
    _: models.User = Depends(require_admin),
    store: MenuRegistryStore = Depends(get_menu_store),
) -> list[models.MenuItem]:
    try:
        return services.bulk_set_enabled(store, payload.menu_ids, payload.is_enabled)
    except MenuRegistryError as exc:
        _raise_http(exc)


@router.get("/{menu_id}", response_model=models.MenuItem)
def get_menu_item(
    menu_id: str,
    _: models.User = Depends(require_admin),
    store: MenuRegistryStore = Depends(get_menu_store),
) -> models.MenuItem:
    try:
        return services.get_item(store, menu_id)
    except MenuRegistryError as exc:
        _raise_http(exc)


@router.put("/{menu_id}", response_model=models.MenuItem)
def upsert_menu_item(
    menu_id: str,
    payload: models.MenuItemUpdate,
    response: Response,
    _: models.User = Depends(require_admin),
    store: MenuRegistryStore = Depends(get_menu_store),
) -> models.MenuItem:
    try:
        item, created = services.upsert_definition(store, menu_id, payload.changes())
    except MenuRegistryError as exc:
        _raise_http(exc)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return item


@router.patch("/{menu_id}/enabled", response_model=models.MenuItem)
def set_menu_item_enabled(
    menu_id: str,
    payload: models.EnabledPayload,
    _: models.User = Depends(require_admin),
    store: MenuRegistryStore = Depends(get_menu_store),
) -> models.MenuItem:
    try:
        return services.set_enabled(store, menu_id, payload.is_enabled)
    except MenuRegistryError as exc:
        _raise_http(exc)


@router.patch("/{menu_id}/toggle", response_model=models.MenuItem)
def toggle_menu_item(
    menu_id: str,
    _: models.User = Depends(require_admin),
    store: MenuRegistryStore = Depends(get_menu_store),
) -> models.MenuItem:
    try:
        return services.toggle_enabled(store, menu_id)
    except MenuRegistryError as exc:
        _raise_http(exc)


@router.patch("/{menu_id}/order", response_model=models.MenuItem)
def reorder_menu_item(
    menu_id: str,
    payload: models.OrderPayload,
    _: models.User = Depends(require_admin),
    store: MenuRegistryStore = Depends(get_menu_store),
) -> models.MenuItem:
    try:
        return services.reorder(store, menu_id, payload.order)
    except MenuRegistryError as exc:
        _raise_http(exc)


@router.delete("/{menu_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(
    menu_id: str,
    _: models.User = Depends(require_admin),
    store: MenuRegistryStore = Depends(get_menu_store),
) -> None:
    try:
        services.delete_item(store, menu_id)
    except MenuRegistryError as exc:
        _raise_http(exc)
