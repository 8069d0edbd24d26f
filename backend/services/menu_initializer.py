"""Initialisation idempotente des éléments de menu par défaut."""
from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, Iterable, TypeVar

from backend.core import menu_validation, models
from backend.core.errors import StoreUnavailableError
from backend.core.menu_registry import DEFAULT_MENU_ITEMS, FORCED_MENU_IDS
from backend.core.storage import MenuRegistryStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Champs qu'un administrateur peut avoir modifiés ; un défaut forcé les
# réapplique aussi.
_DEFINITION_KEYS = ("label", "path", "category", "order", "requiredRole", "isEnabled", "icon")


def initialize_registry(
    store: MenuRegistryStore,
    defaults: Iterable[Any] = DEFAULT_MENU_ITEMS,
    forced_ids: Iterable[str] = FORCED_MENU_IDS,
) -> models.InitializationReport:
    """Crée les éléments par défaut manquants sans écraser les choix des administrateurs.

    Toute la table est validée (doublons compris) avant le premier accès au
    stockage. Les éléments existants ne sont pas modifiés, sauf si leur
    ``menuId`` figure dans ``forced_ids``.

    Raises:
        ValidationError: la table par défaut elle-même est invalide.
        StoreUnavailableError: MongoDB est injoignable.
    """
    items = menu_validation.validate_many(defaults)
    forced = set(forced_ids)
    report = models.InitializationReport()

    for item in items:
        existing = store.find_one(item.menu_id)
        if existing is None:
            _, created = store.upsert(item.menu_id, item.definition())
            if created:
                report.created.append(item.menu_id)
                logger.info("[MENU] Créé: %s (%s)", item.menu_id, item.category)
            else:
                report.skipped.append(item.menu_id)
            continue

        if item.menu_id in forced:
            definition = item.definition()
            fields = {key: definition[key] for key in _DEFINITION_KEYS}
            before = existing.definition()
            stored, _ = store.upsert(item.menu_id, fields)
            if stored.definition() != before:
                report.updated.append(item.menu_id)
                logger.info("[MENU] Mise à jour forcée: %s", item.menu_id)
                continue

        report.skipped.append(item.menu_id)
        logger.debug("[MENU] Déjà présent: %s", item.menu_id)

    logger.info("[MENU] Initialisation terminée (%s, updated: %s)", report.summary(), len(report.updated))
    return report


def run_with_retry(
    operation: Callable[[], T],
    *,
    max_attempts: int = 5,
    backoff: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Exécute ``operation`` en réessayant :class:`StoreUnavailableError` avec un délai exponentiel."""

    attempts = max(1, max_attempts)
    attempt = 1
    while True:
        try:
            return operation()
        except StoreUnavailableError:
            if attempt >= attempts:
                logger.error("[MENU] Stockage indisponible après %s tentatives", attempts)
                raise
            delay = backoff * (2 ** (attempt - 1)) + random.uniform(0, 0.1 * backoff)
            logger.warning(
                "[MENU] Stockage indisponible (tentative %s/%s), nouvel essai dans %.1fs",
                attempt,
                attempts,
                delay,
            )
            sleep(delay)
            attempt += 1


def initialize_with_retry(
    store: MenuRegistryStore,
    *,
    max_attempts: int = 5,
    backoff: float = 1.0,
    defaults: Iterable[Any] = DEFAULT_MENU_ITEMS,
    forced_ids: Iterable[str] = FORCED_MENU_IDS,
    sleep: Callable[[float], None] = time.sleep,
) -> models.InitializationReport:
    default_items = list(defaults)
    # Validation unique en amont : une table invalide n'est jamais réessayée.
    menu_validation.validate_many(default_items)

    def _initialize() -> models.InitializationReport:
        store.ensure_indexes()
        return initialize_registry(store, default_items, forced_ids)

    return run_with_retry(_initialize, max_attempts=max_attempts, backoff=backoff, sleep=sleep)


__all__ = ["initialize_registry", "initialize_with_retry", "run_with_retry"]
