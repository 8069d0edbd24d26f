"""Gestion des connexions MongoDB."""
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import ContextManager

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, ExecutionTimeout

from backend.core.config import Settings, settings as default_settings
from backend.core.errors import StoreUnavailableError

DEFAULT_DB_NAME = "collibra-app"

logger = logging.getLogger(__name__)


def create_client(config: Settings | None = None) -> MongoClient:
    """Ouvre un client dont chaque opération respecte ``MONGO_TIMEOUT_MS``."""

    config = config or default_settings
    timeout = config.MONGO_TIMEOUT_MS
    return MongoClient(
        config.MONGO_URI,
        serverSelectionTimeoutMS=timeout,
        connectTimeoutMS=timeout,
        socketTimeoutMS=timeout,
        tz_aware=True,
    )


def get_database(client: MongoClient, config: Settings | None = None) -> Database:
    config = config or default_settings
    if config.MONGO_DB_NAME:
        return client[config.MONGO_DB_NAME]
    return client.get_default_database(default=DEFAULT_DB_NAME)


def get_menu_collection(client: MongoClient, config: Settings | None = None) -> Collection:
    config = config or default_settings
    return get_database(client, config)[config.MENU_COLLECTION]


def ping(client: MongoClient) -> None:
    """Lève :class:`StoreUnavailableError` si le serveur est injoignable."""

    try:
        client.admin.command("ping")
    except (ConnectionFailure, ExecutionTimeout) as exc:
        raise StoreUnavailableError(f"MongoDB injoignable: {exc}") from exc


@contextmanager
def _managed_client(config: Settings | None) -> Iterator[MongoClient]:
    """Fournit un client MongoDB toujours fermé en sortie."""

    client = create_client(config)
    logger.info("[DB] Connexion MongoDB ouverte (%s)", (config or default_settings).MONGO_URI)
    try:
        yield client
    finally:
        client.close()
        logger.info("[DB] Connexion MongoDB fermée")


def get_client(config: Settings | None = None) -> ContextManager[MongoClient]:
    return _managed_client(config)
