from __future__ import annotations

import sys
from pathlib import Path

import mongomock
import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from backend.core.storage import MenuRegistryStore  # noqa: E402


@pytest.fixture()
def mongo_client() -> mongomock.MongoClient:
    return mongomock.MongoClient()


@pytest.fixture()
def store(mongo_client: mongomock.MongoClient) -> MenuRegistryStore:
    registry = MenuRegistryStore(mongo_client["eunify-test"]["menusettings"])
    registry.ensure_indexes()
    return registry
