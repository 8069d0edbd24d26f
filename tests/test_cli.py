import functools
import sys
from pathlib import Path

import mongomock
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

import eunify_admin
from backend.core import db
from backend.core.errors import StoreUnavailableError
from backend.core.menu_registry import DEFAULT_MENU_ITEMS
from backend.services import menu_initializer

BASE_ARGS = ["--db-name", "eunify-cli", "--collection", "menusettings"]


@pytest.fixture()
def shared_client(monkeypatch):
    client = mongomock.MongoClient()
    monkeypatch.setattr(db, "create_client", lambda config=None: client)
    return client


def _collection(client):
    return client["eunify-cli"]["menusettings"]


def test_init_seeds_defaults_and_is_idempotent(shared_client, capsys):
    assert eunify_admin.main([*BASE_ARGS, "init", "--no-retry"]) == eunify_admin.EXIT_OK
    first = capsys.readouterr().out
    assert f"created: {len(DEFAULT_MENU_ITEMS)}, skipped: 0" in first

    assert eunify_admin.main([*BASE_ARGS, "init"]) == eunify_admin.EXIT_OK
    second = capsys.readouterr().out
    assert f"created: 0, skipped: {len(DEFAULT_MENU_ITEMS)}" in second
    assert _collection(shared_client).count_documents({}) == len(DEFAULT_MENU_ITEMS)


def test_init_with_invalid_default_table_prints_violations(shared_client, capsys, monkeypatch):
    bad_defaults = [
        {"menuId": "dashboard", "label": "Dashboard", "path": "/"},
        {"menuId": "dashboard", "label": "Duplicate", "path": "/dup"},
        {"menuId": "reports", "label": "", "path": "/reports"},
    ]
    monkeypatch.setattr(
        eunify_admin,
        "initialize_registry",
        functools.partial(menu_initializer.initialize_registry, defaults=bad_defaults),
    )

    exit_code = eunify_admin.main([*BASE_ARGS, "init", "--no-retry"])

    output = capsys.readouterr().out
    assert exit_code == eunify_admin.EXIT_INVALID
    assert "Éléments de menu invalides" in output
    assert "dashboard.menuId" in output
    assert "reports.label" in output
    assert _collection(shared_client).count_documents({}) == 0


def test_init_with_retry_rejects_invalid_default_table(shared_client, capsys, monkeypatch):
    bad_defaults = [{"menuId": "reports", "label": "", "path": "/reports"}]
    monkeypatch.setattr(
        eunify_admin,
        "initialize_with_retry",
        functools.partial(menu_initializer.initialize_with_retry, defaults=bad_defaults),
    )

    exit_code = eunify_admin.main([*BASE_ARGS, "init"])

    assert exit_code == eunify_admin.EXIT_INVALID
    assert "reports.label" in capsys.readouterr().out
    assert _collection(shared_client).count_documents({}) == 0


def test_init_on_duplicated_legacy_data_points_to_migration(shared_client, capsys):
    _collection(shared_client).insert_many(
        [
            {"menuId": "dashboard", "text": "Dashboard", "path": "/"},
            {"menuId": "dashboard", "text": "Dashboard", "path": "/"},
        ]
    )

    exit_code = eunify_admin.main([*BASE_ARGS, "init", "--no-retry"])

    output = capsys.readouterr().out
    assert exit_code == eunify_admin.EXIT_INVALID
    assert "migrate-legacy" in output
    assert "dashboard" in output
    assert _collection(shared_client).count_documents({}) == 2


def test_list_groups_by_category(shared_client, capsys):
    eunify_admin.main([*BASE_ARGS, "init", "--no-retry"])
    capsys.readouterr()

    exit_code = eunify_admin.main([*BASE_ARGS, "list", "--category", "administration"])

    output = capsys.readouterr().out
    assert exit_code == eunify_admin.EXIT_OK
    assert "ADMINISTRATION:" in output
    assert "Team Roster (admin)" in output
    assert "PRIMARY:" not in output


def test_visible_for_user_hides_administration(shared_client, capsys):
    eunify_admin.main([*BASE_ARGS, "init", "--no-retry"])
    capsys.readouterr()

    exit_code = eunify_admin.main([*BASE_ARGS, "visible", "--role", "user"])

    output = capsys.readouterr().out
    assert exit_code == eunify_admin.EXIT_OK
    assert "dashboard: Dashboard (/)" in output
    assert "administration:" not in output


def test_migrate_legacy_reports_invalid_documents(shared_client, capsys):
    _collection(shared_client).insert_many(
        [
            {"menuId": "analytics", "text": "Analytics", "path": "/analytics", "roles": ["user"]},
            {"menuId": "broken", "text": "Broken", "path": "/broken", "category": "sidebar"},
        ]
    )

    exit_code = eunify_admin.main([*BASE_ARGS, "migrate-legacy"])

    output = capsys.readouterr().out
    assert exit_code == eunify_admin.EXIT_INVALID
    assert "migrated: 1" in output
    assert "broken.category" in output
    assert _collection(shared_client).find_one({"menuId": "analytics"})["label"] == "Analytics"


def test_check_reports_missing_index(shared_client, capsys, monkeypatch):
    monkeypatch.setattr(db, "ping", lambda client: None)
    _collection(shared_client).insert_one({"menuId": "dashboard", "label": "Dashboard", "path": "/"})

    exit_code = eunify_admin.main([*BASE_ARGS, "check"])

    output = capsys.readouterr().out
    assert "Diagnostic du registre des menus" in output
    assert "menu_id_index: KO" in output
    assert exit_code == eunify_admin.EXIT_INVALID


def test_check_after_init_is_healthy(shared_client, capsys, monkeypatch):
    monkeypatch.setattr(db, "ping", lambda client: None)
    eunify_admin.main([*BASE_ARGS, "init", "--no-retry"])
    capsys.readouterr()

    assert eunify_admin.main([*BASE_ARGS, "check"]) == eunify_admin.EXIT_OK


def test_unreachable_store_exits_with_dedicated_code(shared_client, capsys, monkeypatch):
    def fail_ping(client):
        raise StoreUnavailableError("MongoDB injoignable: connection refused")

    monkeypatch.setattr(db, "ping", fail_ping)

    exit_code = eunify_admin.main([*BASE_ARGS, "check"])

    output = capsys.readouterr().out
    assert exit_code == eunify_admin.EXIT_UNAVAILABLE
    assert "mongodb: KO" in output


def test_store_error_during_command_exits_unavailable(shared_client, capsys, monkeypatch):
    def unavailable(*args, **kwargs):
        raise StoreUnavailableError("timeout")

    monkeypatch.setattr(eunify_admin, "initialize_registry", unavailable)

    exit_code = eunify_admin.main([*BASE_ARGS, "init", "--no-retry"])

    assert exit_code == eunify_admin.EXIT_UNAVAILABLE
    assert "stockage indisponible" in capsys.readouterr().out


def test_command_is_required():
    with pytest.raises(SystemExit):
        eunify_admin.build_parser().parse_args([])
