"""Outils d'administration en ligne de commande du registre des menus E-Unify.

Commandes disponibles::

    eunify-menu init             # seed the default menu items
    eunify-menu list             # show every stored item, grouped by category
    eunify-menu visible --role admin
    eunify-menu migrate-legacy   # rewrite documents from the old scripts
    eunify-menu check            # connectivity diagnostics
"""
from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from typing import Dict, Optional

from backend.core import db, models, services
from backend.core.config import Settings, settings as default_settings
from backend.core.errors import DuplicateKeyError, StoreUnavailableError, ValidationError
from backend.core.storage import MENU_ID_INDEX, MenuRegistryStore
from backend.services.legacy_migration import migrate_legacy_documents
from backend.services.menu_initializer import initialize_registry, initialize_with_retry

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_UNAVAILABLE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eunify-menu",
        description="Administration du registre des menus E-Unify",
    )
    parser.add_argument("--mongo-uri", help="URI MongoDB (défaut: MONGO_URI)")
    parser.add_argument("--db-name", help="Nom de la base (défaut: MONGO_DB_NAME ou celle de l'URI)")
    parser.add_argument("--collection", help="Collection des menus (défaut: MENU_COLLECTION)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Journalisation détaillée")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Initialise les éléments de menu par défaut")
    init_parser.add_argument(
        "--no-retry",
        action="store_true",
        help="Échoue immédiatement si MongoDB est injoignable",
    )

    list_parser = subparsers.add_parser("list", help="Affiche tous les éléments de menu")
    list_parser.add_argument("--category", choices=models.CATEGORIES)

    visible_parser = subparsers.add_parser("visible", help="Affiche la navigation d'un rôle")
    visible_parser.add_argument("--role", required=True, choices=models.ROLES)

    migrate_parser = subparsers.add_parser("migrate-legacy", help="Migre les documents des anciens scripts")
    migrate_parser.add_argument("--dry-run", action="store_true", help="N'écrit rien, affiche le rapport")

    subparsers.add_parser("check", help="Vérifie la connexion au stockage")
    return parser


def _resolve_settings(args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.mongo_uri:
        overrides["MONGO_URI"] = args.mongo_uri
    if args.db_name:
        overrides["MONGO_DB_NAME"] = args.db_name
    if args.collection:
        overrides["MENU_COLLECTION"] = args.collection
    return dataclasses.replace(default_settings, **overrides)


def _print_violations(exc: ValidationError) -> None:
    print("Éléments de menu invalides :")
    for violation in exc.violations:
        print(f"  - {violation}")


def _run_init(store: MenuRegistryStore, config: Settings, no_retry: bool) -> int:
    if no_retry:
        store.ensure_indexes()
        report = initialize_registry(store)
    else:
        report = initialize_with_retry(
            store,
            max_attempts=config.MENU_INIT_MAX_ATTEMPTS,
            backoff=config.MENU_INIT_BACKOFF_SECONDS,
        )
    print(report.summary())
    if report.updated:
        print(f"updated: {len(report.updated)} ({', '.join(report.updated)})")
    return EXIT_OK


def _run_list(store: MenuRegistryStore, category: Optional[str]) -> int:
    items = services.list_items(store, category)
    for current in models.CATEGORIES:
        category_items = [item for item in items if item.category == current]
        if not category_items:
            continue
        print(f"\n{current.upper()}:")
        for item in sorted(category_items, key=lambda entry: (entry.order, entry.menu_id)):
            status = "✅" if item.is_enabled else "❌"
            role = f" ({item.required_role})" if item.required_role != "user" else ""
            print(f"  {status} [{item.order}] {item.label}{role} → {item.path}")
    print(f"\n{len(items)} élément(s)")
    return EXIT_OK


def _run_visible(store: MenuRegistryStore, role: str) -> int:
    groups = services.visible_items(store, role)
    for group in groups:
        print(f"{group.category}:")
        for entry in group.items:
            print(f"  - {entry.menu_id}: {entry.label} ({entry.path})")
    if not groups:
        print("Aucun élément visible")
    return EXIT_OK


def _run_migrate(store: MenuRegistryStore, dry_run: bool) -> int:
    report = migrate_legacy_documents(store, dry_run=dry_run)
    print(report.summary())
    for violation in report.invalid:
        print(f"  - {violation}")
    if not report.ok:
        return EXIT_INVALID
    if not dry_run:
        store.ensure_indexes()
    return EXIT_OK


def collect_environment_diagnostics(store: MenuRegistryStore, config: Settings) -> Dict[str, Dict[str, object]]:
    """Analyse la connexion MongoDB et l'état de la collection des menus."""

    diagnostics: Dict[str, Dict[str, object]] = {}
    try:
        db.ping(store.collection.database.client)
    except StoreUnavailableError as exc:
        diagnostics["mongodb"] = {"ok": False, "detail": str(exc)}
        return diagnostics
    diagnostics["mongodb"] = {"ok": True, "detail": f"Connecté à {config.MONGO_URI}"}

    count = store.count()
    diagnostics["menu_items"] = {"ok": count > 0, "detail": f"{count} élément(s) dans {config.MENU_COLLECTION}"}

    index_names = set(store.collection.index_information())
    has_index = MENU_ID_INDEX in index_names
    diagnostics["menu_id_index"] = {
        "ok": has_index,
        "detail": "Index unique présent" if has_index else "Index unique absent (lancer init)",
    }
    return diagnostics


def format_environment_diagnostics(diagnostics: Dict[str, Dict[str, object]]) -> str:
    """Formate les diagnostics sous forme de texte lisible."""

    lines = []
    for key, info in diagnostics.items():
        status = "OK" if info.get("ok") else "KO"
        lines.append(f"- {key}: {status} – {info.get('detail', '')}")
    return "\n".join(lines)


def _run_check(store: MenuRegistryStore, config: Settings) -> int:
    diagnostics = collect_environment_diagnostics(store, config)
    print("Diagnostic du registre des menus :")
    print(format_environment_diagnostics(diagnostics))
    if not diagnostics["mongodb"]["ok"]:
        return EXIT_UNAVAILABLE
    missing = [key for key, info in diagnostics.items() if not info.get("ok")]
    if missing:
        logger.warning("Composants en défaut : %s", ", ".join(missing))
        return EXIT_INVALID
    return EXIT_OK


def main(argv=None) -> int:
    """Point d'entrée de la ligne de commande."""
    args = build_parser().parse_args(sys.argv[1:] if argv is None else list(argv))
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")
    config = _resolve_settings(args)
    logger.debug("Commande %s sur %s", args.command, config.MONGO_URI)

    try:
        with db.get_client(config) as client:
            store = MenuRegistryStore.from_client(client, config)
            if args.command == "init":
                return _run_init(store, config, args.no_retry)
            if args.command == "list":
                return _run_list(store, args.category)
            if args.command == "visible":
                return _run_visible(store, args.role)
            if args.command == "migrate-legacy":
                return _run_migrate(store, args.dry_run)
            return _run_check(store, config)
    except ValidationError as exc:
        _print_violations(exc)
        return EXIT_INVALID
    except DuplicateKeyError as exc:
        logger.error("Doublon dans le registre : %s", exc)
        print(f"Erreur : {exc}")
        return EXIT_INVALID
    except StoreUnavailableError as exc:
        logger.error("MongoDB injoignable : %s", exc)
        print(f"Erreur : stockage indisponible ({exc})")
        return EXIT_UNAVAILABLE
