"""Registre canonique des éléments de menu par défaut."""
from __future__ import annotations

from typing import Any


def _item(
    menu_id: str,
    label: str,
    path: str,
    order: int,
    *,
    category: str = "primary",
    required_role: str = "user",
    icon: str | None = None,
) -> dict[str, Any]:
    return {
        "menuId": menu_id,
        "label": label,
        "path": path,
        "category": category,
        "order": order,
        "requiredRole": required_role,
        "isEnabled": True,
        "icon": icon,
    }


def _admin(menu_id: str, label: str, path: str, order: int, **kwargs: Any) -> dict[str, Any]:
    kwargs.setdefault("required_role", "admin")
    return _item(menu_id, label, path, order, category="administration", **kwargs)


def _secondary(menu_id: str, label: str, path: str, order: int) -> dict[str, Any]:
    return _item(menu_id, label, path, order, category="secondary")


PRIMARY_ITEMS: tuple[dict[str, Any], ...] = (
    _item("dashboard", "Dashboard", "/", 1),
    _item("portfolio", "Portfolio", "/portfolio", 2),
    _item("e-unify-101", "E-Unify 101", "/learn101", 3),
    _item("data-literacy", "Data Literacy Module", "/data-literacy", 4),
    _item("national-production-dataset", "National Production Dataset", "/national-production-dataset", 5),
    _item("data-governance-quality", "Data Governance & Quality", "/data-governance-quality", 6),
    _item("e22-classification", "E-Unify E22 Classification", "/e22-classification", 7),
    _item("data-catalog", "Data Catalog", "/data-catalog", 8),
    _item("data-assets", "Data Assets", "/data-assets", 9),
    _item("business-processes", "Business Processes", "/assets/business-processes", 10),
    _item("data-categories", "Data Categories", "/assets/data-categories", 11),
    _item("data-concepts", "Data Concepts", "/assets/data-concepts", 12),
    _item("data-domains", "Data Domains", "/assets/data-domains", 13),
    _item("subject-categories", "Subject Categories", "/assets/subject-categories", 14),
    _item("asset-types", "Asset Types", "/asset-types", 15),
    _item("data-governance", "Data Governance", "/data-governance", 16),
    _item("dgvsmdm", "DG vs MDM", "/dgvsmdm", 17),
    _item("data-steward-lesson", "Data Steward Lesson", "/data-steward-lesson", 18),
    _item("analytics", "Analytics", "/analytics", 19),
    _item("study-aids-business-analytics", "Study Aids: Business Analytics", "/study-aids/business-analytics", 20),
    _item("integration", "Integration", "/integration", 21),
    _item("weekly-status", "Weekly Status", "/weekly-status", 22),
    _item("monthly-status", "Monthly Status", "/monthly-status", 23),
    _item("open-tasks", "Open Tasks", "/tasks", 24),
    _item("federal-data-strategy", "Federal Data Strategy", "/federal-data-strategy", 25),
)

ADMINISTRATION_ITEMS: tuple[dict[str, Any], ...] = (
    _admin("user-management", "User Management", "/access/user-management", 1),
    _admin("roles-permissions", "Roles & Permissions", "/access/roles", 2),
    _admin("jurisdictions", "Jurisdictions", "/access/jurisdictions", 3),
    _admin("menu-management", "Menu Management", "/admin/menu-management", 4),
    _admin("system-settings", "System Settings", "/admin/system-settings", 5),
    _admin(
        "data-strategy-operations-center",
        "Data Strategy Operations Center",
        "/admin/data-strategy-operations-center",
        6,
        required_role="data-steward",
        icon="Dashboard",
    ),
    _admin("data-strategy-planning", "Data Strategy Planning", "/admin/data-strategy-planning", 15),
    _admin("uscis-application-tracking", "USCIS Application Tracking", "/admin/uscis-application-tracking", 50),
    _admin(
        "automated-processes",
        "Automated Processes",
        "/admin/automated-processes",
        80,
        required_role="data-steward",
        icon="AutomationIcon",
    ),
    _admin(
        "process-monitoring",
        "Process Monitoring",
        "/admin/process-monitoring",
        82,
        required_role="data-steward",
        icon="MonitorHeart",
    ),
    _admin(
        "scheduled-processes",
        "Scheduled Processes",
        "/admin/scheduled-processes",
        84,
        required_role="data-steward",
        icon="Schedule",
    ),
    _admin("team-roster", "Team Roster", "/admin/team-roster", 85),
    _admin("documentation-center", "Documentation Center", "/admin/documentation", 86),
    _admin("janusgraph", "JanusGraph Visualization", "/admin/janusgraph", 87),
)

SECONDARY_ITEMS: tuple[dict[str, Any], ...] = (
    _secondary("about-e-unify", "About E-Unify", "/about", 1),
    _secondary("documentation", "Documentation", "/docs", 2),
    _secondary("settings", "Settings", "/settings", 3),
)

DEFAULT_MENU_ITEMS: tuple[dict[str, Any], ...] = PRIMARY_ITEMS + ADMINISTRATION_ITEMS + SECONDARY_ITEMS

# Défauts dont la définition est réappliquée à chaque initialisation.
FORCED_MENU_IDS: frozenset[str] = frozenset()

DEFAULT_MENU_IDS: frozenset[str] = frozenset(item["menuId"] for item in DEFAULT_MENU_ITEMS)
