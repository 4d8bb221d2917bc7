"""Splices a reference navigation descriptor into a docs site config.

The docs config is owned by the site, not by this tool. It must already
contain ``navigation.tabs[]`` with the target tab; a missing container is
fatal and nothing is written.
"""

import logging
from pathlib import Path
from typing import Any

from .spec_io import load_spec, save_spec

logger = logging.getLogger(__name__)


class NavigationContainerError(KeyError):
    """Raised when the docs config lacks the expected navigation container."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


def find_tab(docs_config: dict[str, Any], tab: str) -> dict[str, Any]:
    """Return the navigation tab named ``tab``.

    Raises:
        NavigationContainerError: If navigation, its tabs, or the tab is missing.
    """
    navigation = docs_config.get("navigation")
    tabs = navigation.get("tabs") if isinstance(navigation, dict) else None
    if not isinstance(tabs, list):
        msg = "navigation.tabs not found in docs config"
        raise NavigationContainerError(msg)

    for candidate in tabs:
        if isinstance(candidate, dict) and candidate.get("tab") == tab:
            return candidate

    msg = f"{tab!r} tab not found in docs config"
    raise NavigationContainerError(msg)


def update_docs_navigation(
    docs_config: dict[str, Any],
    descriptor: dict[str, Any],
    tab: str,
) -> dict[str, Any]:
    """Replace (or append) the descriptor's group inside the given tab.

    The docs config is updated in place and returned.
    """
    target = find_tab(docs_config, tab)
    groups = target.setdefault("groups", [])
    if not isinstance(groups, list):
        msg = f"groups of {tab!r} tab is not a list"
        raise NavigationContainerError(msg)

    for i, group in enumerate(groups):
        if isinstance(group, dict) and group.get("group") == descriptor.get("group"):
            groups[i] = descriptor
            logger.info("Replaced %r group in %r tab", descriptor.get("group"), tab)
            break
    else:
        groups.append(descriptor)
        logger.info("Added %r group to %r tab", descriptor.get("group"), tab)

    return docs_config


def update_docs_config_file(docs_path: Path, descriptor: dict[str, Any], tab: str) -> None:
    """Load, update and rewrite a docs config file."""
    docs_config = load_spec(docs_path)
    update_docs_navigation(docs_config, descriptor, tab)
    save_spec(docs_config, docs_path, indent=2)
