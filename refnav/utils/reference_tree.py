"""Reference navigation tree builder for OpenAPI specifications.

Groups operations of a canonically ordered document under their primary
tag, leads every group with an introduction page reference, and scaffolds
the introduction pages on disk.

Navigation descriptor shape:

    {
      "group": "Endpoints",
      "openapi": {"source": "api-reference/openapi.json", "directory": "api-reference"},
      "pages": [{"group": "API keys", "pages": ["api-reference/api-keys/index", "GET /v1/api-keys"]}]
    }
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .tag_ranker import iter_operations, operation_tags

logger = logging.getLogger(__name__)


DEFAULT_NAVIGATION_CONFIG: dict[str, Any] = {
    "root_group": "Endpoints",
    "uncategorized_group": "Uncategorized",
    "intro_prefix": "api-reference",
    "intro_filename": "index.mdx",
    "navigation_file": "navigation.json",
}

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Filesystem-safe identifier for a group name.

    "API Keys & Tokens" -> "api-keys-tokens"
    """
    slug = _NON_ALNUM.sub("-", name.lower()).strip("-")
    return slug or "untitled"


def page_reference(method: str, path: str) -> str:
    return f"{method.upper()} {path}"


@dataclass
class NavigationEntry:
    """One navigation group and its ordered page references."""

    group: str
    description: str | None = None
    pages: list[str] = field(default_factory=list)

    @property
    def slug(self) -> str:
        return slugify(self.group)

    def to_dict(self, include_description: bool = False) -> dict[str, Any]:
        result: dict[str, Any] = {"group": self.group}
        if include_description and self.description:
            result["description"] = self.description
        result["pages"] = list(self.pages)
        return result


@dataclass
class ScaffoldResult:
    """Outcome of writing introduction pages, per group."""

    created: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    failed: list[dict[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary."""
        return {
            "created": [str(p) for p in self.created],
            "skipped": [str(p) for p in self.skipped],
            "failed": self.failed,
        }


class ReferenceTreeBuilder:
    """Builds the reference navigation tree and its introduction pages.

    Args:
        config: Optional ``navigation`` config section; keys missing from it
            fall back to DEFAULT_NAVIGATION_CONFIG.
    """

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        self.config = {**DEFAULT_NAVIGATION_CONFIG, **(config or {})}
        self.root_group: str = self.config["root_group"]
        self.uncategorized_group: str = self.config["uncategorized_group"]
        self.intro_prefix: str = self.config["intro_prefix"].strip("/")
        self.intro_filename: str = self.config["intro_filename"]

    def build_entries(
        self,
        canonical: dict[str, Any],
        declared_tags: list[Any] | None = None,
    ) -> list[NavigationEntry]:
        """Group operations of a canonical document by primary tag.

        Args:
            canonical: Reordered specification; its path and operation order
                becomes the page order.
            declared_tags: Tag declarations of the original document. Every
                declared tag gets an entry, even if no operation uses it.

        Returns:
            Entries in seeded order, then on-demand order, with the
            uncategorized entry (if any) last.
        """
        entries: dict[str, NavigationEntry] = {}
        for tag in declared_tags or []:
            if not isinstance(tag, dict) or not isinstance(tag.get("name"), str):
                continue
            name = tag["name"]
            if name not in entries:
                entries[name] = NavigationEntry(group=name, description=tag.get("description"))

        uncategorized: NavigationEntry | None = None
        for path, path_item in (canonical.get("paths") or {}).items():
            for method, operation in iter_operations(path_item):
                page = page_reference(method, path)
                tags = operation_tags(operation)
                if not tags:
                    if uncategorized is None:
                        uncategorized = entries.pop(self.uncategorized_group, None) or (
                            NavigationEntry(group=self.uncategorized_group)
                        )
                    uncategorized.pages.append(page)
                    continue

                primary = tags[0]
                if primary == self.uncategorized_group and uncategorized is not None:
                    uncategorized.pages.append(page)
                    continue
                if primary not in entries:
                    entries[primary] = NavigationEntry(group=primary)
                entries[primary].pages.append(page)

        result = list(entries.values())
        if uncategorized is not None:
            result.append(uncategorized)
        return result

    def intro_reference(self, entry: NavigationEntry) -> str:
        """Page reference of a group's introduction page."""
        if self.intro_prefix:
            return f"{self.intro_prefix}/{entry.slug}/index"
        return f"{entry.slug}/index"

    def ensure_intro_pages(self, entries: list[NavigationEntry]) -> list[NavigationEntry]:
        """Make each group's introduction reference its first page.

        Idempotent: an existing reference is moved to the front, never
        duplicated. Groups whose names share a slug share one introduction
        page; this is logged as a warning.
        """
        owners: dict[str, str] = {}
        for entry in entries:
            intro = self.intro_reference(entry)
            owner = owners.setdefault(intro, entry.group)
            if owner != entry.group:
                logger.warning(
                    "Groups %r and %r share introduction page %s",
                    owner,
                    entry.group,
                    intro,
                )
            if entry.pages[:1] == [intro]:
                continue
            entry.pages = [intro, *(page for page in entry.pages if page != intro)]
        return entries

    def build_navigation(
        self,
        canonical: dict[str, Any],
        declared_tags: list[Any] | None = None,
        source_path: Path | None = None,
        base_dir: Path | None = None,
    ) -> tuple[dict[str, Any], list[NavigationEntry]]:
        """Build the serializable navigation descriptor.

        Returns:
            Tuple of (descriptor without descriptions, entries with descriptions).
        """
        entries = self.ensure_intro_pages(self.build_entries(canonical, declared_tags))

        descriptor: dict[str, Any] = {"group": self.root_group}
        if source_path is not None:
            descriptor["openapi"] = openapi_location(source_path, base_dir)
        descriptor["pages"] = [entry.to_dict() for entry in entries]
        return descriptor, entries

    def render_intro_page(self, entry: NavigationEntry) -> str:
        """Frontmatter plus a single introductory sentence."""
        frontmatter: dict[str, str] = {"title": entry.group}
        if entry.description:
            frontmatter["description"] = entry.description
        header = yaml.safe_dump(
            frontmatter,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
            width=float("inf"),
        )
        return f"---\n{header}---\n\nIntroduction to {entry.group} endpoints.\n"

    def scaffold_intro_pages(
        self,
        out_dir: Path,
        entries: list[NavigationEntry],
    ) -> ScaffoldResult:
        """Create a directory and introduction page per group, once.

        Existing introduction pages are never rewritten. A failure for one
        group is logged and recorded; remaining groups are still processed.
        """
        result = ScaffoldResult()
        for entry in entries:
            intro_path = out_dir / entry.slug / self.intro_filename
            try:
                intro_path.parent.mkdir(parents=True, exist_ok=True)
                created = self._write_once(intro_path, self.render_intro_page(entry))
            except OSError as e:
                logger.exception(
                    "Failed to write introduction page for group %r at %s",
                    entry.group,
                    intro_path,
                )
                result.failed.append(
                    {"group": entry.group, "path": str(intro_path), "error": str(e)},
                )
                continue

            if created:
                logger.info("Created %s", intro_path)
                result.created.append(intro_path)
            else:
                logger.debug("Keeping existing %s", intro_path)
                result.skipped.append(intro_path)
        return result

    @staticmethod
    def _write_once(path: Path, content: str) -> bool:
        """Create path with content unless it already exists."""
        try:
            with path.open("x", encoding="utf-8") as f:
                f.write(content)
        except FileExistsError:
            return False
        return True


def openapi_location(source_path: Path, base_dir: Path | None = None) -> dict[str, str]:
    """Source file and directory relative to base_dir, with forward slashes."""
    base = base_dir or Path.cwd()
    relative = Path(os.path.relpath(source_path, base))
    return {
        "source": relative.as_posix(),
        "directory": relative.parent.as_posix(),
    }
