"""Tag ranking for OpenAPI specifications.

Computes a canonical order over the tags referenced by operations:
declared tags that are actually used come first (in declared order),
followed by used-but-undeclared tags sorted alphabetically.
"""

import logging
import sys
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

HTTP_METHODS: tuple[str, ...] = (
    "get",
    "put",
    "post",
    "delete",
    "options",
    "head",
    "patch",
    "trace",
)

# Sentinel ranks; both sort after every real rank
UNRANKED = sys.maxsize - 1
UNTAGGED = sys.maxsize


class TagValidationError(ValueError):
    """Raised in strict mode when declared and used tags disagree."""


def iter_operations(path_item: Any) -> Iterable[tuple[str, dict[str, Any]]]:
    """Yield (method, operation) pairs of a path item in HTTP_METHODS order."""
    if not isinstance(path_item, dict):
        return
    for method in HTTP_METHODS:
        operation = path_item.get(method)
        if isinstance(operation, dict):
            yield method, operation


def operation_tags(operation: Mapping[str, Any]) -> list[str]:
    """Return the tag names of an operation, ignoring malformed entries."""
    tags = operation.get("tags")
    if not isinstance(tags, list):
        return []
    return [tag for tag in tags if isinstance(tag, str)]


def collect_used_tags(paths: Mapping[str, Any] | None) -> set[str]:
    """Collect every tag referenced by any operation."""
    used: set[str] = set()
    for path_item in (paths or {}).values():
        for _method, operation in iter_operations(path_item):
            used.update(operation_tags(operation))
    return used


def declared_tag_names(document: Mapping[str, Any]) -> list[str]:
    """Return declared tag names in source order, first occurrence only."""
    tags = document.get("tags")
    if not isinstance(tags, list):
        return []

    names: list[str] = []
    seen: set[str] = set()
    for tag in tags:
        if isinstance(tag, dict) and isinstance(tag.get("name"), str):
            name = tag["name"]
            if name not in seen:
                seen.add(name)
                names.append(name)
    return names


@dataclass
class RankTable:
    """Canonical tag order with rank lookup."""

    order: list[str] = field(default_factory=list)
    ranks: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_order(cls, order: list[str]) -> "RankTable":
        return cls(order=list(order), ranks={tag: i for i, tag in enumerate(order)})

    def __contains__(self, tag: object) -> bool:
        return tag in self.ranks

    def __len__(self) -> int:
        return len(self.order)

    def rank_of(self, tag: str) -> int:
        """Rank of a tag, or UNRANKED when the table does not know it."""
        return self.ranks.get(tag, UNRANKED)

    def best_rank(self, tags: Iterable[str]) -> int:
        """Lowest rank among tags that resolve, UNTAGGED if none do."""
        resolved = [self.ranks[tag] for tag in tags if tag in self.ranks]
        return min(resolved) if resolved else UNTAGGED


@dataclass
class TagAudit:
    """Mismatches between declared tags and tags used by operations."""

    declared_unused: list[str] = field(default_factory=list)
    undeclared_used: list[str] = field(default_factory=list)
    duplicate_declared: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not (self.declared_unused or self.undeclared_used or self.duplicate_declared)

    def to_dict(self) -> dict[str, Any]:
        """Convert audit to dictionary."""
        return {
            "declared_unused": self.declared_unused,
            "undeclared_used": self.undeclared_used,
            "duplicate_declared": self.duplicate_declared,
        }


class TagRanker:
    """Derives a deterministic tag order from an OpenAPI document.

    In lenient mode (the default) unused declarations are dropped and
    undeclared tags are appended alphabetically. In strict mode either
    case raises TagValidationError.
    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict

    def rank(self, document: Mapping[str, Any]) -> RankTable:
        """Compute the rank table for a document.

        Args:
            document: OpenAPI specification dictionary.

        Returns:
            RankTable covering every tag used by an operation.

        Raises:
            TagValidationError: In strict mode, when the audit is not clean.
        """
        used = collect_used_tags(document.get("paths"))
        declared = declared_tag_names(document)

        if self.strict:
            audit = self.compare(document)
            if audit.declared_unused or audit.undeclared_used:
                msg = (
                    f"Tag mismatch: declared but unused {audit.declared_unused}, "
                    f"used but undeclared {audit.undeclared_used}"
                )
                raise TagValidationError(msg)

        primary = [name for name in declared if name in used]
        declared_set = set(declared)
        secondary = sorted(tag for tag in used if tag not in declared_set)

        return RankTable.from_order(primary + secondary)

    def compare(self, document: Mapping[str, Any]) -> TagAudit:
        """Declared/used tag mismatches, without logging."""
        used = collect_used_tags(document.get("paths"))
        declared = declared_tag_names(document)
        declared_set = set(declared)

        duplicates: list[str] = []
        seen: set[str] = set()
        for tag in document.get("tags") or []:
            name = tag.get("name") if isinstance(tag, dict) else None
            if not isinstance(name, str):
                continue
            if name in seen and name not in duplicates:
                duplicates.append(name)
            seen.add(name)

        return TagAudit(
            declared_unused=[name for name in declared if name not in used],
            undeclared_used=sorted(tag for tag in used if tag not in declared_set),
            duplicate_declared=duplicates,
        )

    def audit(self, document: Mapping[str, Any]) -> TagAudit:
        """Report declared/used tag mismatches and log them as warnings."""
        audit = self.compare(document)
        if audit.declared_unused:
            logger.warning("Declared tags not used by any operation: %s", audit.declared_unused)
        if audit.undeclared_used:
            logger.warning("Tags used but not declared: %s", audit.undeclared_used)
        if audit.duplicate_declared:
            logger.warning("Tags declared more than once: %s", audit.duplicate_declared)

        return audit
