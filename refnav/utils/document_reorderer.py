"""Document reorderer for OpenAPI specifications.

Reorders paths, the operations inside each path, and the top-level tag
list so they follow the canonical tag order computed by TagRanker.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from .tag_ranker import HTTP_METHODS, UNTAGGED, RankTable, TagRanker, operation_tags

logger = logging.getLogger(__name__)


@dataclass
class PathItem:
    """A path item split into its operations and everything else.

    ``extra`` holds non-operation fields (parameters, summary, servers,
    extensions) verbatim so the item round-trips without loss.
    """

    operations: dict[str, dict[str, Any]] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "PathItem":
        operations: dict[str, dict[str, Any]] = {}
        extra: dict[str, Any] = {}
        for key, value in raw.items():
            if key in HTTP_METHODS and isinstance(value, dict):
                operations[key] = value
            else:
                extra[key] = value
        return cls(operations=operations, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        """Non-operation fields first, then operations in their current order."""
        result = dict(self.extra)
        result.update(self.operations)
        return result

    def best_rank(self, table: RankTable) -> int:
        ranks = [table.best_rank(operation_tags(op)) for op in self.operations.values()]
        return min(ranks) if ranks else UNTAGGED

    def sorted_by_rank(self, table: RankTable) -> "PathItem":
        ordered = sorted(
            self.operations.items(),
            key=lambda entry: (table.best_rank(operation_tags(entry[1])), entry[0]),
        )
        return PathItem(operations=dict(ordered), extra=dict(self.extra))


@dataclass
class ReorderStats:
    """Statistics for document reordering."""

    paths_processed: int = 0
    paths_moved: int = 0
    operations_moved: int = 0
    tags_dropped: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "paths_processed": self.paths_processed,
            "paths_moved": self.paths_moved,
            "operations_moved": self.operations_moved,
            "tags_dropped": self.tags_dropped,
        }


class DocumentReorderer:
    """Produces a canonically ordered copy of an OpenAPI document.

    Paths sort by their best operation rank, then by path string.
    Operations within a path sort by their best tag rank, then by method.
    The tag list keeps only declared tags that are used, in rank order.
    """

    def __init__(self, ranker: TagRanker | None = None) -> None:
        self.ranker = ranker or TagRanker()
        self.stats = ReorderStats()
        self.rank_table = RankTable()

    def reorder(self, document: dict[str, Any]) -> dict[str, Any]:
        """Reorder a specification.

        Args:
            document: OpenAPI specification dictionary. Not mutated.

        Returns:
            New specification with sorted paths, operations and tags, or the
            same document when it has no paths key.
        """
        if document.get("paths") is None:
            logger.debug("Document has no paths, nothing to reorder")
            return document

        table = self.ranker.rank(document)
        self.rank_table = table

        result = document.copy()
        result["paths"] = self._reorder_paths(document["paths"], table)

        if isinstance(document.get("tags"), list):
            result["tags"] = self._reorder_tags(document["tags"], table)

        return result

    def _reorder_paths(self, paths: dict[str, Any], table: RankTable) -> dict[str, Any]:
        items: dict[str, PathItem | Any] = {}
        for path, raw in paths.items():
            items[path] = PathItem.from_dict(raw) if isinstance(raw, dict) else raw

        def path_key(path: str) -> tuple[int, str]:
            item = items[path]
            rank = item.best_rank(table) if isinstance(item, PathItem) else UNTAGGED
            return rank, path

        ordered_paths = sorted(items, key=path_key)
        self.stats.paths_processed += len(ordered_paths)
        self.stats.paths_moved += sum(
            1 for old, new in zip(paths, ordered_paths, strict=True) if old != new
        )

        result: dict[str, Any] = {}
        for path in ordered_paths:
            item = items[path]
            if not isinstance(item, PathItem):
                result[path] = item
                continue
            sorted_item = item.sorted_by_rank(table)
            self.stats.operations_moved += sum(
                1
                for old, new in zip(item.operations, sorted_item.operations, strict=True)
                if old != new
            )
            result[path] = sorted_item.to_dict()

        return result

    def _reorder_tags(self, tags: list[Any], table: RankTable) -> list[dict[str, Any]]:
        declarations: dict[str, dict[str, Any]] = {}
        for tag in tags:
            if isinstance(tag, dict) and isinstance(tag.get("name"), str):
                declarations.setdefault(tag["name"], tag)

        result = [declarations[name] for name in table.order if name in declarations]
        self.stats.tags_dropped += len(tags) - len(result)
        if len(result) < len(declarations):
            logger.info(
                "Dropped %d declared tags not used by any operation",
                len(declarations) - len(result),
            )
        return result

    def get_stats(self) -> dict[str, Any]:
        """Get reordering statistics."""
        return self.stats.to_dict()

    def reset_stats(self) -> None:
        """Reset statistics for a new run."""
        self.stats = ReorderStats()


def sort_openapi_by_tags(document: dict[str, Any], strict: bool = False) -> dict[str, Any]:
    """Reorder a document with a fresh DocumentReorderer."""
    return DocumentReorderer(TagRanker(strict=strict)).reorder(document)
