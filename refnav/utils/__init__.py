"""Utility modules for OpenAPI reference ordering and navigation."""

from .docs_config import NavigationContainerError, update_docs_config_file, update_docs_navigation
from .document_reorderer import DocumentReorderer, PathItem, ReorderStats, sort_openapi_by_tags
from .path_config import PathConfig
from .reference_tree import NavigationEntry, ReferenceTreeBuilder, ScaffoldResult, slugify
from .spec_io import DEFAULT_CONFIG, SpecLoadError, load_config, load_spec, save_spec
from .tag_ranker import (
    HTTP_METHODS,
    UNRANKED,
    UNTAGGED,
    RankTable,
    TagAudit,
    TagRanker,
    TagValidationError,
)

__all__ = [
    "DEFAULT_CONFIG",
    "HTTP_METHODS",
    "UNRANKED",
    "UNTAGGED",
    "DocumentReorderer",
    "NavigationContainerError",
    "NavigationEntry",
    "PathConfig",
    "PathItem",
    "RankTable",
    "ReferenceTreeBuilder",
    "ReorderStats",
    "ScaffoldResult",
    "SpecLoadError",
    "TagAudit",
    "TagRanker",
    "TagValidationError",
    "load_config",
    "load_spec",
    "save_spec",
    "slugify",
    "sort_openapi_by_tags",
    "update_docs_config_file",
    "update_docs_navigation",
]
