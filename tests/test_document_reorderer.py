"""Unit tests for DocumentReorderer.

Tests path, operation and tag list ordering plus the non-mutation and
fixed-point guarantees.
"""

import copy

import pytest

from refnav.utils.document_reorderer import (
    DocumentReorderer,
    PathItem,
    ReorderStats,
    sort_openapi_by_tags,
)
from refnav.utils.tag_ranker import UNTAGGED, RankTable, TagRanker, TagValidationError


@pytest.fixture
def reorderer():
    """Create reorderer with a lenient ranker."""
    return DocumentReorderer()


@pytest.fixture
def scenario_spec():
    """Declared Billing/Compute, used Compute/Storage/none."""
    return {
        "openapi": "3.0.3",
        "info": {"title": "Test", "version": "1.0"},
        "tags": [
            {"name": "Billing", "description": "Invoices"},
            {"name": "Compute", "description": "Instances"},
        ],
        "paths": {
            "/n": {"get": {"operationId": "none"}},
            "/s": {"get": {"tags": ["Storage"]}},
            "/c": {"get": {"tags": ["Compute"]}},
        },
    }


@pytest.fixture
def mixed_spec():
    """Several paths sharing tags, with shared path-level fields."""
    return {
        "tags": [{"name": "Users"}, {"name": "Admin"}],
        "paths": {
            "/users/{id}": {
                "parameters": [{"name": "id", "in": "path"}],
                "delete": {"tags": ["Admin"]},
                "get": {"tags": ["Users"]},
            },
            "/admin": {"post": {"tags": ["Admin"]}},
            "/users": {"post": {"tags": ["Users"]}, "get": {"tags": ["Users"]}},
            "/health": {"summary": "no operations"},
        },
    }


class TestPathItem:
    """Test PathItem splitting and round-tripping."""

    def test_split_operations_and_extra(self) -> None:
        """Methods become operations, everything else stays in extra."""
        raw = {"summary": "s", "get": {"tags": ["A"]}, "parameters": [], "x-ext": 1}
        item = PathItem.from_dict(raw)
        assert list(item.operations) == ["get"]
        assert item.extra == {"summary": "s", "parameters": [], "x-ext": 1}

    def test_to_dict_puts_extra_first(self) -> None:
        """Non-operation fields precede operations."""
        item = PathItem.from_dict({"get": {}, "summary": "s"})
        assert list(item.to_dict()) == ["summary", "get"]

    def test_best_rank_without_operations(self) -> None:
        """A path item with no operations is untagged."""
        assert PathItem.from_dict({"summary": "s"}).best_rank(RankTable()) == UNTAGGED


class TestPathOrdering:
    """Test top-level path ordering."""

    def test_scenario_order(self, reorderer, scenario_spec) -> None:
        """Tagged paths by rank, untagged path last."""
        result = reorderer.reorder(scenario_spec)
        assert list(result["paths"]) == ["/c", "/s", "/n"]

    def test_equal_rank_paths_lexicographic(self, reorderer, mixed_spec) -> None:
        """Paths with the same best rank sort by path string."""
        result = reorderer.reorder(mixed_spec)
        assert list(result["paths"]) == ["/users", "/users/{id}", "/admin", "/health"]

    def test_best_rank_monotonic(self, reorderer, mixed_spec) -> None:
        """Path best ranks never decrease along the output."""
        result = reorderer.reorder(mixed_spec)
        table = reorderer.rank_table
        keys = [
            (PathItem.from_dict(item).best_rank(table), path)
            for path, item in result["paths"].items()
        ]
        assert keys == sorted(keys)

    def test_null_path_item_passes_through(self, reorderer) -> None:
        """Non-dict path items are kept and sort last."""
        spec = {"paths": {"/a": None, "/b": {"get": {"tags": ["T"]}}}}
        result = reorderer.reorder(spec)
        assert list(result["paths"]) == ["/b", "/a"]
        assert result["paths"]["/a"] is None


class TestOperationOrdering:
    """Test ordering of operations within a path."""

    def test_tagged_before_untagged(self, reorderer) -> None:
        """get tagged Compute sorts before untagged post."""
        spec = {
            "tags": [{"name": "Compute"}],
            "paths": {"/x": {"post": {"summary": "untagged"}, "get": {"tags": ["Compute"]}}},
        }
        result = reorderer.reorder(spec)
        assert list(result["paths"]["/x"]) == ["get", "post"]

    def test_rank_then_method(self, reorderer, mixed_spec) -> None:
        """Users before Admin; same tag falls back to method name."""
        result = reorderer.reorder(mixed_spec)
        assert list(result["paths"]["/users"]) == ["get", "post"]
        assert list(result["paths"]["/users/{id}"]) == ["parameters", "get", "delete"]

    def test_untagged_methods_alphabetical(self, reorderer) -> None:
        """Two untagged operations sort by method token."""
        spec = {"paths": {"/x": {"put": {}, "delete": {}, "patch": {}}}}
        assert list(reorderer.reorder(spec)["paths"]["/x"]) == ["delete", "patch", "put"]

    def test_extra_fields_preserved(self, reorderer, mixed_spec) -> None:
        """Shared parameters and summaries survive unchanged."""
        result = reorderer.reorder(mixed_spec)
        assert result["paths"]["/users/{id}"]["parameters"] == [{"name": "id", "in": "path"}]
        assert result["paths"]["/health"] == {"summary": "no operations"}


class TestTagRewrite:
    """Test rewriting of the top-level tag list."""

    def test_unused_dropped_undeclared_not_added(self, reorderer, scenario_spec) -> None:
        """Only declared, used tags remain, as full objects."""
        result = reorderer.reorder(scenario_spec)
        assert result["tags"] == [{"name": "Compute", "description": "Instances"}]
        assert reorderer.get_stats()["tags_dropped"] == 1

    def test_tags_follow_rank_order(self, reorderer, mixed_spec) -> None:
        """Tag list follows declared order of used tags."""
        result = reorderer.reorder(mixed_spec)
        assert [t["name"] for t in result["tags"]] == ["Users", "Admin"]

    def test_no_tags_array_not_added(self, reorderer) -> None:
        """Documents without tags do not gain a tags array."""
        result = reorderer.reorder({"paths": {"/a": {"get": {"tags": ["A"]}}}})
        assert "tags" not in result


class TestNoOpAndPurity:
    """Test no-op input and immutability."""

    def test_no_paths_returns_unchanged(self, reorderer) -> None:
        """A components-only fragment is returned as-is."""
        fragment = {"components": {"schemas": {}}, "tags": [{"name": "A"}]}
        assert reorderer.reorder(fragment) is fragment

    def test_input_not_mutated(self, reorderer, mixed_spec) -> None:
        """Neither paths nor tags of the input change."""
        original = copy.deepcopy(mixed_spec)
        reorderer.reorder(mixed_spec)
        assert mixed_spec == original
        assert list(mixed_spec["paths"]) == list(original["paths"])

    def test_other_fields_carried(self, reorderer, scenario_spec) -> None:
        """Top-level fields other than paths and tags are kept."""
        result = reorderer.reorder(scenario_spec)
        assert result["info"] == scenario_spec["info"]
        assert result["openapi"] == "3.0.3"

    def test_fixed_point(self, reorderer, mixed_spec, scenario_spec) -> None:
        """Reordering canonical output changes nothing."""
        for spec in (mixed_spec, scenario_spec):
            once = reorderer.reorder(spec)
            twice = reorderer.reorder(once)
            assert twice == once
            assert list(twice["paths"]) == list(once["paths"])
            for path in once["paths"]:
                assert list(twice["paths"][path]) == list(once["paths"][path])


class TestStatsAndHelpers:
    """Test statistics and the module helper."""

    def test_stats(self, reorderer, scenario_spec) -> None:
        """Moves are counted."""
        reorderer.reorder(scenario_spec)
        stats = reorderer.get_stats()
        assert stats["paths_processed"] == 3
        assert stats["paths_moved"] == 2

    def test_reset_stats(self, reorderer, scenario_spec) -> None:
        """Stats can be reset."""
        reorderer.reorder(scenario_spec)
        reorderer.reset_stats()
        assert reorderer.get_stats() == ReorderStats().to_dict()

    def test_sort_openapi_by_tags(self, scenario_spec) -> None:
        """Helper matches the reorderer."""
        assert sort_openapi_by_tags(scenario_spec) == DocumentReorderer().reorder(scenario_spec)

    def test_sort_openapi_by_tags_strict(self, scenario_spec) -> None:
        """Strict helper rejects mismatched tags."""
        with pytest.raises(TagValidationError):
            sort_openapi_by_tags(scenario_spec, strict=True)

    def test_custom_ranker(self) -> None:
        """An injected ranker is used."""
        ranker = TagRanker()
        assert DocumentReorderer(ranker).ranker is ranker
