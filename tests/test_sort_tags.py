"""Tests for the refnav-sort-tags command."""

import json
import logging

import pytest
import yaml

from refnav.sort_tags import main, sort_file
from refnav.utils.path_config import PathConfig
from refnav.utils.spec_io import load_config
from refnav.utils.tag_ranker import TagValidationError


@pytest.fixture(autouse=True)
def reset_path_config():
    """Main instantiates the PathConfig singleton."""
    PathConfig.reset()
    yield
    PathConfig.reset()


@pytest.fixture
def spec_file(tmp_path):
    """Unsorted OpenAPI file."""
    spec = {
        "tags": [{"name": "Billing"}, {"name": "Compute"}],
        "paths": {
            "/n": {"get": {}},
            "/s": {"get": {"tags": ["Storage"]}},
            "/c": {"post": {}, "get": {"tags": ["Compute"]}},
        },
    }
    path = tmp_path / "openapi.json"
    path.write_text(json.dumps(spec), encoding="utf-8")
    return path


class TestSortFile:
    """Test the file-level helper."""

    def test_sorts_and_writes(self, spec_file, tmp_path) -> None:
        """Output is sorted; input untouched when writing elsewhere."""
        output = tmp_path / "sorted.json"
        before = spec_file.read_text(encoding="utf-8")

        reorderer, audit = sort_file(spec_file, output, load_config(None), pretty=True)

        result = json.loads(output.read_text(encoding="utf-8"))
        assert list(result["paths"]) == ["/c", "/s", "/n"]
        assert list(result["paths"]["/c"]) == ["get", "post"]
        assert result["tags"] == [{"name": "Compute"}]
        assert spec_file.read_text(encoding="utf-8") == before
        assert reorderer.get_stats()["paths_processed"] == 3
        assert audit.undeclared_used == ["Storage"]
        assert audit.declared_unused == ["Billing"]

    def test_strict_logs_each_mismatch_once(self, spec_file, tmp_path, caplog) -> None:
        """A strict failure warns about each mismatch a single time."""
        config = load_config(None)
        config["ordering"]["strict"] = True
        with caplog.at_level(logging.WARNING), pytest.raises(TagValidationError):
            sort_file(spec_file, tmp_path / "out.json", config)

        assert caplog.text.count("Tags used but not declared") == 1
        assert caplog.text.count("Declared tags not used") == 1


class TestMain:
    """Test argument handling and exit codes."""

    def test_overwrites_input_by_default(self, spec_file) -> None:
        """A single positional argument sorts in place."""
        assert main([str(spec_file)]) == 0
        result = json.loads(spec_file.read_text(encoding="utf-8"))
        assert list(result["paths"]) == ["/c", "/s", "/n"]

    def test_positional_output_compact(self, spec_file, tmp_path) -> None:
        """Second positional is the output; default output is compact."""
        output = tmp_path / "out.json"
        assert main([str(spec_file), str(output)]) == 0
        assert "\n" not in output.read_text(encoding="utf-8")

    def test_flags_pretty(self, spec_file, tmp_path) -> None:
        """-i/-o/-p flags work and pretty output ends with a newline."""
        output = tmp_path / "pretty.json"
        assert main(["-i", str(spec_file), "-o", str(output), "--pretty"]) == 0
        text = output.read_text(encoding="utf-8")
        assert text.startswith("{\n  ")
        assert text.endswith("}\n")

    def test_missing_input(self) -> None:
        """No input file is an argument error."""
        assert main([]) == 1

    def test_malformed_json(self, tmp_path) -> None:
        """Malformed input exits 1 and writes nothing."""
        bad = tmp_path / "bad.json"
        bad.write_text("{oops", encoding="utf-8")
        output = tmp_path / "out.json"
        assert main([str(bad), str(output)]) == 1
        assert not output.exists()

    def test_strict_flag(self, spec_file) -> None:
        """Strict mode rejects undeclared tags and leaves the file alone."""
        before = spec_file.read_text(encoding="utf-8")
        assert main([str(spec_file), "--strict"]) == 1
        assert spec_file.read_text(encoding="utf-8") == before

    def test_rerun_is_fixed_point(self, spec_file, tmp_path) -> None:
        """Sorting sorted output gives identical bytes."""
        first = tmp_path / "first.json"
        second = tmp_path / "second.json"
        assert main([str(spec_file), str(first), "-p"]) == 0
        assert main([str(first), str(second), "-p"]) == 0
        assert first.read_bytes() == second.read_bytes()

    def test_not_utf8_input(self, tmp_path) -> None:
        """Undecodable input exits 1 instead of raising."""
        bad = tmp_path / "latin1.json"
        bad.write_bytes(b'{"paths": {"/\xff": {}}}')
        assert main([str(bad)]) == 1
        assert bad.read_bytes() == b'{"paths": {"/\xff": {}}}'

    def test_strict_from_paths_config(self, spec_file, tmp_path) -> None:
        """The refnav config named in paths.yaml applies without --config."""
        refnav_config = tmp_path / "refnav.yaml"
        with refnav_config.open("w") as f:
            yaml.dump({"ordering": {"strict": True}}, f)
        paths_config = tmp_path / "paths.yaml"
        with paths_config.open("w") as f:
            yaml.dump({"config": {"refnav": str(refnav_config)}}, f)

        before = spec_file.read_text(encoding="utf-8")
        assert main([str(spec_file), "--paths-config", str(paths_config)]) == 1
        assert spec_file.read_text(encoding="utf-8") == before
