"""
Tests for manifest parsing (binshim/config.py).
"""

import json
import pytest
from pathlib import Path

from binshim.config import (
    Manifest,
    MANIFEST_LOCATIONS,
    find_manifest,
    load_and_validate,
    validate_manifest,
    _load_json,
    _load_yaml,
)
from binshim.errors import ConfigError

from conftest import manifest_data, write_manifest


# Fixture paths
FIXTURES_DIR = Path(__file__).parent / "fixtures"
MANIFEST_VALID = FIXTURES_DIR / "package_valid.json"
MANIFEST_YAML = FIXTURES_DIR / "manifest_valid.yml"
MANIFEST_MISSING_URL = FIXTURES_DIR / "package_missing_url.json"


class TestValidateManifest:
    """Tests for required-field validation order."""

    def test_valid_manifest(self):
        """Test a complete manifest has no violation."""
        assert validate_manifest(manifest_data()) is None

    def test_missing_version(self):
        """Test version is checked first."""
        data = manifest_data()
        del data["version"]
        del data["bin"]
        message, field = validate_manifest(data)
        assert field == "version"
        assert "version" in message

    def test_empty_version(self):
        """Test an empty version string is rejected."""
        assert validate_manifest(manifest_data(version=""))[1] == "version"

    def test_missing_go_binary(self):
        """Test goBinary must be present."""
        data = manifest_data()
        del data["goBinary"]
        assert validate_manifest(data) == (
            "goBinary property must be defined and be an object",
            "goBinary",
        )

    def test_go_binary_not_object(self):
        """Test goBinary must be a mapping."""
        assert validate_manifest(manifest_data(goBinary="tool"))[1] == "goBinary"

    def test_empty_go_binary_reports_name(self):
        """Test an empty goBinary object moves on to the name check."""
        assert validate_manifest(manifest_data(goBinary={})) == ("name property is necessary", "name")

    def test_missing_name(self):
        """Test goBinary.name is checked before url."""
        data = manifest_data(goBinary={"checksums": {}})
        assert validate_manifest(data) == ("name property is necessary", "name")

    def test_missing_url_reported_specifically(self):
        """Test a missing url is reported even when bin is also missing."""
        data = manifest_data(goBinary={"name": "tool"})
        del data["bin"]
        message, field = validate_manifest(data)
        assert field == "url"
        assert message == "url property is required"

    def test_missing_bin(self):
        """Test bin is checked last."""
        data = manifest_data()
        del data["bin"]
        assert validate_manifest(data)[1] == "bin"

    def test_bin_not_object(self):
        """Test bin must be a mapping."""
        assert validate_manifest(manifest_data(bin="bin/tool"))[1] == "bin"


class TestManifest:
    """Tests for Manifest dataclass."""

    def test_from_dict(self):
        """Test creating Manifest from a document."""
        data = manifest_data()
        data["goBinary"]["checksums"] = {"linux_amd64": "abc"}
        manifest = Manifest.from_dict(data, source="package.json")
        assert manifest.binary_name == "tool"
        assert manifest.version == "v1.2.3"
        assert manifest.checksums == {"linux_amd64": "abc"}
        assert manifest.bin_entries == {"tool": "bin/tool"}
        assert manifest.package_name == "@acme/tool"
        assert manifest.source == "package.json"

    def test_from_dict_without_checksums(self):
        """Test checksums default to an empty mapping."""
        data = manifest_data(goBinary={"name": "tool", "url": "https://x/{{ext}}"})
        manifest = Manifest.from_dict(data)
        assert manifest.checksums == {}

    def test_from_dict_invalid_checksums(self):
        """Test checksums must be a mapping."""
        data = manifest_data(goBinary={"name": "tool", "url": "https://x", "checksums": ["a"]})
        with pytest.raises(ConfigError) as exc_info:
            Manifest.from_dict(data)
        assert exc_info.value.field == "checksums"

    def test_from_dict_raises_config_error(self):
        """Test validation failures raise ConfigError with the field."""
        data = manifest_data(goBinary={"name": "tool"})
        with pytest.raises(ConfigError) as exc_info:
            Manifest.from_dict(data)
        assert exc_info.value.field == "url"
        assert "url property is required" in str(exc_info.value)

    def test_manifest_immutable(self):
        """Test that Manifest is immutable."""
        manifest = Manifest.from_dict(manifest_data())
        with pytest.raises(AttributeError):
            manifest.version = "2.0.0"  # Should fail (frozen)


class TestLoaders:
    """Tests for the JSON and YAML loaders."""

    def test_load_json_fixture(self):
        data = _load_json(str(MANIFEST_VALID))
        assert data["goBinary"]["name"] == "tool"

    def test_load_yaml_fixture(self):
        data = _load_yaml(str(MANIFEST_YAML))
        assert data["goBinary"]["name"] == "tool"
        assert data["version"] == "v0.4.0"

    def test_load_json_invalid(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            _load_json(str(path))

    def test_load_json_not_object(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text(json.dumps(["a", "b"]), encoding="utf-8")
        with pytest.raises(ConfigError):
            _load_json(str(path))

    def test_load_yaml_invalid(self, tmp_path):
        path = tmp_path / "manifest.yml"
        path.write_text("goBinary: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            _load_yaml(str(path))

    def test_load_yaml_scalar_document(self, tmp_path):
        path = tmp_path / "manifest.yml"
        path.write_text("just a string\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            _load_yaml(str(path))


class TestLoadAndValidate:
    """Tests for load_and_validate."""

    def test_load_valid_json(self):
        manifest = load_and_validate(MANIFEST_VALID)
        assert manifest.binary_name == "tool"
        assert manifest.checksums["linux_amd64"].startswith("e3b0c442")
        assert manifest.source == str(MANIFEST_VALID)

    def test_load_valid_yaml(self):
        manifest = load_and_validate(MANIFEST_YAML)
        assert manifest.binary_name == "tool"
        assert "darwin_arm64" in manifest.checksums

    def test_load_missing_url_fixture(self):
        with pytest.raises(ConfigError) as exc_info:
            load_and_validate(MANIFEST_MISSING_URL)
        assert exc_info.value.field == "url"

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_and_validate(tmp_path / "package.json")
        assert "package.json" in exc_info.value.message
        assert exc_info.value.remediation is not None

    def test_load_written_manifest(self, tmp_path):
        path = write_manifest(tmp_path, manifest_data(version="2.0.0"))
        assert load_and_validate(path).version == "2.0.0"


class TestFindManifest:
    """Tests for manifest discovery."""

    def test_prefers_package_json(self, tmp_path):
        write_manifest(tmp_path, manifest_data())
        (tmp_path / ".binshim.yml").write_text("version: 1\n", encoding="utf-8")
        assert find_manifest(tmp_path) == tmp_path / "package.json"

    def test_falls_back_to_yaml(self, tmp_path):
        (tmp_path / ".binshim.yaml").write_text("version: 1\n", encoding="utf-8")
        assert find_manifest(tmp_path) == tmp_path / ".binshim.yaml"

    def test_default_when_nothing_found(self, tmp_path):
        assert find_manifest(tmp_path) == tmp_path / MANIFEST_LOCATIONS[0]
