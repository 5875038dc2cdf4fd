import json

import pytest

from xrd_ingestor.core.config import TransformerConfig, load_config
from xrd_ingestor.core.errors import ConfigError


def test_defaults_without_file():
    cfg = load_config()
    assert cfg.annotation_prefix == "openportal.dev"
    assert cfg.default_owner == "platform-team"
    assert cfg.include_publishing is False
    assert cfg.publish_phase is None


def test_missing_file_falls_back_to_defaults(tmp_path, caplog):
    cfg = load_config(tmp_path / "nope.yaml")
    assert cfg == TransformerConfig()
    assert "does not exist" in caplog.text


def test_yaml_file_with_camel_case_keys(tmp_path):
    f = tmp_path / "ingestor.yaml"
    f.write_text(
        "defaultOwner: team-db\n"
        "includePublishing: true\n"
        "publishPhase:\n"
        "  git:\n"
        "    repoUrl: github.com?owner=o&repo=r\n"
        "    createPR: false\n"
        "  flux:\n"
        "    kustomization: orders\n",
        encoding="utf-8",
    )
    cfg = load_config(f)
    assert cfg.default_owner == "team-db"
    assert cfg.publishes_to_git is True
    assert cfg.git.repo_url == "github.com?owner=o&repo=r"
    assert cfg.git.create_pr is False
    assert cfg.publish_phase.flux.kustomization == "orders"
    assert cfg.publish_phase.flux.namespace == "flux-system"


def test_json_file_with_snake_case_keys(tmp_path):
    f = tmp_path / "ingestor.json"
    f.write_text(json.dumps({"annotation_prefix": "acme.io", "additional_tags": ["a"]}), encoding="utf-8")
    cfg = load_config(f)
    assert cfg.annotation_prefix == "acme.io"
    assert cfg.additional_tags == ["a"]


def test_file_from_env(tmp_path, monkeypatch):
    f = tmp_path / "env.yaml"
    f.write_text("defaultOwner: from-file\n", encoding="utf-8")
    monkeypatch.setenv("XRD_INGESTOR_CONFIG_FILE", str(f))
    assert load_config().default_owner == "from-file"


def test_env_overrides_win(tmp_path, monkeypatch):
    f = tmp_path / "ingestor.yaml"
    f.write_text("defaultOwner: from-file\nincludePublishing: true\n", encoding="utf-8")
    monkeypatch.setenv("XRD_INGESTOR_DEFAULT_OWNER", "from-env")
    monkeypatch.setenv("XRD_INGESTOR_INCLUDE_PUBLISHING", "no")
    monkeypatch.setenv("XRD_INGESTOR_ADDITIONAL_TAGS", "a, b,,c")
    cfg = load_config(f)
    assert cfg.default_owner == "from-env"
    assert cfg.include_publishing is False
    assert cfg.additional_tags == ["a", "b", "c"]


def test_malformed_file_raises(tmp_path):
    f = tmp_path / "bad.yaml"
    f.write_text("this: is: not: valid: yaml:\n  {{{{", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(f)


def test_non_mapping_file_raises(tmp_path):
    f = tmp_path / "list.json"
    f.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(f)


def test_invalid_field_raises(tmp_path):
    f = tmp_path / "bad-type.yaml"
    f.write_text("includeFetch: [1, 2]\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(f)


def test_config_is_immutable():
    cfg = TransformerConfig()
    with pytest.raises(Exception):
        cfg.default_owner = "someone"
