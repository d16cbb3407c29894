import json
import logging

from models.config import BrowserConfig, MatchMode
from models.rules import PathRule
from runtime.config import load_config, read_config, resolve_defaults, save_config


def test_missing_file_gives_defaults(tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="runtime.config"):
        config = load_config(tmp_path / "config.json")
    assert config == BrowserConfig()
    assert config.download_enabled is True
    assert config.port == 80
    assert "using defaults" in caplog.text


def test_reads_legacy_json_layout(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "address": "127.0.0.1",
                "port": 8080,
                "download_enabled": False,
                "avoid_paths": [{"name": "secret", "path": "/secret*"}],
                "allow_paths": [],
            }
        ),
        encoding="utf-8",
    )
    config = read_config(path)
    assert config.address == "127.0.0.1"
    assert config.download_enabled is False
    assert config.avoid_paths == [PathRule(name="secret", pattern="/secret*")]
    assert config.match_mode is MatchMode.SEARCH


def test_invalid_json_gives_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_config(path) == BrowserConfig()


def test_save_writes_rules_under_path_key(tmp_path):
    path = tmp_path / "config.json"
    config = BrowserConfig(allow_paths=[PathRule(name="public", path="/public*")])
    assert save_config(config, path) is True
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["allow_paths"] == [{"name": "public", "path": "/public*"}]
    assert load_config(path) == config


def test_save_failure_is_not_fatal(tmp_path, caplog):
    target = tmp_path / "missing-dir" / "config.json"
    with caplog.at_level(logging.WARNING, logger="runtime.config"):
        assert save_config(BrowserConfig(), target) is False
    assert "could not write configuration" in caplog.text


def test_resolve_defaults_fills_directories(tmp_path):
    config = resolve_defaults(BrowserConfig(), tmp_path)
    assert config.root == str(tmp_path)
    assert config.document_root == str(tmp_path / "root")
    kept = BrowserConfig(root="/srv", document_root="/assets")
    assert resolve_defaults(kept, tmp_path) is kept
