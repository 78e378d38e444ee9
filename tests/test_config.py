from pathlib import Path

import pytest
import yaml

from doc_history.config import ConfigManager, DocHistoryConfig
from doc_history.history import VersionHistory


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "CONTEXT_LINES", "MAX_LINES", "MAX_BYTES", "MAX_EDIT_DISTANCE", "COMPARE_WORKERS", "WORD_DIFF",
        "COLLAPSE_UNCHANGED", "STORAGE_PATH", "ACTOR", "LOG_LEVEL",
    ):
        monkeypatch.delenv(f"DOC_HISTORY_{name}", raising=False)


def test_defaults(tmp_path):
    config = ConfigManager(tmp_path).load_config()

    assert config.diff.context_lines == 3
    assert config.diff.word_diff is True
    assert config.diff.collapse_unchanged is True
    assert config.diff.max_lines == 20_000
    assert config.store.storage_path == Path(".doc_history")
    assert config.log_level == "WARNING"


def test_file_values_are_applied(tmp_path):
    (tmp_path / "config.yaml").write_text(yaml.dump({
        "diff": {"context_lines": 5, "word_diff": False},
        "store": {"storage_path": str(tmp_path / "versions"), "default_actor": "carol"},
        "log_level": "info",
    }))

    config = ConfigManager(tmp_path).load_config()

    assert config.diff.context_lines == 5
    assert config.diff.word_diff is False
    assert config.diff.collapse_unchanged is True
    assert config.store.storage_path == tmp_path / "versions"
    assert config.store.default_actor == "carol"
    assert config.log_level == "INFO"


def test_environment_overrides_file(tmp_path, monkeypatch):
    (tmp_path / "config.yaml").write_text(yaml.dump({"diff": {"context_lines": 5}}))
    monkeypatch.setenv("DOC_HISTORY_CONTEXT_LINES", "1")
    monkeypatch.setenv("DOC_HISTORY_COLLAPSE_UNCHANGED", "no")
    monkeypatch.setenv("DOC_HISTORY_ACTOR", "dave")

    config = ConfigManager(tmp_path).load_config()

    assert config.diff.context_lines == 1
    assert config.diff.collapse_unchanged is False
    assert config.store.default_actor == "dave"


def test_bad_integer_env_is_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv("DOC_HISTORY_MAX_LINES", "lots")
    assert ConfigManager(tmp_path).load_config().diff.max_lines == 20_000


def test_broken_yaml_falls_back_to_defaults(tmp_path):
    (tmp_path / "config.yaml").write_text("diff: [unclosed")
    assert ConfigManager(tmp_path).load_config().diff.context_lines == 3


def test_save_and_reload(tmp_path):
    manager = ConfigManager(tmp_path)
    config = DocHistoryConfig()
    config.diff.context_lines = 7
    config.store.default_actor = "erin"
    manager.save_config(config)

    reloaded = ConfigManager(tmp_path).load_config()

    assert reloaded.diff.context_lines == 7
    assert reloaded.store.default_actor == "erin"


def test_create_default_config(tmp_path):
    path = ConfigManager(tmp_path / "cfg").create_default_config()

    assert path.exists()
    assert yaml.safe_load(path.read_text())["diff"]["context_lines"] == 3


def test_history_from_config(tmp_path):
    config = DocHistoryConfig()
    config.diff.context_lines = 1
    config.diff.max_lines = 10
    config.store.storage_path = tmp_path / "store"

    history = VersionHistory.from_config(config)

    assert history.default_options.context_lines == 1
    assert history.engine.max_lines == 10
    assert history.store.storage_path == tmp_path / "store"
    assert (tmp_path / "store").is_dir()
