import pytest
from pydantic import ValidationError

from splitdb.framework.config import ConfigManager

ENV_VARS = [
    "ARANGO_HOST",
    "ARANGO_PORT",
    "ARANGO_USERNAME",
    "ARANGO_PASSWORD",
    "ARANGO_DATABASE",
    "SPLITDB_STORE_BACKEND",
    "SPLITDB_DATASET_NAME",
    "SPLITDB_POPULATION_USE",
    "SPLITDB_DEFAULT_BUCKET",
    "SPLITDB_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_base_config_defaults():
    config = ConfigManager.load()

    assert config.backend == "memory"
    assert config.database.host == "localhost"
    assert config.database.port == 8529
    assert config.database.database == "datasets"
    assert config.dataset.name == "dataset"
    assert config.dataset.population_use == 1.0
    assert config.dataset.default_bucket == "train"
    assert config.logging_level == "INFO"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ARANGO_HOST", "arango.internal")
    monkeypatch.setenv("ARANGO_PORT", "18529")
    monkeypatch.setenv("ARANGO_DATABASE", "corpora")
    monkeypatch.setenv("SPLITDB_STORE_BACKEND", "arango")
    monkeypatch.setenv("SPLITDB_DATASET_NAME", "intents")
    monkeypatch.setenv("SPLITDB_POPULATION_USE", "0.25")
    monkeypatch.setenv("SPLITDB_DEFAULT_BUCKET", "test")
    monkeypatch.setenv("SPLITDB_LOG_LEVEL", "DEBUG")

    config = ConfigManager.load()

    assert config.backend == "arango"
    assert config.database.host == "arango.internal"
    assert config.database.port == 18529
    assert config.database.database == "corpora"
    assert config.database.username == "root"
    assert config.dataset.name == "intents"
    assert config.dataset.population_use == 0.25
    assert config.dataset.default_bucket == "test"
    assert config.logging_level == "DEBUG"


def test_yaml_file_then_env_then_override(tmp_path, monkeypatch):
    config_file = tmp_path / "splitdb.yaml"
    config_file.write_text(
        "dataset:\n"
        "  name: from_file\n"
        "  population_use: 0.8\n"
        "database:\n"
        "  host: file-host\n"
    )
    monkeypatch.setenv("SPLITDB_POPULATION_USE", "0.6")

    config = ConfigManager.load(str(config_file), override={"dataset": {"default_bucket": "test"}})

    assert config.dataset.name == "from_file"
    assert config.dataset.population_use == 0.6
    assert config.dataset.default_bucket == "test"
    assert config.database.host == "file-host"
    assert config.database.port == 8529


def test_missing_yaml_file_is_ignored(tmp_path):
    config = ConfigManager.load(str(tmp_path / "nope.yaml"))

    assert config.dataset.name == "dataset"


@pytest.mark.parametrize("population_use", [0.0, 1.5])
def test_population_use_validated(population_use):
    with pytest.raises(ValidationError):
        ConfigManager.load(override={"dataset": {"population_use": population_use}})


def test_unknown_backend_rejected():
    with pytest.raises(ValidationError):
        ConfigManager.load(override={"backend": "postgres"})


def test_deep_merge_keeps_sibling_keys():
    merged = ConfigManager._deep_merge({"a": {"b": 1, "c": 2}, "d": 3}, {"a": {"b": 10}})

    assert merged == {"a": {"b": 10, "c": 2}, "d": 3}
