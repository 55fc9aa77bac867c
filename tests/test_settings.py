from __future__ import annotations

import pytest

from donation_analytics.config.settings import load_settings

_CONFIG = """
app:
  log_level: DEBUG
ingestion:
  data_dir: data/raw
  delimiter: ";"
  fallback_encodings: ["utf-8"]
analysis:
  engine: duckdb
  top_n: 3
"""

_ENV_KEYS = (
    "APP_ENV",
    "LOG_LEVEL",
    "ANALYSIS_ENGINE",
    "TOP_N",
    "DATA_DIR",
    "DEFAULT_DELIMITER",
    "FALLBACK_ENCODINGS",
    "SKIP_BAD_LINES",
    "IMPACT_SCORE_MIN",
    "IMPACT_SCORE_MAX",
    "EXPORT_DIR",
    "SCHEMA_REGISTRY_PATH",
)


@pytest.fixture
def config_dir(tmp_path, monkeypatch):  # type: ignore[no-untyped-def]
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "dev.yaml").write_text(_CONFIG, encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_load_settings_reads_yaml(config_dir) -> None:  # type: ignore[no-untyped-def]
    settings = load_settings()

    assert settings.env == "dev"
    assert settings.log_level == "DEBUG"
    assert settings.data_dir == "data/raw"
    assert settings.delimiter == ";"
    assert settings.engine == "duckdb"
    assert settings.top_n == 3
    assert (settings.impact_score_min, settings.impact_score_max) == (0.0, 10.0)
    assert settings.fallback_encodings == ["utf-8"]


def test_environment_overrides_yaml(config_dir, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setenv("ANALYSIS_ENGINE", "Pandas")
    monkeypatch.setenv("TOP_N", "10")
    monkeypatch.setenv("FALLBACK_ENCODINGS", "utf-8, cp1252")
    monkeypatch.setenv("SKIP_BAD_LINES", "yes")

    settings = load_settings()

    assert settings.engine == "pandas"
    assert settings.top_n == 10
    assert settings.fallback_encodings == ["utf-8", "cp1252"]
    assert settings.skip_bad_lines is True


def test_unknown_engine_is_rejected(config_dir, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setenv("ANALYSIS_ENGINE", "spark")

    with pytest.raises(ValueError):
        load_settings()


def test_missing_config_file(config_dir, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setenv("APP_ENV", "prod")

    with pytest.raises(FileNotFoundError):
        load_settings()
