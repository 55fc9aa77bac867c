from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
import yaml
from dotenv import load_dotenv

load_dotenv()

SUPPORTED_ENGINES = ("pandas", "duckdb")

def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)

def _env_bool(key: str, default: bool = False) -> bool:
    val = os.environ.get(key)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "y", "on")

def _env_list(key: str, default: List[str]) -> List[str]:
    val = os.environ.get(key)
    if not val:
        return default
    return [x.strip() for x in val.split(",") if x.strip()]

@dataclass(frozen=True)
class Settings:
    env: str
    log_level: str
    log_file: str

    # Ingestion
    data_dir: str
    schema_registry_path: str
    delimiter: str
    fallback_encodings: List[str]
    skip_bad_lines: bool

    # Analysis
    engine: str
    top_n: int
    impact_score_min: float
    impact_score_max: float

    export_dir: str


def default_settings() -> Settings:
    """Settings used when no config file is involved (tests, notebooks)."""
    return Settings(
        env="dev",
        log_level="INFO",
        log_file="logs/analysis.log",
        data_dir="data/sample",
        schema_registry_path="schemas/schema_registry.yaml",
        delimiter=",",
        fallback_encodings=["utf-8", "latin-1"],
        skip_bad_lines=False,
        engine="pandas",
        top_n=5,
        impact_score_min=0.0,
        impact_score_max=10.0,
        export_dir="exports",
    )


def load_settings() -> Settings:
    app_env = _env("APP_ENV", "dev")
    cfg_path = Path("config") / f"{app_env}.yaml"
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config not found: {cfg_path}")

    cfg = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    app_cfg = cfg.get("app") or {}
    ing_cfg = cfg.get("ingestion") or {}
    an_cfg = cfg.get("analysis") or {}
    exp_cfg = cfg.get("export") or {}

    delimiter = _env("DEFAULT_DELIMITER", str(ing_cfg.get("delimiter", ",")))
    fallback_encodings = _env_list("FALLBACK_ENCODINGS", list(ing_cfg.get("fallback_encodings", ["utf-8"])))
    skip_bad_lines = _env_bool("SKIP_BAD_LINES", bool(ing_cfg.get("skip_bad_lines", False)))
    data_dir = _env("DATA_DIR", str(ing_cfg.get("data_dir", "data/sample")))
    schema_registry_path = _env(
        "SCHEMA_REGISTRY_PATH", str(ing_cfg.get("schema_registry", "schemas/schema_registry.yaml"))
    )

    engine = (_env("ANALYSIS_ENGINE", str(an_cfg.get("engine", "pandas"))) or "pandas").strip().lower()
    if engine not in SUPPORTED_ENGINES:
        raise ValueError(f"Unsupported analysis engine: {engine} (expected one of {SUPPORTED_ENGINES})")
    top_n = int(_env("TOP_N", str(an_cfg.get("top_n", 5))))
    impact_score_min = float(_env("IMPACT_SCORE_MIN", str(an_cfg.get("impact_score_min", 0.0))))
    impact_score_max = float(_env("IMPACT_SCORE_MAX", str(an_cfg.get("impact_score_max", 10.0))))

    export_dir = _env("EXPORT_DIR", str(exp_cfg.get("export_dir", "exports")))

    return Settings(
        env=app_env,
        log_level=_env("LOG_LEVEL", str(app_cfg.get("log_level", "INFO"))),
        log_file=str(app_cfg.get("log_file", "logs/analysis.log")),
        data_dir=data_dir,
        schema_registry_path=schema_registry_path,
        delimiter=delimiter,
        fallback_encodings=fallback_encodings,
        skip_bad_lines=skip_bad_lines,
        engine=engine,
        top_n=top_n,
        impact_score_min=impact_score_min,
        impact_score_max=impact_score_max,
        export_dir=export_dir,
    )
