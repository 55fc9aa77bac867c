from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from donation_analytics.config.settings import Settings, default_settings
from donation_analytics.data.session import DataSession
from donation_analytics.data.validation import validate_dataset
from donation_analytics.exceptions.errors import DataIngestionError
from donation_analytics.ingestion.mapper import map_file_to_table
from donation_analytics.ingestion.reader import read_table_file
from donation_analytics.logging.logger import get_logger
from donation_analytics.preprocessing.cleaning import coerce_types, standardize_columns
from donation_analytics.schema.registry import SchemaRegistry

log = get_logger("data.loader")


def prepare_table(registry: SchemaRegistry, table: str, df: pd.DataFrame) -> pd.DataFrame:
    spec = registry.get_table(table)
    df = standardize_columns(df)
    return coerce_types(df, spec.column_types(), required=spec.required_columns(), table=table)


def ingest_file(session: DataSession, path: Path, settings: Settings) -> Optional[str]:
    """Read one file into the session. Returns the table it landed in, or None if unmapped."""
    table = map_file_to_table(session.registry, path.name)
    if not table:
        log.warning("File did not match any table pattern", extra={"file": path.name})
        return None

    res = read_table_file(
        str(path),
        delimiter=settings.delimiter,
        fallback_encodings=settings.fallback_encodings,
        skip_bad_lines=settings.skip_bad_lines,
    )
    df = prepare_table(session.registry, table, res.df)
    session.register_table(table, df, path.name)
    return table


def session_from_frames(
    registry: SchemaRegistry,
    frames: Dict[str, pd.DataFrame],
    settings: Optional[Settings] = None,
) -> DataSession:
    """Build a validated session from already-loaded frames (e.g. query results, fixtures)."""
    settings = settings or default_settings()
    session = DataSession(registry=registry)
    for table, df in frames.items():
        session.register_table(table, prepare_table(registry, session.canonical_table_name(table), df), "<memory>")
    session.ensure_all_tables()
    validate_dataset(session, (settings.impact_score_min, settings.impact_score_max))
    return session


def load_dataset(
    data_dir: str,
    registry: SchemaRegistry,
    settings: Optional[Settings] = None,
) -> DataSession:
    settings = settings or default_settings()
    root = Path(data_dir)
    if not root.is_dir():
        raise DataIngestionError(f"Data directory not found: {data_dir}")

    session = DataSession(registry=registry)
    for path in sorted(p for p in root.iterdir() if p.is_file()):
        ingest_file(session, path, settings)

    session.ensure_all_tables()
    validate_dataset(session, (settings.impact_score_min, settings.impact_score_max))
    log.info(
        "Dataset loaded",
        extra={"data_dir": str(root), "files": {t: session.source_files.get(t, []) for t in session.available_tables()}},
    )
    return session
