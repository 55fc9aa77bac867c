from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List
import pandas as pd

from donation_analytics.exceptions.errors import SchemaValidationError
from donation_analytics.preprocessing.cleaning import empty_frame
from donation_analytics.schema.registry import SchemaRegistry
from donation_analytics.logging.logger import get_logger

log = get_logger("data.session")


@dataclass
class DataSession:
    """In-memory snapshot of the assignments / donations / donors tables.

    Key points:
      - Table names are matched case-insensitively against the registry.
      - Several files can feed one logical table; rows are appended per source file
        and re-registering the same file name replaces its rows.
      - Analysis code only reads from the session; nothing downstream mutates the frames.
    """

    registry: SchemaRegistry
    # Aggregated tables (logical table -> combined dataframe)
    tables: Dict[str, pd.DataFrame] = field(default_factory=dict)
    file_tables: Dict[str, Dict[str, pd.DataFrame]] = field(default_factory=dict)
    source_files: Dict[str, List[str]] = field(default_factory=dict)

    def canonical_table_name(self, name: str) -> str:
        n = (name or "").strip()
        for t in self.registry.list_tables():
            if t.lower() == n.lower():
                return t
        raise SchemaValidationError(f"Unknown table: {name}")

    def register_table(self, table_name: str, df: pd.DataFrame, source_filename: str) -> None:
        t = self.canonical_table_name(table_name)

        self.file_tables.setdefault(t, {})[source_filename] = df
        self.source_files[t] = list(self.file_tables[t].keys())

        parts = list(self.file_tables[t].values())
        self.tables[t] = pd.concat(parts, ignore_index=True) if len(parts) > 1 else parts[0]

        log.info(
            "Registered table",
            extra={
                "table": t,
                "file": source_filename,
                "files_for_table": len(self.source_files.get(t, [])),
                "rows_total": len(self.tables[t]),
            },
        )

    def ensure_all_tables(self) -> None:
        """Register an empty, correctly typed frame for every table that has no data."""
        for t in self.registry.list_tables():
            if t not in self.tables:
                log.warning("No data for table; using empty frame", extra={"table": t})
                self.tables[t] = empty_frame(self.registry.get_table(t).column_types())
                self.source_files[t] = []

    def has_table(self, table_name: str) -> bool:
        t = self.canonical_table_name(table_name)
        return t in self.tables

    def get_table(self, table_name: str) -> pd.DataFrame:
        t = self.canonical_table_name(table_name)
        if t not in self.tables:
            raise SchemaValidationError(f"Table '{t}' has not been loaded")
        return self.tables[t]

    def available_tables(self) -> List[str]:
        return sorted(self.tables.keys())
