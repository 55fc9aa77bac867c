from __future__ import annotations

from dataclasses import dataclass
from string import Template
from typing import Dict, Iterable, Optional

import duckdb
import pandas as pd

from donation_analytics.data.session import DataSession
from donation_analytics.db.queries import SqlFormulation
from donation_analytics.exceptions.errors import QueryExecutionError
from donation_analytics.logging.logger import get_logger

log = get_logger("db.engine")

REQUIRED_TABLES = ("assignments", "donations", "donors")


def _to_duckdb_frame(df: pd.DataFrame) -> pd.DataFrame:
    # Pandas "string" extension columns are handed over as plain object columns.
    string_cols = [c for c in df.columns if isinstance(df[c].dtype, pd.StringDtype)]
    if not string_cols:
        return df
    out = df.copy()
    for c in string_cols:
        out[c] = out[c].astype(object).where(out[c].notna(), None)
    return out


@dataclass
class DuckDBExecutor:
    """Runs SQL against the session tables on a throwaway in-memory DuckDB connection."""

    session: DataSession
    tables: Iterable[str] = REQUIRED_TABLES

    def execute(self, sql: str, params: Optional[Dict[str, object]] = None) -> pd.DataFrame:
        for t in self.tables:
            if not self.session.has_table(t):
                raise QueryExecutionError(f"Missing table data for '{t}'")

        rendered = Template(sql).substitute(**{k: int(v) for k, v in (params or {}).items()})
        log.debug("Executing SQL", extra={"sql": rendered[:500] + ("..." if len(rendered) > 500 else "")})

        con = duckdb.connect(database=":memory:")
        try:
            for t in self.tables:
                con.register(t, _to_duckdb_frame(self.session.get_table(t)))
            return con.execute(rendered).df()
        except duckdb.Error as e:
            raise QueryExecutionError(f"DuckDB execution failed: {e}") from e
        finally:
            con.close()

    def run(self, formulation: SqlFormulation, top_n: int = 5) -> pd.DataFrame:
        params = {"top_n": top_n} if "$top_n" in formulation.sql else None
        if top_n < 0:
            raise ValueError(f"top_n must be non-negative, got {top_n}")
        df = self.execute(formulation.sql, params)
        log.info(
            "Formulation executed",
            extra={"task": formulation.task, "formulation": formulation.name, "rows": len(df)},
        )
        return df
