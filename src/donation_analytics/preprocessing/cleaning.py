from __future__ import annotations
from typing import Dict, Iterable
import pandas as pd

from donation_analytics.exceptions.errors import DataIntegrityError, SchemaValidationError
from donation_analytics.logging.logger import get_logger

log = get_logger("preprocessing.cleaning")

def standardize_columns(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    out.columns = [str(c).strip().lower() for c in out.columns]
    return out

def empty_frame(column_types: Dict[str, str]) -> pd.DataFrame:
    """Zero-row frame with the dtypes coerce_types would produce."""
    dtypes = {"int": "Int64", "float": "float64", "date": "datetime64[ns]"}
    return pd.DataFrame({c: pd.Series(dtype=dtypes.get(t, "string")) for c, t in column_types.items()})

def coerce_types(
    df: pd.DataFrame,
    column_types: Dict[str, str],
    required: Iterable[str] = (),
    table: str = "",
) -> pd.DataFrame:
    """Convert columns to their declared types.

    Values that cannot be parsed as numbers are a data-integrity problem and
    raise instead of being silently nulled. Missing optional columns are skipped.
    """
    out = df.copy()
    required = set(required)
    for col, typ in column_types.items():
        if col not in out.columns:
            if col in required:
                raise SchemaValidationError(f"Missing column '{col}' in table '{table}'")
            log.warning("Missing optional column", extra={"table": table, "column": col, "expected_type": typ})
            continue

        raw = out[col]
        if typ in ("int", "float"):
            text = raw.astype(object).map(lambda v: v.strip() or None if isinstance(v, str) else v)
            text = text.where(text.notna(), None)
            converted = pd.to_numeric(text, errors="coerce").astype("float64")
            bad = converted.isna() & text.notna()
            if bad.any():
                raise DataIntegrityError(
                    f"{int(bad.sum())} non-numeric value(s) in '{table}.{col}' "
                    f"(first: {text[bad].iloc[0]!r})"
                )
            if typ == "int":
                fractional = converted.notna() & (converted != converted.round())
                if fractional.any():
                    raise DataIntegrityError(f"Non-integer value(s) in '{table}.{col}'")
                out[col] = converted.astype("Int64")
            else:
                out[col] = converted.astype("float64")
        elif typ == "date":
            out[col] = pd.to_datetime(raw, errors="coerce")
        else:
            out[col] = raw.astype("string").str.strip()
        log.debug("Type coerced", extra={"table": table, "column": col, "type": typ})
    return out
