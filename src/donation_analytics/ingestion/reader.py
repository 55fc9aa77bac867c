from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional
from pathlib import Path
import pandas as pd

from donation_analytics.logging.logger import get_logger
from donation_analytics.exceptions.errors import DataIngestionError

log = get_logger("ingestion.reader")

@dataclass(frozen=True)
class IngestionResult:
    df: pd.DataFrame
    encoding_used: str
    rows_read: int
    bad_lines_skipped: bool

def read_table_file(
    file_path: str,
    delimiter: str,
    fallback_encodings: List[str],
    skip_bad_lines: bool = False,
) -> IngestionResult:
    p = Path(file_path)
    if not p.exists():
        raise DataIngestionError(f"File not found: {file_path}")

    last_err: Optional[Exception] = None
    for enc in fallback_encodings:
        try:
            log.info("Reading file", extra={"source_file": p.name, "encoding": enc})
            # Everything is read as text; cleaning owns the type conversion.
            df = pd.read_csv(
                p,
                sep=delimiter,
                encoding=enc,
                dtype=str,
                on_bad_lines="skip" if skip_bad_lines else "error",
            )
            return IngestionResult(df=df, encoding_used=enc, rows_read=len(df), bad_lines_skipped=skip_bad_lines)
        except UnicodeDecodeError as e:
            last_err = e
            log.error("Encoding error", extra={"source_file": p.name, "encoding": enc, "error": str(e)})
        except pd.errors.EmptyDataError as e:
            raise DataIngestionError(f"File is empty: {p.name}") from e
        except pd.errors.ParserError as e:
            raise DataIngestionError(f"Malformed rows in {p.name}: {e}") from e

    raise DataIngestionError(f"Failed to decode {p.name} with encodings: {fallback_encodings}") from last_err
