from __future__ import annotations
from pathlib import Path
from typing import Optional
import fnmatch

from donation_analytics.schema.registry import SchemaRegistry
from donation_analytics.logging.logger import get_logger

log = get_logger("ingestion.mapper")

def map_file_to_table(registry: SchemaRegistry, filename: str) -> Optional[str]:
    name = Path(filename).name.lower()
    for tname in registry.list_tables():
        spec = registry.get_table(tname)
        for pat in spec.file_patterns:
            if fnmatch.fnmatch(name, pat.lower()):
                log.info("Mapped file to table", extra={"file": filename, "table": tname, "pattern": pat})
                return tname
    return None
