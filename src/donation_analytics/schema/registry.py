from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

import yaml

from donation_analytics.exceptions.errors import SchemaValidationError
from donation_analytics.logging.logger import get_logger

log = get_logger("schema.registry")

SUPPORTED_COLUMN_TYPES = {"int", "float", "string", "date"}


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    type: str
    description: str = ""
    required: bool = True


@dataclass(frozen=True)
class TableSpec:
    name: str
    file_patterns: List[str]
    description: str
    primary_key: List[str]
    columns: Dict[str, ColumnSpec]

    def column_types(self) -> Dict[str, str]:
        return {c: spec.type for c, spec in self.columns.items()}

    def required_columns(self) -> List[str]:
        return [c for c, spec in self.columns.items() if spec.required]


@dataclass(frozen=True)
class JoinRule:
    left_table: str
    right_table: str
    left_keys: List[str]
    right_keys: List[str]


class SchemaRegistry:
    def __init__(self, tables: Dict[str, TableSpec], joins: List[JoinRule], version: int = 1):
        self.version = version
        self.tables = tables
        self.joins = joins

    @staticmethod
    def load(path: str = "schemas/schema_registry.yaml") -> "SchemaRegistry":
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"Schema registry not found: {p}")
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        return SchemaRegistry.from_dict(raw)

    @staticmethod
    def from_dict(raw: Dict) -> "SchemaRegistry":
        version = int(raw.get("version", 1))

        tables: Dict[str, TableSpec] = {}
        for tname, tval in (raw.get("tables") or {}).items():
            cols: Dict[str, ColumnSpec] = {}
            for cname, cval in (tval.get("columns") or {}).items():
                cval = cval or {}
                cols[cname] = ColumnSpec(
                    name=cname,
                    type=str(cval.get("type", "string")),
                    description=str(cval.get("description", "")),
                    required=bool(cval.get("required", True)),
                )

            patterns = tval.get("file_patterns", []) or []
            if isinstance(patterns, str):
                patterns = [patterns]

            tables[tname] = TableSpec(
                name=tname,
                file_patterns=[str(p) for p in patterns],
                description=str(tval.get("description", "")),
                primary_key=list(tval.get("primary_key", [])),
                columns=cols,
            )

        joins: List[JoinRule] = []
        for j in raw.get("joins", []) or []:
            joins.append(
                JoinRule(
                    left_table=j["left_table"],
                    right_table=j["right_table"],
                    left_keys=list(j["left_keys"]),
                    right_keys=list(j["right_keys"]),
                )
            )

        reg = SchemaRegistry(tables=tables, joins=joins, version=version)
        reg.validate()
        return reg

    def validate(self) -> None:
        if not self.tables:
            raise SchemaValidationError("Schema registry has no tables.")
        for t in self.tables.values():
            for c in t.columns.values():
                if c.type not in SUPPORTED_COLUMN_TYPES:
                    raise SchemaValidationError(f"Unsupported type '{c.type}' for {t.name}.{c.name}")
            for k in t.primary_key:
                if k not in t.columns:
                    raise SchemaValidationError(f"Primary key column missing in {t.name}: {k}")
        for j in self.joins:
            if j.left_table not in self.tables or j.right_table not in self.tables:
                raise SchemaValidationError(f"Join references unknown table: {j}")
            if len(j.left_keys) != len(j.right_keys):
                raise SchemaValidationError(f"Join key count mismatch: {j}")
            lt = self.tables[j.left_table]
            rt = self.tables[j.right_table]
            for k in j.left_keys:
                if k not in lt.columns:
                    raise SchemaValidationError(f"Join key missing in {lt.name}: {k}")
            for k in j.right_keys:
                if k not in rt.columns:
                    raise SchemaValidationError(f"Join key missing in {rt.name}: {k}")
        log.info("Schema registry validated", extra={"tables": len(self.tables), "joins": len(self.joins)})

    def list_tables(self) -> List[str]:
        return sorted(self.tables.keys())

    def get_table(self, table: str) -> TableSpec:
        self._ensure_table(table)
        return self.tables[table]

    def joins_from(self, table: str) -> List[JoinRule]:
        """Join rules whose left side is `table` (the referencing side)."""
        self._ensure_table(table)
        return [j for j in self.joins if j.left_table == table]

    def _ensure_table(self, table: str) -> None:
        if table not in self.tables:
            raise SchemaValidationError(f"Unknown table: {table}")
