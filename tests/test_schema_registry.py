from __future__ import annotations

import pytest

from donation_analytics.exceptions.errors import SchemaValidationError
from donation_analytics.schema.registry import SchemaRegistry


def _raw_registry() -> dict:
    return {
        "tables": {
            "donations": {
                "file_patterns": ["donations*.csv"],
                "primary_key": ["donation_id"],
                "columns": {
                    "donation_id": {"type": "int"},
                    "assignment_id": {"type": "int"},
                    "amount": {"type": "float"},
                },
            },
            "assignments": {
                "file_patterns": "assignments*.csv",
                "primary_key": ["assignment_id"],
                "columns": {
                    "assignment_id": {"type": "int"},
                    "region": {"type": "string"},
                    "duration": {"type": "string", "required": False},
                },
            },
        },
        "joins": [
            {
                "left_table": "donations",
                "right_table": "assignments",
                "left_keys": ["assignment_id"],
                "right_keys": ["assignment_id"],
            }
        ],
    }


def test_shipped_registry_declares_the_three_relations(registry) -> None:  # type: ignore[no-untyped-def]
    assert registry.list_tables() == ["assignments", "donations", "donors"]
    assert registry.get_table("donations").primary_key == ["donation_id"]
    assert {(j.left_table, j.right_table) for j in registry.joins} == {
        ("donations", "assignments"),
        ("donations", "donors"),
    }
    assert "duration" not in registry.get_table("assignments").required_columns()
    assert "impact_score" in registry.get_table("assignments").required_columns()


def test_from_dict_accepts_single_pattern_string() -> None:
    reg = SchemaRegistry.from_dict(_raw_registry())

    assert reg.get_table("assignments").file_patterns == ["assignments*.csv"]
    assert reg.joins_from("donations")[0].right_table == "assignments"
    assert reg.joins_from("assignments") == []


def test_validate_rejects_join_on_unknown_column() -> None:
    raw = _raw_registry()
    raw["joins"][0]["right_keys"] = ["id"]

    with pytest.raises(SchemaValidationError):
        SchemaRegistry.from_dict(raw)


def test_validate_rejects_unknown_column_type() -> None:
    raw = _raw_registry()
    raw["tables"]["donations"]["columns"]["amount"]["type"] = "money"

    with pytest.raises(SchemaValidationError):
        SchemaRegistry.from_dict(raw)


def test_unknown_table_lookup_raises() -> None:
    reg = SchemaRegistry.from_dict(_raw_registry())

    with pytest.raises(SchemaValidationError):
        reg.get_table("donors")


def test_load_missing_file_raises(tmp_path) -> None:  # type: ignore[no-untyped-def]
    with pytest.raises(FileNotFoundError):
        SchemaRegistry.load(str(tmp_path / "missing.yaml"))
