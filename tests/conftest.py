from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, Optional

import pandas as pd
import pytest

from donation_analytics.data.loader import load_dataset, session_from_frames
from donation_analytics.data.session import DataSession
from donation_analytics.schema.registry import SchemaRegistry

REPO_ROOT = Path(__file__).resolve().parents[1]
SAMPLE_DIR = REPO_ROOT / "data" / "sample"

ASSIGNMENT_COLUMNS = ["assignment_id", "assignment_name", "region", "impact_score"]
DONATION_COLUMNS = ["donation_id", "donor_id", "assignment_id", "amount"]
DONOR_COLUMNS = ["donor_id", "donor_type"]

DEFAULT_DONORS = [(1, "Individual"), (2, "Organization"), (3, "Corporate")]


@pytest.fixture
def registry() -> SchemaRegistry:
    return SchemaRegistry.load(str(REPO_ROOT / "schemas" / "schema_registry.yaml"))


@pytest.fixture
def sample_session(registry: SchemaRegistry) -> DataSession:
    return load_dataset(str(SAMPLE_DIR), registry)


@pytest.fixture
def build_session(registry: SchemaRegistry) -> Callable[..., DataSession]:
    def _build(
        assignments: Iterable[tuple],
        donations: Iterable[tuple],
        donors: Optional[Iterable[tuple]] = None,
    ) -> DataSession:
        frames = {
            "assignments": pd.DataFrame(list(assignments), columns=ASSIGNMENT_COLUMNS),
            "donations": pd.DataFrame(list(donations), columns=DONATION_COLUMNS),
            "donors": pd.DataFrame(list(DEFAULT_DONORS if donors is None else donors), columns=DONOR_COLUMNS),
        }
        return session_from_frames(registry, frames)

    return _build
