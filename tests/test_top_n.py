from __future__ import annotations

import pandas as pd
import pytest

from donation_analytics.analysis.aggregation import TOTAL_COLUMN
from donation_analytics.analysis.top_n import TOP_N_COLUMNS, select_top_n, top_assignments_by_donor_type


def test_top_five_on_sample_dataset(sample_session) -> None:  # type: ignore[no-untyped-def]
    out = top_assignments_by_donor_type(sample_session)

    assert list(out.columns) == TOP_N_COLUMNS
    assert out.values.tolist() == [
        ["Solar Microgrids", "West", "Corporate", 15000.0],
        ["Mobile Clinics", "West", "Corporate", 12000.5],
        ["Flood Relief", "North", "Organization", 10500.75],
        ["Clean Water Wells", "East", "Organization", 5000.0],
        ["Clean Water Wells", "East", "Corporate", 4999.99],
    ]


def test_output_is_non_increasing_and_capped(sample_session) -> None:  # type: ignore[no-untyped-def]
    out = top_assignments_by_donor_type(sample_session, n=5)
    totals = out[TOTAL_COLUMN].tolist()

    assert len(out) <= 5
    assert totals == sorted(totals, reverse=True)


def test_ranking_is_global_not_per_donor_type(sample_session) -> None:  # type: ignore[no-untyped-def]
    out = top_assignments_by_donor_type(sample_session, n=3)

    assert out["donor_type"].tolist() == ["Corporate", "Corporate", "Organization"]


def test_ties_break_on_assignment_id_then_donor_type() -> None:
    aggregated = pd.DataFrame(
        [
            (3, "C", "East", "Individual", 100.0),
            (1, "A", "West", "Organization", 100.0),
            (1, "A", "West", "Corporate", 100.0),
            (2, "B", "East", "Individual", 250.0),
        ],
        columns=["assignment_id", "assignment_name", "region", "donor_type", TOTAL_COLUMN],
    )

    out = select_top_n(aggregated, n=3)

    assert out[["assignment_name", "donor_type"]].values.tolist() == [
        ["B", "Individual"],
        ["A", "Corporate"],
        ["A", "Organization"],
    ]


def test_fewer_groups_than_n(build_session) -> None:  # type: ignore[no-untyped-def]
    session = build_session(
        assignments=[(1, "Wells", "East", 9.0)],
        donations=[(1, 1, 1, 10.0), (2, 2, 1, 20.0)],
    )

    out = top_assignments_by_donor_type(session)

    assert out["donor_type"].tolist() == ["Organization", "Individual"]


def test_empty_input_gives_empty_result(build_session) -> None:  # type: ignore[no-untyped-def]
    session = build_session(assignments=[], donations=[], donors=[])

    out = top_assignments_by_donor_type(session)

    assert out.empty
    assert list(out.columns) == TOP_N_COLUMNS


def test_negative_n_is_rejected() -> None:
    with pytest.raises(ValueError):
        select_top_n(pd.DataFrame(columns=["assignment_id", "donor_type", TOTAL_COLUMN]), n=-1)
