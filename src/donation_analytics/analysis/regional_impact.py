from __future__ import annotations

import pandas as pd

from donation_analytics.data.session import DataSession
from donation_analytics.logging.logger import get_logger

log = get_logger("analysis.regional_impact")

COUNT_COLUMN = "num_total_donations"
REGIONAL_COLUMNS = ["assignment_name", "region", "impact_score", COUNT_COLUMN]


def donation_counts(session: DataSession) -> pd.DataFrame:
    donations = session.get_table("donations")
    return donations.groupby("assignment_id").size().rename(COUNT_COLUMN).reset_index()


def rank_regional_impact(session: DataSession) -> pd.DataFrame:
    """Highest-impact assignment per region among assignments with at least one donation.

    Equal impact scores within a region resolve to the lowest assignment_id.
    Rows come back ordered by region.
    """
    assignments = session.get_table("assignments")[["assignment_id", "assignment_name", "region", "impact_score"]]
    counts = donation_counts(session)

    qualified = assignments.merge(counts, on="assignment_id", how="inner")
    qualified = qualified[qualified[COUNT_COLUMN] > 0]
    if qualified.empty:
        log.info("No assignments with donations")
        return pd.DataFrame({c: pd.Series(dtype=object) for c in REGIONAL_COLUMNS})

    best = (
        qualified.sort_values(
            ["region", "impact_score", "assignment_id"],
            ascending=[True, False, True],
            kind="mergesort",
            na_position="last",
        )
        .drop_duplicates(subset="region", keep="first")
    )
    out = best[REGIONAL_COLUMNS].reset_index(drop=True)
    out[COUNT_COLUMN] = out[COUNT_COLUMN].astype("int64")

    log.info("Ranked regional impact", extra={"qualified": len(qualified), "regions": len(out)})
    return out
