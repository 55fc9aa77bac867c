from __future__ import annotations

import pandas as pd

from donation_analytics.analysis.aggregation import TOTAL_COLUMN, aggregate_donations_by_donor_type
from donation_analytics.data.session import DataSession
from donation_analytics.logging.logger import get_logger

log = get_logger("analysis.top_n")

DEFAULT_TOP_N = 5
TOP_N_COLUMNS = ["assignment_name", "region", "donor_type", TOTAL_COLUMN]


def select_top_n(aggregated: pd.DataFrame, n: int = DEFAULT_TOP_N) -> pd.DataFrame:
    """Global ranking across donor types and regions.

    Ties on the total fall back to assignment_id, then donor_type, both ascending.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    ranked = aggregated.sort_values(
        [TOTAL_COLUMN, "assignment_id", "donor_type"],
        ascending=[False, True, True],
        kind="mergesort",
        na_position="last",
    )
    return ranked.head(n)[TOP_N_COLUMNS].reset_index(drop=True)


def top_assignments_by_donor_type(session: DataSession, n: int = DEFAULT_TOP_N) -> pd.DataFrame:
    out = select_top_n(aggregate_donations_by_donor_type(session), n)
    log.info("Selected top assignments", extra={"n": n, "rows": len(out)})
    return out
