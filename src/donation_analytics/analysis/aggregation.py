"""Per-(assignment, donor type) donation totals.

Each amount is taken to ten decimal places (half-up), summed exactly, and the
total is rounded once, half-up, to two places.
The SQL formulations in ``donation_analytics.db.queries`` follow the same policy.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any

import pandas as pd

from donation_analytics.data.session import DataSession
from donation_analytics.logging.logger import get_logger

log = get_logger("analysis.aggregation")

TOTAL_COLUMN = "rounded_total_donation_amount"
GROUP_COLUMNS = ["assignment_id", "assignment_name", "region", "donor_type"]
AGGREGATED_COLUMNS = GROUP_COLUMNS + [TOTAL_COLUMN]

_CENT = Decimal("0.01")
# Matches the DECIMAL(38, 10) cast applied to amounts in SQL.
AMOUNT_QUANTUM = Decimal("1e-10")
# 38 significant digits, the width of DECIMAL(38, 10).
_PRECISION = 38


def to_decimal(value: Any) -> Decimal:
    # str() of a float is its shortest round-trip text, so 10.005 stays 10.005.
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(str(value)).quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)


def round_half_up(value: Decimal, quantum: Decimal = _CENT) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return value.quantize(quantum, rounding=ROUND_HALF_UP)


def _exact_sum(values: pd.Series) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return sum(values, Decimal("0"))


def aggregate_donations_by_donor_type(session: DataSession) -> pd.DataFrame:
    donations = session.get_table("donations")[["assignment_id", "donor_id", "amount"]]
    donors = session.get_table("donors")[["donor_id", "donor_type"]]
    assignments = session.get_table("assignments")[["assignment_id", "assignment_name", "region"]]

    merged = donations.merge(donors, on="donor_id", how="inner").merge(
        assignments, on="assignment_id", how="inner"
    )
    if merged.empty:
        log.info("No donations to aggregate")
        return pd.DataFrame({c: pd.Series(dtype=object) for c in AGGREGATED_COLUMNS})

    merged = merged.assign(_exact=merged["amount"].map(to_decimal))
    totals = (
        merged.groupby(GROUP_COLUMNS, sort=True, dropna=False)["_exact"]
        .agg(_exact_sum)
        .reset_index()
    )
    totals[TOTAL_COLUMN] = totals["_exact"].map(lambda d: float(round_half_up(d)))
    out = totals[AGGREGATED_COLUMNS].reset_index(drop=True)

    log.info("Aggregated donations", extra={"donations": len(merged), "groups": len(out)})
    return out
