from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd

from donation_analytics.data.session import DataSession
from donation_analytics.exceptions.errors import DataIntegrityError
from donation_analytics.logging.logger import get_logger

log = get_logger("data.validation")

_MAX_REPORTED_IDS = 5

# Upper bound per donation; keeps totals inside DECIMAL(38, 10) on the SQL side.
MAX_DONATION_AMOUNT = 1e15


def _sample(values: Sequence) -> str:
    shown = [str(v) for v in list(values)[:_MAX_REPORTED_IDS]]
    more = len(values) - len(shown)
    return ", ".join(shown) + (f" (+{more} more)" if more > 0 else "")


def check_primary_keys(session: DataSession) -> None:
    for t in session.available_tables():
        spec = session.registry.get_table(t)
        if not spec.primary_key:
            continue
        df = session.get_table(t)
        keys = df[spec.primary_key]
        if keys.isna().any(axis=None):
            raise DataIntegrityError(f"Null primary key value(s) in '{t}'")
        dup = keys[keys.duplicated()]
        if len(dup):
            raise DataIntegrityError(
                f"Duplicate primary key(s) in '{t}': {_sample(dup.astype(str).agg('/'.join, axis=1).tolist())}"
            )


def check_references(session: DataSession) -> None:
    """Every join key on the referencing side must exist on the referenced side."""
    joins = [j for t in session.available_tables() for j in session.registry.joins_from(t)]
    for j in joins:
        if not session.has_table(j.right_table):
            continue
        left = session.get_table(j.left_table)
        right = session.get_table(j.right_table)
        lk = left[j.left_keys]
        if lk.isna().any(axis=None):
            raise DataIntegrityError(f"Null reference in '{j.left_table}.{', '.join(j.left_keys)}'")

        known = set(right[j.right_keys].itertuples(index=False, name=None))
        missing: List[Tuple] = [k for k in lk.itertuples(index=False, name=None) if k not in known]
        if missing:
            raise DataIntegrityError(
                f"{len(missing)} row(s) in '{j.left_table}' reference unknown "
                f"'{j.right_table}' key(s): {_sample([k[0] if len(k) == 1 else k for k in missing])}"
            )


def check_amounts(session: DataSession) -> None:
    if not session.has_table("donations"):
        return
    amount = session.get_table("donations")["amount"]
    if amount.isna().any():
        raise DataIntegrityError("Donation amount is missing for some rows")
    non_finite = amount[~np.isfinite(amount)]
    if len(non_finite):
        raise DataIntegrityError(f"Non-finite donation amount(s): {_sample(non_finite.tolist())}")
    negative = amount[amount < 0]
    if len(negative):
        raise DataIntegrityError(f"Negative donation amount(s): {_sample(negative.tolist())}")
    too_large = amount[amount >= MAX_DONATION_AMOUNT]
    if len(too_large):
        raise DataIntegrityError(
            f"Donation amount(s) at or above {MAX_DONATION_AMOUNT:g}: {_sample(too_large.tolist())}"
        )


def check_impact_scores(session: DataSession, low: float, high: float) -> None:
    if not session.has_table("assignments"):
        return
    score = session.get_table("assignments")["impact_score"]
    if score.isna().any():
        raise DataIntegrityError("Impact score is missing for some assignments")
    non_finite = score[~np.isfinite(score)]
    if len(non_finite):
        raise DataIntegrityError(f"Non-finite impact score(s): {_sample(non_finite.tolist())}")
    out_of_range = score[(score < low) | (score > high)]
    if len(out_of_range):
        raise DataIntegrityError(
            f"Impact score(s) outside [{low}, {high}]: {_sample(out_of_range.tolist())}"
        )


def validate_dataset(session: DataSession, impact_bounds: Tuple[float, float] = (0.0, 10.0)) -> None:
    check_primary_keys(session)
    check_amounts(session)
    check_impact_scores(session, *impact_bounds)
    check_references(session)
    log.info(
        "Dataset validated",
        extra={t: len(session.get_table(t)) for t in session.available_tables()},
    )
