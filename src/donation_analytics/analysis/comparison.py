from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

import pandas as pd

from donation_analytics.analysis.regional_impact import rank_regional_impact
from donation_analytics.analysis.top_n import DEFAULT_TOP_N, top_assignments_by_donor_type
from donation_analytics.data.session import DataSession
from donation_analytics.db.engine import DuckDBExecutor
from donation_analytics.db.queries import REGIONAL_IMPACT, TOP_DONATIONS, formulations_for
from donation_analytics.logging.logger import get_logger

log = get_logger("analysis.comparison")

PANDAS_FORMULATION = "pandas"


@dataclass
class FormulationComparison:
    task: str
    reference: str
    results: Dict[str, pd.DataFrame] = field(default_factory=dict)
    timings: Dict[str, float] = field(default_factory=dict)
    mismatches: List[str] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not self.mismatches

    def fastest(self) -> Optional[str]:
        if not self.timings:
            return None
        return min(self.timings, key=self.timings.get)

    def timings_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [{"formulation": name, "seconds": secs} for name, secs in self.timings.items()]
        )


def _normalize_cell(value):
    if value is None or value is pd.NA:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if hasattr(value, "item"):
        return value.item()
    return value


def frame_rows(df: pd.DataFrame) -> Tuple[Tuple[str, ...], List[Tuple]]:
    """Columns plus row tuples with dtype differences (string vs object, NA vs NaN) removed."""
    rows = [tuple(_normalize_cell(v) for v in row) for row in df.astype(object).itertuples(index=False, name=None)]
    return tuple(df.columns), rows


def frames_equal(left: pd.DataFrame, right: pd.DataFrame) -> bool:
    return frame_rows(left) == frame_rows(right)


def _timed(fn: Callable[[], pd.DataFrame]) -> Tuple[pd.DataFrame, float]:
    start = time.perf_counter()
    out = fn()
    return out, time.perf_counter() - start


def _pandas_runner(session: DataSession, task: str, top_n: int) -> Callable[[], pd.DataFrame]:
    if task == TOP_DONATIONS:
        return lambda: top_assignments_by_donor_type(session, top_n)
    if task == REGIONAL_IMPACT:
        return lambda: rank_regional_impact(session)
    raise KeyError(f"Unknown task: {task}")


def compare_formulations(session: DataSession, task: str, top_n: int = DEFAULT_TOP_N) -> FormulationComparison:
    """Run the pandas computation and every SQL formulation of `task` and cross-check them."""
    comparison = FormulationComparison(task=task, reference=PANDAS_FORMULATION)

    reference, secs = _timed(_pandas_runner(session, task, top_n))
    comparison.results[PANDAS_FORMULATION] = reference
    comparison.timings[PANDAS_FORMULATION] = secs

    executor = DuckDBExecutor(session)
    for f in formulations_for(task):
        out, secs = _timed(lambda f=f: executor.run(f, top_n))
        comparison.results[f.name] = out
        comparison.timings[f.name] = secs
        if not frames_equal(reference, out):
            comparison.mismatches.append(f.name)
            log.warning(
                "Formulation disagrees with reference",
                extra={"task": task, "formulation": f.name, "reference": PANDAS_FORMULATION},
            )

    log.info(
        "Compared formulations",
        extra={
            "task": task,
            "consistent": comparison.consistent,
            "timings": {k: round(v, 6) for k, v in comparison.timings.items()},
        },
    )
    return comparison
