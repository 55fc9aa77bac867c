from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd

from donation_analytics.analysis.comparison import FormulationComparison, compare_formulations
from donation_analytics.analysis.regional_impact import rank_regional_impact
from donation_analytics.analysis.top_n import top_assignments_by_donor_type
from donation_analytics.config.settings import Settings, default_settings
from donation_analytics.data.session import DataSession
from donation_analytics.db.engine import DuckDBExecutor
from donation_analytics.db.queries import (
    REGIONAL_IMPACT,
    REGIONAL_IMPACT_WINDOW,
    TOP_DONATIONS,
    TOP_DONATIONS_JOIN_GROUP,
)
from donation_analytics.logging.logger import get_logger

log = get_logger("analysis.report")


@dataclass(frozen=True)
class AnalysisReport:
    engine: str
    top_donations: pd.DataFrame
    regional_impact: pd.DataFrame
    top_donations_comparison: Optional[FormulationComparison] = None
    regional_impact_comparison: Optional[FormulationComparison] = None

    @property
    def consistent(self) -> bool:
        comparisons = [c for c in (self.top_donations_comparison, self.regional_impact_comparison) if c]
        return all(c.consistent for c in comparisons)


def run_analysis(session: DataSession, settings: Optional[Settings] = None, compare: bool = True) -> AnalysisReport:
    settings = settings or default_settings()

    if settings.engine == "duckdb":
        executor = DuckDBExecutor(session)
        top = executor.run(TOP_DONATIONS_JOIN_GROUP, settings.top_n)
        regional = executor.run(REGIONAL_IMPACT_WINDOW)
    elif settings.engine == "pandas":
        top = top_assignments_by_donor_type(session, settings.top_n)
        regional = rank_regional_impact(session)
    else:
        raise ValueError(f"Unsupported analysis engine: {settings.engine}")

    top_cmp = compare_formulations(session, TOP_DONATIONS, settings.top_n) if compare else None
    reg_cmp = compare_formulations(session, REGIONAL_IMPACT) if compare else None

    report = AnalysisReport(
        engine=settings.engine,
        top_donations=top,
        regional_impact=regional,
        top_donations_comparison=top_cmp,
        regional_impact_comparison=reg_cmp,
    )
    log.info(
        "Analysis finished",
        extra={
            "engine": settings.engine,
            "top_rows": len(top),
            "regions": len(regional),
            "consistent": report.consistent,
        },
    )
    return report
