from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from donation_analytics.analysis.report import AnalysisReport, run_analysis
from donation_analytics.config.settings import Settings, load_settings
from donation_analytics.data.loader import load_dataset
from donation_analytics.data.session import DataSession
from donation_analytics.export.exporter import ExportPaths, export_analysis
from donation_analytics.logging.logger import get_logger, init_logging
from donation_analytics.schema.registry import SchemaRegistry

log = get_logger("pipeline")


@dataclass(frozen=True)
class PipelineResult:
    session: DataSession
    report: AnalysisReport
    exports: Dict[str, ExportPaths]


def bootstrap(settings: Optional[Settings] = None) -> Tuple[Settings, SchemaRegistry]:
    settings = settings or load_settings()
    init_logging(settings.log_level, settings.log_file)
    registry = SchemaRegistry.load(settings.schema_registry_path)
    return settings, registry


def run_pipeline(settings: Optional[Settings] = None, export: bool = True) -> PipelineResult:
    """Load the snapshot, answer both questions and (optionally) write the result tables."""
    settings, registry = bootstrap(settings)
    session = load_dataset(settings.data_dir, registry, settings)
    report = run_analysis(session, settings)
    if not report.consistent:
        log.warning("Formulations disagree; see comparison details in the report")
    exports = export_analysis(report, settings.export_dir) if export else {}
    log.info("Pipeline finished", extra={"engine": settings.engine, "exported": sorted(exports)})
    return PipelineResult(session=session, report=report, exports=exports)
