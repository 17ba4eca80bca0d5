from seo_intel.services.pipeline import AnalysisPipeline, create_pipeline
from seo_intel.services.ports import (
    ProgressSink,
    Storage,
    TextCompletionService,
    emit_progress,
)

__all__ = [
    # Pipeline
    "AnalysisPipeline",
    "create_pipeline",
    # Ports
    "ProgressSink",
    "Storage",
    "TextCompletionService",
    "emit_progress",
]
