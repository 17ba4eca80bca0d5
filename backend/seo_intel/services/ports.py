"""Narrow contracts to the collaborators the core does not own.

Storage, progress reporting, and the AI completion service are all supplied
by the host application. The core only ever talks to these protocols.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from seo_intel.models.analysis import AnalysisResult
from seo_intel.models.crawl import ProgressEvent

logger = logging.getLogger(__name__)


class Storage(Protocol):
    """Persistence for completed analyses and usage accounting."""

    async def save_analysis(self, record: AnalysisResult) -> str: ...

    async def increment_usage(self, user_id: str, page_count: int) -> None: ...

    async def load_history(self, user_id: str) -> list[AnalysisResult]: ...

    async def delete_analysis(self, analysis_id: str) -> None: ...


class ProgressSink(Protocol):
    """Fire-and-forget receiver of crawl / analysis progress."""

    def emit(self, event: ProgressEvent) -> None: ...


class TextCompletionService(Protocol):
    """Submits one prompt and returns the raw (expected JSON) response text.

    Implementations raise ``CompletionServiceError`` on failure.
    """

    async def complete(
        self, system_prompt: str, user_prompt: str, response_schema_hint: str
    ) -> str: ...


def emit_progress(sink: Optional[ProgressSink], event: ProgressEvent) -> None:
    """Emit *event* if a sink is registered. Sink failures never propagate."""
    if sink is None:
        return
    try:
        sink.emit(event)
    except Exception as e:
        logger.warning(f"Progress sink failed: {e}")
