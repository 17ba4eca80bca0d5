"""
Analysis pipeline — crawl, extract, analyze, store.

1. Crawl the site (robots-aware, priority ordered)
2. Fetch the crawled URLs and extract PageRecords
3. Content duplication analysis (detector + optional AI enhancement)
4. Optional competitor crawl, gap analysis and metric comparison
5. Persist the result and record usage via the ``Storage`` port

Cancellation propagates as ``CrawlCancelledError`` and nothing is stored.
Storage failures propagate as ``StorageError``.
"""

import asyncio
import logging
import time
from typing import Optional

import anthropic

from seo_intel.config import Settings, get_settings
from seo_intel.errors import CrawlCancelledError, StorageError
from seo_intel.models.analysis import AnalysisRequest, AnalysisResult
from seo_intel.models.crawl import PageRecord, ProgressEvent
from seo_intel.services.competitive.gap_analyzer import GapThresholds, analyze_gaps
from seo_intel.services.competitive.insights import CompetitiveInsightGenerator
from seo_intel.services.content_analysis.ai_enhancer import EnhancerOptions
from seo_intel.services.content_analysis.completion import AnthropicCompletionService
from seo_intel.services.content_analysis.duplication import ContentDuplicationAnalyzer
from seo_intel.services.crawler.crawler import SiteCrawler
from seo_intel.services.crawler.page_fetcher import PageFetcher
from seo_intel.services.crawler.url_utils import url_host
from seo_intel.services.ports import ProgressSink, Storage, emit_progress

logger = logging.getLogger(__name__)


class _FailureTracker:
    """Forwards progress events and remembers the crawl failure count."""

    def __init__(self, sink: Optional[ProgressSink]) -> None:
        self.sink = sink
        self.failed_pages = 0

    def emit(self, event: ProgressEvent) -> None:
        self.failed_pages = max(self.failed_pages, event.failed_pages)
        emit_progress(self.sink, event)


class AnalysisPipeline:
    """End-to-end site analysis against injected collaborators."""

    def __init__(
        self,
        storage: Storage,
        *,
        crawler: Optional[SiteCrawler] = None,
        fetcher: Optional[PageFetcher] = None,
        duplication_analyzer: Optional[ContentDuplicationAnalyzer] = None,
        progress: Optional[ProgressSink] = None,
        gap_thresholds: Optional[GapThresholds] = None,
        insight_generator: Optional[CompetitiveInsightGenerator] = None,
    ) -> None:
        self.storage = storage
        self.crawler = crawler or SiteCrawler()
        self.fetcher = fetcher or PageFetcher()
        self.duplication_analyzer = duplication_analyzer or ContentDuplicationAnalyzer()
        self.progress = progress
        self.gap_thresholds = gap_thresholds
        self.insight_generator = insight_generator or CompetitiveInsightGenerator(
            thresholds=gap_thresholds
        )

    async def run(
        self, request: AnalysisRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> AnalysisResult:
        started = time.monotonic()
        domain = url_host(
            request.url
            if request.url.startswith(("http://", "https://"))
            else f"https://{request.url}"
        )
        logger.info(f"Starting analysis of {domain} for user {request.user_id}")

        urls, pages, failed = await self._crawl_and_extract(
            request.url, request, cancel_event
        )

        errors: list[str] = []
        if not pages:
            errors.append(f"No pages could be analyzed for {domain}")

        self._emit(len(urls), len(urls), "Analyzing content duplication")
        content_duplication = await self.duplication_analyzer.analyze(pages)

        competitor_domain = None
        gap_analysis = None
        competitive_comparison = None
        if request.competitor_url:
            competitor_domain = url_host(
                request.competitor_url
                if request.competitor_url.startswith(("http://", "https://"))
                else f"https://{request.competitor_url}"
            )
            self._emit(len(urls), len(urls), f"Crawling competitor {competitor_domain}")
            _, competitor_pages, _ = await self._crawl_and_extract(
                request.competitor_url, request, cancel_event
            )
            if competitor_pages:
                gap_analysis = analyze_gaps(pages, competitor_pages, self.gap_thresholds)
                competitive_comparison = await self.insight_generator.compare(
                    pages, competitor_pages, gap_analysis
                )
            else:
                errors.append(f"No competitor pages could be analyzed for {competitor_domain}")

        self._check_cancelled(cancel_event)

        record = AnalysisResult(
            domain=domain,
            user_id=request.user_id,
            crawled_urls=urls,
            pages=pages,
            failed_pages=failed,
            content_duplication=content_duplication,
            competitor_domain=competitor_domain,
            gap_analysis=gap_analysis,
            competitive_comparison=competitive_comparison,
            processing_time_ms=round((time.monotonic() - started) * 1000),
            errors=errors,
        )

        try:
            analysis_id = await self.storage.save_analysis(record)
            await self.storage.increment_usage(request.user_id, len(pages))
        except Exception as e:
            logger.error(f"Failed to store analysis for {domain}: {e}")
            raise StorageError(f"Failed to store analysis for {domain}: {e}") from e

        record.analysis_id = analysis_id
        self._emit(len(urls), len(urls), "Analysis complete")
        logger.info(
            f"Analysis {analysis_id} complete for {domain}: {len(pages)} pages in "
            f"{record.processing_time_ms}ms"
        )
        return record

    async def load_history(self, user_id: str) -> list[AnalysisResult]:
        try:
            return await self.storage.load_history(user_id)
        except Exception as e:
            raise StorageError(f"Failed to load history for {user_id}: {e}") from e

    async def delete_analysis(self, analysis_id: str) -> None:
        try:
            await self.storage.delete_analysis(analysis_id)
        except Exception as e:
            raise StorageError(f"Failed to delete analysis {analysis_id}: {e}") from e

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _crawl_and_extract(
        self,
        url: str,
        request: AnalysisRequest,
        cancel_event: Optional[asyncio.Event],
    ) -> tuple[list[str], list[PageRecord], int]:
        tracker = _FailureTracker(self.progress)
        urls = await self.crawler.crawl(
            url,
            max_pages=request.max_pages,
            delay_ms=request.delay_ms,
            follow_external_links=request.follow_external_links,
            cancel_event=cancel_event,
            on_progress=tracker,
            use_sitemap=request.use_sitemap,
        )
        self._check_cancelled(cancel_event)

        self._emit(len(urls), len(urls), f"Extracting signals from {len(urls)} pages")
        pages = await self.fetcher.fetch_pages(urls)
        self._check_cancelled(cancel_event)

        return urls, pages, tracker.failed_pages + (len(urls) - len(pages))

    def _emit(self, crawled: int, discovered: int, message: str) -> None:
        emit_progress(
            self.progress,
            ProgressEvent(
                pages_crawled=crawled, total_discovered=discovered, message=message
            ),
        )

    @staticmethod
    def _check_cancelled(cancel_event: Optional[asyncio.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise CrawlCancelledError()


def create_pipeline(
    storage: Storage,
    *,
    progress: Optional[ProgressSink] = None,
    settings: Optional[Settings] = None,
) -> AnalysisPipeline:
    """Wire a pipeline from settings.

    AI enhancement and AI competitive insights are enabled only when
    ``ai_enabled`` is set and an Anthropic API key is configured.
    """
    settings = settings or get_settings()

    completion = None
    if settings.ai_enabled and settings.anthropic_api_key:
        completion = AnthropicCompletionService(
            anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key),
            settings.claude_model,
            max_tokens=settings.ai_max_output_tokens,
        )
    elif settings.ai_enabled:
        logger.warning("Anthropic API key not set, using heuristic duplicate analysis")

    return AnalysisPipeline(
        storage,
        crawler=SiteCrawler(
            timeout=settings.crawl_request_timeout,
            user_agent=settings.crawl_user_agent,
        ),
        fetcher=PageFetcher(
            timeout=settings.crawl_request_timeout,
            user_agent=settings.crawl_user_agent,
        ),
        duplication_analyzer=ContentDuplicationAnalyzer(
            completion,
            enhancer_options=EnhancerOptions(call_delay_ms=settings.ai_call_delay_ms),
        ),
        insight_generator=CompetitiveInsightGenerator(completion),
        progress=progress,
    )
