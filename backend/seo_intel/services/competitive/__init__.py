"""Competitive analysis package: content gaps, metric comparison and insights."""

from seo_intel.services.competitive.gap_analyzer import GapThresholds, analyze_gaps
from seo_intel.services.competitive.insights import CompetitiveInsightGenerator
from seo_intel.services.competitive.metrics import compare_site_metrics, compute_site_metrics

__all__ = [
    "CompetitiveInsightGenerator",
    "GapThresholds",
    "analyze_gaps",
    "compare_site_metrics",
    "compute_site_metrics",
]
