"""
Network-backed analysis: claim scanner, activity aggregator and the pipeline that joins them.
"""

from seeker_verify.analytics.activity import get_activity_metrics
from seeker_verify.analytics.claim_scanner import ClaimScanner, ScanState, detect_season1_tier
from seeker_verify.analytics.pipeline import (
    PredictionReport,
    Season1Report,
    WalletAnalyzer,
    run_prediction,
    run_season1_analysis,
)

__all__ = [
    "ClaimScanner",
    "PredictionReport",
    "ScanState",
    "Season1Report",
    "WalletAnalyzer",
    "detect_season1_tier",
    "get_activity_metrics",
    "run_prediction",
    "run_season1_analysis",
]
