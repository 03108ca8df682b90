"""Dry-run analysis of a detected project."""

from .dry_run import ANALYSIS_PATH, PHASES, DryRunAnalyzer

__all__ = ["ANALYSIS_PATH", "PHASES", "DryRunAnalyzer"]
