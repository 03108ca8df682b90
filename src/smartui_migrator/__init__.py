"""
SmartUI Migrator - move visual test suites to LambdaTest SmartUI

Detects a project's Percy, Applitools or Sauce Labs Visual setup, previews
the migration, and rewrites snapshot calls, configuration, dependencies and
CI files behind a restorable checkpoint.
"""

__version__ = "1.5.0"

from .analysis import DryRunAnalyzer
from .apply import TransformationManager, TransformationOptions, TransformationResult
from .checkpoint import CheckpointManager
from .detection import Detector
from .models import AnalysisResult, DetectionResult, Framework, Language, Platform
from .transform import SourceDialect, SyntaxTransformEngine

__all__ = [
    "Detector",  # Main entry point
    "DryRunAnalyzer",
    "SyntaxTransformEngine",
    "SourceDialect",
    "CheckpointManager",
    "TransformationManager",
    "TransformationOptions",
    "TransformationResult",
    "AnalysisResult",
    "DetectionResult",
    "Platform",
    "Framework",
    "Language",
]
