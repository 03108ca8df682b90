"""Apply phase: checkpointed writes with rollback on failure."""

from .manager import TransformationManager, TransformationOptions, TransformationResult

__all__ = ["TransformationManager", "TransformationOptions", "TransformationResult"]
