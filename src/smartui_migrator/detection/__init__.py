"""Platform detection from dependency manifests and config files."""

from .detector import Detector, ProjectIndex
from .manifests import Manifest, read_manifest, read_manifests

__all__ = ["Detector", "ProjectIndex", "Manifest", "read_manifest", "read_manifests"]
