"""Checkpoint records and rollback/cleanup results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..mappings.dependencies import MIGRATION_VERSION


class CheckpointStatus(Enum):
    CREATED = "created"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    DELETED = "deleted"


# created -> (committed | rolled_back) -> deleted; a committed checkpoint can
# still be rolled back by the user.
TRANSITIONS: dict[CheckpointStatus, frozenset[CheckpointStatus]] = {
    CheckpointStatus.CREATED: frozenset({CheckpointStatus.COMMITTED, CheckpointStatus.ROLLED_BACK}),
    CheckpointStatus.COMMITTED: frozenset({CheckpointStatus.ROLLED_BACK, CheckpointStatus.DELETED}),
    CheckpointStatus.ROLLED_BACK: frozenset({CheckpointStatus.DELETED}),
    CheckpointStatus.DELETED: frozenset(),
}


@dataclass(frozen=True)
class FileBackup:
    """Full original content of one file."""

    path: str
    content: str
    checksum: str
    size: int
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "content": self.content,
            "checksum": self.checksum,
            "size": self.size,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileBackup:
        return cls(
            path=data["path"],
            content=data["content"],
            checksum=data["checksum"],
            size=int(data.get("size", len(data["content"]))),
            timestamp=data.get("timestamp", ""),
        )


@dataclass
class CheckpointMetadata:
    migration_version: str = MIGRATION_VERSION
    platform: str = "unknown"
    framework: str = "unknown"
    language: str = "unknown"
    files_count: int = 0
    total_size: int = 0
    created_files: list[str] = field(default_factory=list)
    preexisting_artifacts: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "migration_version": self.migration_version,
            "platform": self.platform,
            "framework": self.framework,
            "language": self.language,
            "files_count": self.files_count,
            "total_size": self.total_size,
            "created_files": list(self.created_files),
            "preexisting_artifacts": list(self.preexisting_artifacts),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CheckpointMetadata:
        return cls(
            migration_version=data.get("migration_version", MIGRATION_VERSION),
            platform=data.get("platform", "unknown"),
            framework=data.get("framework", "unknown"),
            language=data.get("language", "unknown"),
            files_count=int(data.get("files_count", 0)),
            total_size=int(data.get("total_size", 0)),
            created_files=list(data.get("created_files", [])),
            preexisting_artifacts=list(data.get("preexisting_artifacts", [])),
        )


@dataclass
class Checkpoint:
    """One persisted restore point. Self-contained: embeds full file contents."""

    id: str
    timestamp: str
    description: str
    project_path: str
    status: CheckpointStatus = CheckpointStatus.CREATED
    files: list[FileBackup] = field(default_factory=list)
    metadata: CheckpointMetadata = field(default_factory=CheckpointMetadata)

    def backup_for(self, path: str) -> Optional[FileBackup]:
        for backup in self.files:
            if backup.path == path:
                return backup
        return None

    @property
    def backed_up_paths(self) -> set[str]:
        return {b.path for b in self.files}

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "description": self.description,
            "project_path": self.project_path,
            "status": self.status.value,
            "files": [b.to_dict() for b in self.files],
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Checkpoint:
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            description=data.get("description", ""),
            project_path=data["project_path"],
            status=CheckpointStatus(data.get("status", CheckpointStatus.CREATED.value)),
            files=[FileBackup.from_dict(f) for f in data.get("files", [])],
            metadata=CheckpointMetadata.from_dict(data.get("metadata", {})),
        )


@dataclass
class RollbackResult:
    success: bool
    message: str
    restored_files: list[str] = field(default_factory=list)
    removed_files: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    duration: float = 0.0


@dataclass
class CleanupResult:
    success: bool
    message: str
    removed_files: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
