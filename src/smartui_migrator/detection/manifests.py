"""Dependency manifest readers, one per ecosystem.

Each reader returns a flat ``name -> version spec`` map. Names are the
identifiers the detection signatures use: npm package names, Maven
``groupId:artifactId`` coordinates, and PEP 503 normalized pip names.
"""

from __future__ import annotations

import json
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from ..exceptions import FileAccessError, ManifestReadError
from ..file_ops import safe_read_file
from ..logging_config import get_logger
from ..mappings.dependencies import ECOSYSTEM_MANIFEST, MAVEN, NPM, PIP

logger = get_logger(__name__)

_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


@dataclass(frozen=True)
class Manifest:
    """A parsed dependency manifest."""

    ecosystem: str
    path: str
    dependencies: dict[str, str]

    def declares(self, name: str) -> bool:
        return name in self.dependencies


def normalize_pip_name(name: str) -> str:
    """PEP 503 name normalization."""
    return re.sub(r"[-_.]+", "-", name).lower()


def parse_package_json(text: str) -> dict[str, str]:
    """Merge ``dependencies`` and ``devDependencies`` (dev wins on conflict)."""
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("package.json root is not an object")
    merged: dict[str, str] = {}
    for section in ("dependencies", "devDependencies"):
        deps = data.get(section) or {}
        if not isinstance(deps, dict):
            raise ValueError(f"{section} is not an object")
        merged.update({str(k): str(v) for k, v in deps.items()})
    return merged


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_pom_xml(text: str) -> dict[str, str]:
    """Collect ``groupId:artifactId`` for every dependency, namespace-agnostic.

    Covers both ``project/dependencies`` and ``dependencyManagement``.
    """
    root = ET.fromstring(text)
    deps: dict[str, str] = {}
    for element in root.iter():
        if _local(element.tag) != "dependency":
            continue
        fields = {_local(child.tag): (child.text or "").strip() for child in element}
        group = fields.get("groupId")
        artifact = fields.get("artifactId")
        if group and artifact:
            deps[f"{group}:{artifact}"] = fields.get("version", "")
    return deps


def parse_requirements(text: str) -> dict[str, str]:
    """Parse requirement lines; options, includes and comments are ignored."""
    deps: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.split("#", 1)[0].strip()
        if not line or line.startswith("-"):
            continue
        match = _REQUIREMENT_NAME.match(line)
        if match is None:
            continue
        name = match.group(1)
        spec = line[match.end():].split(";", 1)[0].strip()
        deps[normalize_pip_name(name)] = spec
    return deps


MANIFEST_PARSERS: dict[str, Callable[[str], dict[str, str]]] = {
    NPM: parse_package_json,
    MAVEN: parse_pom_xml,
    PIP: parse_requirements,
}


def read_manifest(root: Path, ecosystem: str) -> Manifest | None:
    """Read the ecosystem's manifest at the project root, if present.

    Raises:
        ManifestReadError: If the manifest exists but cannot be parsed
    """
    rel = ECOSYSTEM_MANIFEST[ecosystem]
    path = root / rel
    if not path.is_file():
        return None
    try:
        text = safe_read_file(path)
        dependencies = MANIFEST_PARSERS[ecosystem](text)
    except FileAccessError as e:
        raise ManifestReadError(path, e.reason)
    except (ValueError, ET.ParseError) as e:
        raise ManifestReadError(path, str(e))
    logger.debug(f"Read {len(dependencies)} dependencies from {rel}")
    return Manifest(ecosystem=ecosystem, path=rel, dependencies=dependencies)


def read_manifests(root: Path) -> list[Manifest]:
    """All manifests found at the project root, in ecosystem order (npm, maven, pip)."""
    manifests = []
    for ecosystem in (NPM, MAVEN, PIP):
        manifest = read_manifest(root, ecosystem)
        if manifest is not None:
            manifests.append(manifest)
    return manifests
