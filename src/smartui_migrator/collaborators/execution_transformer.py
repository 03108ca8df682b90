"""Package manifests and CI definitions.

Keyed substitutions driven by the mapping tables: dependency renames,
run-command rewrites and environment-variable renames. Text outside the
substituted keys is left as it was.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from ..logging_config import get_logger
from ..mappings.dependencies import (
    ENV_VAR_MAPPINGS,
    MAVEN_PACKAGE_MAPPINGS,
    NPM_PACKAGE_MAPPINGS,
    PIP_PACKAGE_MAPPINGS,
    STORYBOOK_COMMAND_MAPPINGS,
)
from ..models import Platform, TransformationWarning
from ..detection.manifests import normalize_pip_name

logger = get_logger(__name__)

SMARTUI_EXEC = "npx smartui exec"
_PERCY_EXEC = re.compile(r"(?:npx\s+)?percy\s+(?:app:)?exec\b")
_TEST_COMMANDS = (
    "cypress run",
    "playwright test",
    "jest",
    "mocha",
    "wdio",
    "mvn test",
    "gradle test",
    "pytest",
    "python -m pytest",
    "robot ",
)
_REQUIREMENT = re.compile(r"^(\s*)([A-Za-z0-9][A-Za-z0-9._-]*)(\[[^\]]*\])?([^#;]*)(.*)$")
_DEPENDENCY = re.compile(r"<dependency>.*?</dependency>", re.S)


@dataclass
class ExecutionResult:
    content: str
    changed: bool = False
    warnings: list[TransformationWarning] = field(default_factory=list)


def _replace_storybook(text: str, platform: Platform) -> str:
    for old, new in STORYBOOK_COMMAND_MAPPINGS.get(platform, {}).items():
        text = re.sub(rf"(?<![\w/@-]){re.escape(old)}\b", new, text)
    return text


def rewrite_command(command: str, platform: Platform) -> str:
    """Route a test command through `npx smartui exec`.

    Storybook runners are swapped for smartui-storybook instead, which
    drives the stories itself.
    """
    if "smartui" in command:
        return command
    storybook = _replace_storybook(command, platform)
    if storybook != command:
        return storybook
    if platform is Platform.PERCY:
        return _PERCY_EXEC.sub(SMARTUI_EXEC, command)
    if any(test in command for test in _TEST_COMMANDS):
        return f"{SMARTUI_EXEC} -- {command}"
    return command


class ExecutionTransformer:
    """Rewrites package.json, requirements.txt, pom.xml and CI files."""

    def __init__(self, platform: Platform) -> None:
        self.platform = platform

    def transform(self, rel_path: str, content: str) -> ExecutionResult:
        name = PurePosixPath(rel_path).name
        if name == "package.json":
            result = self.transform_package_json(content)
        elif name == "requirements.txt":
            result = self.transform_requirements(content)
        elif name == "pom.xml":
            result = self.transform_pom(content)
        else:
            result = self.transform_ci(content)
        result.warnings = [w.with_file(rel_path) for w in result.warnings]
        return result

    # -- manifests ---------------------------------------------------------

    def transform_package_json(self, content: str) -> ExecutionResult:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            return ExecutionResult(content, warnings=[TransformationWarning(
                f"Failed to parse package.json: {e}", "The file was left unchanged.")])
        if not isinstance(data, dict):
            return ExecutionResult(content)
        mappings = NPM_PACKAGE_MAPPINGS.get(self.platform, {})
        for section in ("dependencies", "devDependencies"):
            deps = data.get(section)
            if not isinstance(deps, dict):
                continue
            renamed: dict = {}
            for pkg, version in deps.items():
                target = mappings.get(pkg)
                if target is None:
                    renamed.setdefault(pkg, version)
                elif target not in renamed and target not in deps:
                    renamed[target] = "latest"
            data[section] = renamed
        scripts = data.get("scripts")
        if isinstance(scripts, dict):
            data["scripts"] = {k: rewrite_command(v, self.platform) if isinstance(v, str) else v for k, v in scripts.items()}
        indent_match = re.search(r"\n([ \t]+)\"", content)
        indent = indent_match.group(1) if indent_match else "  "
        new = json.dumps(data, indent=indent, ensure_ascii=False)
        if content.endswith("\n"):
            new += "\n"
        return ExecutionResult(new, new != content)

    def transform_requirements(self, content: str) -> ExecutionResult:
        mappings = PIP_PACKAGE_MAPPINGS.get(self.platform, {})
        out: list[str] = []
        seen: set[str] = set()
        for line in content.splitlines(keepends=True):
            m = _REQUIREMENT.match(line.rstrip("\r\n"))
            target = mappings.get(normalize_pip_name(m.group(2))) if m else None
            if target is None:
                out.append(line)
                continue
            if target in seen:
                continue
            seen.add(target)
            ending = line[len(line.rstrip("\r\n")):]
            out.append(f"{m.group(1)}{target}{ending}")
        new = "".join(out)
        return ExecutionResult(new, new != content)

    def transform_pom(self, content: str) -> ExecutionResult:
        mappings = MAVEN_PACKAGE_MAPPINGS.get(self.platform, {})
        warnings: list[TransformationWarning] = []
        emitted: set[str] = set()

        def repl(m: re.Match) -> str:
            block = m.group(0)
            group = re.search(r"<groupId>\s*([^<\s]+)\s*</groupId>", block)
            artifact = re.search(r"<artifactId>\s*([^<\s]+)\s*</artifactId>", block)
            if not group or not artifact:
                return block
            target = mappings.get(f"{group.group(1)}:{artifact.group(1)}")
            if target is None:
                return block
            if target in emitted:
                return ""
            emitted.add(target)
            new_group, new_artifact = target.split(":", 1)
            block = block.replace(group.group(0), f"<groupId>{new_group}</groupId>")
            block = block.replace(artifact.group(0), f"<artifactId>{new_artifact}</artifactId>")
            warnings.append(TransformationWarning(
                f"Dependency {group.group(1)}:{artifact.group(1)} was replaced with {target}.",
                "Set <version> to a released version of the SmartUI SDK.",
            ))
            return block

        new = _DEPENDENCY.sub(repl, content)
        # Collapse the blank line left behind by a removed duplicate
        new = re.sub(r"\n[ \t]*\n([ \t]*</dependencies>)", r"\n\1", new) if new != content else new
        return ExecutionResult(new, new != content, warnings)

    # -- CI ----------------------------------------------------------------

    def transform_ci(self, content: str) -> ExecutionResult:
        env = ENV_VAR_MAPPINGS.get(self.platform, {})
        new = content
        for old, target in env.items():
            new = re.sub(rf"\b{re.escape(old)}\b", target, new)
        if self.platform is Platform.PERCY:
            new = _PERCY_EXEC.sub(SMARTUI_EXEC, new)
        new = _replace_storybook(new, self.platform)
        warnings = []
        if new != content:
            warnings.append(TransformationWarning(
                "CI environment variables were renamed for SmartUI.",
                "Configure PROJECT_TOKEN, LT_USERNAME and LT_ACCESS_KEY as secrets in your CI provider.",
            ))
        return ExecutionResult(new, new != content, warnings)
