"""Vendor configuration files -> `.smartui.json`.

A keyed substitution over parsed data: YAML and JSON through PyYAML, JS/TS
config modules through the tree-sitter JavaScript adapter (the exported object
literal is read, never executed).
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Optional

import yaml

from ..logging_config import get_logger
from ..models import Platform, TransformationWarning
from ..transform.adapters import JavaScriptAdapter, TypeScriptAdapter
from ..transform.parser import TreeSitterParser, walk
from ..transform.values import Invocation, Name, Opaque

logger = get_logger(__name__)

DEFAULT_PROJECT_NAME = "migrated-project"
_RESOLUTION = re.compile(r"^(\d+)x(\d+)$")

_FALLBACK_WEB = {
    Platform.PERCY: {"viewports": [[1280], [768], [375]], "minHeight": 600},
    Platform.APPLITOOLS: {"browsers": ["chrome", "firefox", "safari"], "viewports": [[1280, 720], [768, 1024], [375, 667]]},
    Platform.SAUCE_LABS: {"browsers": ["chrome", "firefox", "safari"], "viewports": [[1280, 720], [768, 1024], [375, 667]]},
}

_APPLITOOLS_UNMAPPED = {
    "appName": "appName is configured on the SmartUI dashboard or via CLI arguments, not in the config file.",
    "batchName": "batchName is configured on the SmartUI dashboard or via CLI arguments, not in the config file.",
    "batchId": "batchId is generated by SmartUI and cannot be pre-configured.",
    "apiKey": "apiKey should be set through the PROJECT_TOKEN environment variable, not in the config file.",
    "storybookUrl": "storybookUrl is not used by smartui-storybook.",
    "storybook": "Storybook-specific configuration properties are not used by smartui-storybook.",
    "serverUrl": "serverUrl is configured via CLI arguments or environment variables.",
}
_SAUCE_UNMAPPED = {
    "build": "Sauce Labs' `build` property was detected. In SmartUI the build name is set with `--buildName` or an environment variable.",
    "name": "Sauce Labs' `name` property was detected. In SmartUI the test name is set with `--testName` or an environment variable.",
    "tags": "Sauce Labs' `tags` property was detected. SmartUI sets tags with `--tags` or an environment variable.",
    "region": "Sauce Labs' `region` property was detected. SmartUI sets the region with `--region` or an environment variable.",
    "username": "Sauce Labs' `username` property was detected. SmartUI authenticates with LT_USERNAME and LT_ACCESS_KEY.",
    "accessKey": "Sauce Labs' `accessKey` property was detected. SmartUI authenticates with LT_USERNAME and LT_ACCESS_KEY.",
}
_UNMAPPED_DETAILS = "This setting was not migrated."


@dataclass
class ConfigResult:
    content: str
    warnings: list[TransformationWarning] = field(default_factory=list)


class ConfigParseError(ValueError):
    pass


def _plain(value: Any) -> Any:
    """Neutral JS values -> plain data; identifiers become their names."""
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items() if not isinstance(v, (Opaque, Invocation))}
    if isinstance(value, list):
        return [_plain(v) for v in value if not isinstance(v, (Opaque, Invocation))]
    if isinstance(value, Name):
        return value.text
    return value


def parse_js_config(content: str, typescript: bool = False) -> dict:
    """Read `module.exports = {...}` or `export default {...}` without running it."""
    adapter = TypeScriptAdapter() if typescript else JavaScriptAdapter()
    tree = TreeSitterParser().parse(content.encode("utf-8", "surrogateescape"), adapter.grammar)
    for node in walk(tree.root_node):
        candidate = None
        if node.type == "assignment_expression" and adapter.text(node.child_by_field_name("left")) == "module.exports":
            candidate = node.child_by_field_name("right")
        elif node.type == "export_statement" and any(c.type == "default" for c in node.children):
            candidate = node.child_by_field_name("value") or next(
                (c for c in node.named_children if c.type == "object"), None
            )
        while candidate is not None and candidate.type in ("call_expression", "parenthesized_expression", "as_expression"):
            # defineConfig({...}) and similar wrappers
            inner = candidate.child_by_field_name("arguments") if candidate.type == "call_expression" else candidate
            candidate = next((c for c in inner.named_children if c.type == "object"), None) if inner else None
        if candidate is not None and candidate.type == "object":
            value = adapter.value(candidate)
            if isinstance(value, dict):
                return _plain(value)
    raise ConfigParseError("could not find an exported configuration object")


def parse_config(rel_path: str, content: str) -> dict:
    suffix = PurePosixPath(rel_path).suffix.lower()
    if suffix in (".js", ".cjs", ".mjs", ".ts"):
        return parse_js_config(content, typescript=suffix == ".ts")
    try:
        data = json.loads(content) if suffix == ".json" else yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(str(e)) from e
    if not isinstance(data, dict):
        raise ConfigParseError("configuration root is not a mapping")
    return data


def parse_resolution(value: Any) -> Optional[list[int]]:
    if not isinstance(value, str):
        return None
    m = _RESOLUTION.match(value.strip())
    return [int(m.group(1)), int(m.group(2))] if m else None


class ConfigTransformer:
    """Produces `.smartui.json` content from one vendor config file."""

    def __init__(self, platform: Platform, project_name: str = DEFAULT_PROJECT_NAME) -> None:
        self.platform = platform
        self.project_name = project_name

    def _base(self) -> dict:
        return {"version": "1.0", "projectName": self.project_name, "web": {}}

    def transform(self, rel_path: str, content: str) -> ConfigResult:
        warnings: list[TransformationWarning] = []
        try:
            data = parse_config(rel_path, content)
        except ConfigParseError as e:
            logger.warning(f"Could not parse {rel_path}: {e}")
            warnings.append(
                TransformationWarning(
                    f"Failed to parse {self.platform.value} configuration: {e}",
                    "A default SmartUI configuration was generated instead.",
                    file=rel_path,
                )
            )
            config = self._base()
            config["web"] = dict(_FALLBACK_WEB[self.platform])
            return ConfigResult(self._dump(config), warnings)

        config = self._base()
        if self.platform is Platform.PERCY:
            self._percy(data, config, warnings)
        elif self.platform is Platform.APPLITOOLS:
            self._applitools(data, config, warnings)
        else:
            self._sauce(data, config, warnings)
        return ConfigResult(self._dump(config), [w.with_file(rel_path) for w in warnings])

    @staticmethod
    def _dump(config: dict) -> str:
        return json.dumps(config, indent=2) + "\n"

    # -- per platform ------------------------------------------------------

    def _percy(self, data: dict, config: dict, warnings: list[TransformationWarning]) -> None:
        snapshot = data.get("snapshot") or {}
        discovery = data.get("discovery") or {}
        web = config["web"]
        widths = snapshot.get("widths")
        if isinstance(widths, list):
            web["viewports"] = [[w] for w in widths if isinstance(w, int)]
        min_height = snapshot.get("min-height", snapshot.get("minHeight"))
        if isinstance(min_height, int):
            web["minHeight"] = min_height
        hosts = discovery.get("allowed-hostnames", discovery.get("allowedHostnames"))
        if isinstance(hosts, list):
            web["allowedHostnames"] = hosts
        if snapshot.get("percy-css") or snapshot.get("percyCSS"):
            warnings.append(TransformationWarning(
                "Percy-specific CSS was detected and has no SmartUI configuration equivalent.",
                "Apply the styles in the test before taking the snapshot.",
            ))
        if snapshot.get("enable-javascript") or snapshot.get("enableJavaScript"):
            warnings.append(TransformationWarning(
                "Percy JavaScript execution setting detected. SmartUI handles JavaScript execution differently.",
                "JavaScript execution is controlled at the test level in SmartUI, not globally in configuration.",
            ))

    def _applitools(self, data: dict, config: dict, warnings: list[TransformationWarning]) -> None:
        browsers: list[str] = []
        viewports: list[list[int]] = []
        devices: list[str] = []
        entries = data.get("browser") or data.get("browsers") or []
        for entry in entries if isinstance(entries, list) else [entries]:
            if not isinstance(entry, dict):
                continue
            if entry.get("width") and entry.get("height"):
                name = entry.get("name")
                if isinstance(name, str) and name not in browsers:
                    browsers.append(name)
                viewports.append([entry["width"], entry["height"]])
            elif entry.get("deviceName"):
                devices.append(entry["deviceName"])
        config["web"] = {"browsers": browsers, "viewports": viewports}
        if devices:
            config["mobile"] = {"devices": devices, "orientation": "portrait"}
        self._unmapped(data, _APPLITOOLS_UNMAPPED, warnings)

    def _sauce(self, data: dict, config: dict, warnings: list[TransformationWarning]) -> None:
        browsers: list[str] = []
        viewports: list[list[int]] = []
        devices: list[str] = []

        def collect(settings: Any) -> None:
            if not isinstance(settings, dict):
                return
            for entry in [settings] + [b for b in settings.get("browsers") or [] if isinstance(b, dict)]:
                name = entry.get("browserName")
                if isinstance(name, str) and name not in browsers:
                    browsers.append(name)
                resolution = parse_resolution(entry.get("screenResolution"))
                if resolution and resolution not in viewports:
                    viewports.append(resolution)
            for entry in [settings] + [d for d in settings.get("devices") or [] if isinstance(d, dict)]:
                if isinstance(entry.get("deviceName"), str):
                    devices.append(entry["deviceName"])

        for suite in data.get("suites") or []:
            if isinstance(suite, dict):
                collect(suite.get("settings"))
        collect(data.get("settings"))
        for key in ("saucelabs", "sauceVisual"):
            collect(data.get(key))
        if not data.get("suites") and not data.get("settings"):
            collect(data)
        config["web"] = {"browsers": browsers, "viewports": viewports}
        if devices:
            config["mobile"] = {"devices": devices, "orientation": "portrait"}
        self._unmapped(data, _SAUCE_UNMAPPED, warnings)

    @staticmethod
    def _unmapped(data: dict, table: dict[str, str], warnings: list[TransformationWarning]) -> None:
        for key, message in table.items():
            if data.get(key) is not None:
                warnings.append(TransformationWarning(message, _UNMAPPED_DETAILS))
