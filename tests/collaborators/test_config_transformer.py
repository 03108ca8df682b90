"""Tests for collaborators/config_transformer.py - vendor config to .smartui.json."""

import json

import pytest

from smartui_migrator.collaborators import ConfigParseError, ConfigTransformer, parse_config
from smartui_migrator.models import Platform


def load(result):
    return json.loads(result.content)


class TestPercyConfig:
    """.percy.yml and friends."""

    def test_widths_become_viewports(self):
        """Each Percy width is a single-width viewport."""
        content = "version: 2\nsnapshot:\n  widths: [375, 1280]\n  min-height: 1024\n"
        result = ConfigTransformer(Platform.PERCY, "shop").transform(".percy.yml", content)
        data = load(result)
        assert data == {
            "version": "1.0",
            "projectName": "shop",
            "web": {"viewports": [[375], [1280]], "minHeight": 1024},
        }
        assert result.content.endswith("\n")
        assert result.warnings == []

    def test_percy_css_warns(self):
        """percy-css has no config equivalent."""
        content = "snapshot:\n  percy-css: '.ad { display: none; }'\n"
        result = ConfigTransformer(Platform.PERCY).transform(".percy.yml", content)
        assert load(result)["projectName"] == "migrated-project"
        assert len(result.warnings) == 1
        assert result.warnings[0].file == ".percy.yml"

    def test_js_module_config(self):
        """percy.config.js is read without being executed."""
        content = "module.exports = {\n  version: 2,\n  snapshot: { widths: [768] },\n};\n"
        result = ConfigTransformer(Platform.PERCY, "shop").transform("percy.config.js", content)
        assert load(result)["web"]["viewports"] == [[768]]

    def test_unparseable_falls_back(self):
        """A broken config yields defaults and a warning."""
        result = ConfigTransformer(Platform.PERCY).transform(".percy.yml", "snapshot: [unclosed\n")
        data = load(result)
        assert data["web"]["viewports"] == [[1280], [768], [375]]
        assert result.warnings[0].message.startswith("Failed to parse Percy configuration")


class TestApplitoolsConfig:
    """applitools.config.js."""

    def test_browsers_and_devices(self):
        """Desktop entries give browsers and viewports, device entries go to mobile."""
        content = """module.exports = {
  appName: 'Shop',
  browser: [
    { width: 1280, height: 720, name: 'chrome' },
    { width: 768, height: 1024, name: 'firefox' },
    { deviceName: 'iPhone X' },
  ],
};
"""
        result = ConfigTransformer(Platform.APPLITOOLS, "shop").transform("applitools.config.js", content)
        data = load(result)
        assert data["web"] == {"browsers": ["chrome", "firefox"], "viewports": [[1280, 720], [768, 1024]]}
        assert data["mobile"] == {"devices": ["iPhone X"], "orientation": "portrait"}
        assert any("appName" in w.message for w in result.warnings)


class TestSauceConfig:
    """saucectl.yml suites."""

    def test_suite_settings(self):
        """Browser names and screen resolutions come from suite settings."""
        content = """apiVersion: v1alpha
kind: cypress
suites:
  - name: chrome
    browser: chrome
    settings:
      browserName: chrome
      screenResolution: 1920x1080
  - name: firefox
    settings:
      browserName: firefox
      screenResolution: 1920x1080
"""
        result = ConfigTransformer(Platform.SAUCE_LABS, "shop").transform("saucectl.yml", content)
        assert load(result)["web"] == {"browsers": ["chrome", "firefox"], "viewports": [[1920, 1080]]}


class TestParseConfig:
    def test_root_must_be_mapping(self):
        """A YAML list is not a configuration."""
        with pytest.raises(ConfigParseError):
            parse_config(".percy.yml", "- a\n- b\n")

    def test_json(self):
        """.percy.json is parsed as JSON."""
        assert parse_config(".percy.json", '{"version": 2}') == {"version": 2}
