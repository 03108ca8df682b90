"""Tests for the Java variant of the transform engine."""

import pytest

from smartui_migrator.models import Framework, Platform
from smartui_migrator.transform import SourceDialect, SyntaxTransformEngine


@pytest.fixture(scope="module")
def engine():
    return SyntaxTransformEngine()


def run(engine, source, platform, framework=Framework.SELENIUM):
    return engine.transform(source, platform, framework, SourceDialect.JAVA)


PERCY_TEST = """\
package com.shop;

import io.percy.selenium.Percy;
import org.openqa.selenium.WebDriver;

public class HomeTest {
    @Test
    public void home() {
        Percy percy = new Percy(driver);
        percy.snapshot("Home");
    }
}
"""


class TestPercyJava:
    """Percy instances become static SmartUISnapshot calls."""

    def test_snapshot_rebuilt(self, engine):
        """The Percy declaration goes and snapshot() is rebuilt with the driver."""
        out = run(engine, PERCY_TEST, Platform.PERCY)
        assert "import io.github.lambdatest.SmartUISnapshot;\n" in out.content
        assert "import org.openqa.selenium.WebDriver;\n" in out.content
        assert '        SmartUISnapshot.smartuiSnapshot(driver, "Home");\n' in out.content
        assert "new Percy" not in out.content
        assert out.snapshot_count == 1

    def test_positional_widths_warn(self, engine):
        """Percy's positional widths argument is reported and dropped."""
        source = 'class T { void t() { percy.snapshot("Home", Arrays.asList(375, 1280)); } }\n'
        out = run(engine, source, Platform.PERCY)
        assert 'SmartUISnapshot.smartuiSnapshot(driver, "Home");' in out.content
        assert any("widths" in w.message for w in out.warnings)

    def test_duplicate_imports_collapse(self, engine):
        """Several vendor imports map to a single SmartUI import."""
        source = "import io.percy.selenium.Percy;\nimport io.percy.appium.AppPercy;\n\nclass T {}\n"
        out = run(engine, source, Platform.PERCY)
        assert out.content == "import io.github.lambdatest.SmartUISnapshot;\n\nclass T {}\n"


class TestApplitoolsJava:
    """Eyes in Java."""

    def test_region_by_css(self, engine):
        """By.cssSelector regions resolve to a selector; options print as Map.of."""
        source = (
            "import com.applitools.eyes.selenium.Eyes;\n"
            "\n"
            "class T {\n"
            "    void t() {\n"
            '        eyes.open(webDriver, "Shop", "Home");\n'
            '        eyes.check("Hero", Target.region(By.cssSelector("#hero")));\n'
            "        eyes.closeAsync();\n"
            "    }\n"
            "}\n"
        )
        out = run(engine, source, Platform.APPLITOOLS)
        assert "import java.util.Map;\n" in out.content
        assert (
            '        SmartUISnapshot.smartuiSnapshot(webDriver, "Hero", '
            'Map.of("element", Map.of("cssSelector", "#hero")));\n'
        ) in out.content
        assert "eyes.open" not in out.content
        assert "closeAsync" not in out.content


class TestSauceLabsJava:
    """VisualApi checks with a CheckOptions builder."""

    def test_builder_options(self, engine):
        """withIgnoredRegions on the builder becomes ignoreDOM."""
        source = (
            "class T {\n"
            "    void t() {\n"
            '        visual.sauceVisualCheck("Home", new CheckOptions.Builder()'
            '.withIgnoredRegions(List.of(".ad")).build());\n'
            "    }\n"
            "}\n"
        )
        out = run(engine, source, Platform.SAUCE_LABS)
        assert (
            'SmartUISnapshot.smartuiSnapshot(driver, "Home", '
            'Map.of("ignoreDOM", Map.of("cssSelector", List.of(".ad"))));'
        ) in out.content


class TestJavaUnicodeEscapes:
    def test_lone_surrogate_kept_verbatim(self, engine):
        """An unpaired \\u escape in a snapshot name survives untouched."""
        source = PERCY_TEST.replace('percy.snapshot("Home");', 'percy.snapshot("\\ud83d");')
        out = run(engine, source, Platform.PERCY)
        assert 'driver, "\\ud83d")' in out.content
        assert out.snapshot_count == 1
        out.content.encode("utf-8")


class TestJavaSecondPass:
    """Migrating already-migrated output is a no-op."""

    def test_applitools_output_is_stable(self, engine):
        source = (
            "import com.applitools.eyes.selenium.Eyes;\n"
            "\n"
            "class T {\n"
            "    void t() {\n"
            '        eyes.open(webDriver, "Shop", "Home");\n'
            '        eyes.check("Hero", Target.region(By.cssSelector("#hero")));\n'
            "        eyes.closeAsync();\n"
            "    }\n"
            "}\n"
        )
        once = run(engine, source, Platform.APPLITOOLS).content
        twice = run(engine, once, Platform.APPLITOOLS)
        assert twice.content == once
        assert twice.changes == []
        assert twice.warnings == []

    def test_percy_output_is_stable(self, engine):
        once = run(engine, PERCY_TEST, Platform.PERCY).content
        twice = run(engine, once, Platform.PERCY)
        assert twice.content == once
        assert twice.changes == []
