"""Tests for the JavaScript/TypeScript variants of the transform engine."""

import pytest

from smartui_migrator.mappings.api import FULLY_WARNING, LAYOUT_COMMENT, WIDTHS_WARNING
from smartui_migrator.models import Framework, Platform
from smartui_migrator.transform import SourceDialect, SyntaxTransformEngine


@pytest.fixture(scope="module")
def engine():
    return SyntaxTransformEngine()


def run(engine, source, platform, framework, dialect=SourceDialect.JAVASCRIPT):
    return engine.transform(source, platform, framework, dialect)


class TestPercyRename:
    """Percy calls keep their arguments under the SmartUI name."""

    def test_playwright_default_import(self, engine):
        """Import source and default binding are both renamed."""
        source = (
            "import percySnapshot from '@percy/playwright';\n"
            "\n"
            "test('home', async ({ page }) => {\n"
            "  await percySnapshot(page, 'Home page');\n"
            "});\n"
        )
        out = run(engine, source, Platform.PERCY, Framework.PLAYWRIGHT, SourceDialect.TYPESCRIPT)
        assert "import smartuiSnapshot from '@lambdatest/smartui-playwright';" in out.content
        assert "await smartuiSnapshot(page, 'Home page');" in out.content
        assert "percy" not in out.content.lower()
        assert out.snapshot_count == 1
        assert out.warnings == []

    def test_cypress_side_effect_import(self, engine):
        """A bare support-file import is repointed."""
        out = run(engine, "import '@percy/cypress';\n", Platform.PERCY, Framework.CYPRESS)
        assert out.content == "import '@lambdatest/smartui-cypress';\n"
        assert out.snapshot_count == 0

    def test_cypress_options_remapped(self, engine):
        """Region selectors move under ignoreDOM; widths are dropped with a warning."""
        source = "cy.percySnapshot('Home', { widths: [375, 1280], ignoreRegionSelectors: ['.ad'] });\n"
        out = run(engine, source, Platform.PERCY, Framework.CYPRESS)
        assert out.content == "cy.smartuiSnapshot('Home', { ignoreDOM: { cssSelector: ['.ad'] } });\n"
        assert [w.message for w in out.warnings] == [WIDTHS_WARNING[0]]
        assert out.warnings[0].line == 1

    def test_require_destructuring(self, engine):
        """Destructured require names are renamed and the module repointed."""
        source = "const { percySnapshot } = require(\"@percy/selenium-webdriver\");\n"
        out = run(engine, source, Platform.PERCY, Framework.SELENIUM)
        assert out.content == "const { smartuiSnapshot } = require(\"@lambdatest/smartui-selenium\");\n"

    def test_unrelated_calls_untouched(self, engine):
        """Same-named methods on other receivers are not vendor calls."""
        source = "helpers.percySnapshot(page, 'x');\n"
        out = run(engine, source, Platform.PERCY, Framework.PLAYWRIGHT)
        assert out.content == source
        assert out.snapshot_count == 0

    def test_already_migrated_is_stable(self, engine):
        """Running the engine on its own output changes nothing."""
        source = "import percySnapshot from '@percy/playwright';\nawait percySnapshot(page, 'Home');\n"
        once = run(engine, source, Platform.PERCY, Framework.PLAYWRIGHT).content
        twice = run(engine, once, Platform.PERCY, Framework.PLAYWRIGHT)
        assert twice.content == once
        assert twice.changes == []


class TestApplitools:
    """Eyes sessions are removed and checks rebuilt as snapshots."""

    SOURCE = (
        "const { Eyes, Target } = require('@applitools/eyes-playwright');\n"
        "\n"
        "test('home', async ({ page }) => {\n"
        "  const eyes = new Eyes();\n"
        "  await eyes.open(page, 'Shop', 'Home');\n"
        "  await eyes.check('Home', Target.window().fully());\n"
        "  await eyes.close();\n"
        "});\n"
    )

    def test_session_removed_and_check_rebuilt(self, engine):
        """open/close and the Eyes declaration disappear."""
        out = run(engine, self.SOURCE, Platform.APPLITOOLS, Framework.PLAYWRIGHT)
        assert "const { smartuiSnapshot } = require('@lambdatest/smartui-playwright');" in out.content
        assert "  await smartuiSnapshot(page, 'Home');\n" in out.content
        assert "new Eyes" not in out.content
        assert "eyes.open" not in out.content
        assert "eyes.close" not in out.content
        assert out.snapshot_count == 1

    def test_fully_warns(self, engine):
        """fully() has no per-snapshot equivalent."""
        out = run(engine, self.SOURCE, Platform.APPLITOOLS, Framework.PLAYWRIGHT)
        assert FULLY_WARNING[0] in [w.message for w in out.warnings]

    def test_region_check(self, engine):
        """Target.region(selector) becomes an element snapshot."""
        source = "await eyes.check('Hero', Target.region('#hero'));\n"
        out = run(engine, source, Platform.APPLITOOLS, Framework.PLAYWRIGHT)
        assert out.content == "await smartuiSnapshot(page, 'Hero', { element: { cssSelector: '#hero' } });\n"

    def test_layout_region_emulated(self, engine):
        """A layout region gets a visibility assertion and ignores its children."""
        source = "test('a', async ({ page }) => {\n  await eyes.check('Nav', Target.region('nav').layout());\n});\n"
        out = run(engine, source, Platform.APPLITOOLS, Framework.PLAYWRIGHT)
        assert "  await expect(page.locator('nav')).toBeVisible();\n" in out.content
        assert f"  // {LAYOUT_COMMENT}\n" in out.content
        assert "smartuiSnapshot(page, 'Nav', { ignoreDOM: { cssSelector: ['nav *'] } });" in out.content
        assert any("nav" in w.message for w in out.warnings)

    def test_cypress_check_window(self, engine):
        """cy.eyesCheckWindow records become cy.smartuiSnapshot without a driver."""
        source = "cy.eyesOpen({ appName: 'Shop' });\ncy.eyesCheckWindow({ tag: 'Home' });\ncy.eyesClose();\n"
        out = run(engine, source, Platform.APPLITOOLS, Framework.CYPRESS)
        assert out.content == "cy.smartuiSnapshot('Home');\n"


class TestSauceLabs:
    """Sauce Labs Visual checks."""

    def test_cypress_rename(self, engine):
        """cy.sauceVisualCheck keeps its arguments."""
        out = run(engine, "cy.sauceVisualCheck('Home');\n", Platform.SAUCE_LABS, Framework.CYPRESS)
        assert out.content == "cy.smartuiSnapshot('Home');\n"

    def test_capture_dom_dropped_silently(self, engine):
        """captureDom has no effect on SmartUI and is removed without a warning."""
        source = "cy.sauceVisualCheck('Home', { captureDom: true, clipSelector: '#main' });\n"
        out = run(engine, source, Platform.SAUCE_LABS, Framework.CYPRESS)
        assert out.content == "cy.smartuiSnapshot('Home', { element: { cssSelector: '#main' } });\n"
        assert out.warnings == []


class TestParseFailure:
    """Malformed sources come back unchanged with a warning."""

    def test_syntax_error(self, engine):
        """Broken syntax never raises."""
        source = "percySnapshot(page, 'Home';\nconst = ;\n"
        out = run(engine, source, Platform.PERCY, Framework.PLAYWRIGHT)
        assert out.content == source
        assert len(out.warnings) == 1
        assert out.warnings[0].message.startswith("Failed to parse source code")
        assert out.snapshot_count == 0


class TestUnicodeEscapes:
    """\\u escapes that spell UTF-16 surrogates."""

    def test_surrogate_pair_joined(self, engine):
        """A paired escape becomes the character it encodes."""
        source = "await eyes.check('\\ud83d\\ude00', Target.window());\n"
        out = run(engine, source, Platform.APPLITOOLS, Framework.PLAYWRIGHT)
        assert out.content == "await smartuiSnapshot(page, '\U0001F600');\n"
        assert out.snapshot_count == 1

    def test_lone_surrogate_kept_verbatim(self, engine):
        """An unpaired escape cannot be decoded, so the literal is copied as written."""
        source = "await eyes.check('\\ud83d', Target.window());\n"
        out = run(engine, source, Platform.APPLITOOLS, Framework.PLAYWRIGHT)
        assert out.content == "await smartuiSnapshot(page, '\\ud83d');\n"
        out.content.encode("utf-8")


class TestRewriteFailure:
    """An unexpected error inside the rewriter is contained to its file."""

    def test_error_becomes_warning(self, engine, monkeypatch):
        """The file is returned unchanged with a warning instead of raising."""
        from smartui_migrator.transform import engine as engine_module

        def explode(self, source, root):
            raise RuntimeError("boom")

        monkeypatch.setattr(engine_module.Rewriter, "rewrite", explode)
        source = "await percySnapshot(page, 'Home');\n"
        out = run(engine, source, Platform.PERCY, Framework.PLAYWRIGHT)
        assert out.content == source
        assert len(out.warnings) == 1
        assert out.warnings[0].message == "Failed to rewrite source code: RuntimeError: boom"
        assert out.snapshot_count == 0


class TestSecondPass:
    """Migrating already-migrated output is a no-op."""

    @pytest.mark.parametrize(
        "source, framework",
        [
            (TestApplitools.SOURCE, Framework.PLAYWRIGHT),
            ("test('a', async ({ page }) => {\n  await eyes.check('Nav', Target.region('nav').layout());\n});\n",
             Framework.PLAYWRIGHT),
            ("cy.eyesOpen({ appName: 'Shop' });\ncy.eyesCheckWindow({ tag: 'Home' });\ncy.eyesClose();\n",
             Framework.CYPRESS),
        ],
    )
    def test_applitools_output_is_stable(self, engine, source, framework):
        once = run(engine, source, Platform.APPLITOOLS, framework).content
        twice = run(engine, once, Platform.APPLITOOLS, framework)
        assert twice.content == once
        assert twice.changes == []
        assert twice.warnings == []
