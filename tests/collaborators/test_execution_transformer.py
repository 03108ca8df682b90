"""Tests for collaborators/execution_transformer.py - manifests and CI files."""

import json

from smartui_migrator.collaborators import ExecutionTransformer, rewrite_command
from smartui_migrator.models import Platform


class TestRewriteCommand:
    """Test commands routed through `npx smartui exec`."""

    def test_percy_exec_replaced(self):
        """percy exec is swapped for smartui exec."""
        assert rewrite_command("percy exec -- cypress run", Platform.PERCY) == "npx smartui exec -- cypress run"
        assert rewrite_command("npx percy app:exec -- mvn test", Platform.PERCY) == "npx smartui exec -- mvn test"

    def test_wraps_test_runner(self):
        """Other platforms wrap known test runners."""
        assert rewrite_command("playwright test", Platform.APPLITOOLS) == "npx smartui exec -- playwright test"

    def test_leaves_other_commands(self):
        """Build scripts and already-migrated commands are untouched."""
        assert rewrite_command("tsc -p .", Platform.APPLITOOLS) == "tsc -p ."
        assert rewrite_command("npx smartui exec -- jest", Platform.SAUCE_LABS) == "npx smartui exec -- jest"

    def test_storybook_runners_replaced(self):
        """Vendor Storybook CLIs become smartui-storybook rather than being wrapped."""
        assert rewrite_command("percy storybook ./storybook-static", Platform.PERCY) == (
            "smartui-storybook ./storybook-static"
        )
        assert rewrite_command("npx eyes-storybook -u http://localhost:6006", Platform.APPLITOOLS) == (
            "npx smartui-storybook -u http://localhost:6006"
        )
        assert rewrite_command("screener-storybook --conf screener.config.js", Platform.SAUCE_LABS) == (
            "smartui-storybook --conf screener.config.js"
        )

    def test_storybook_rewrite_is_stable(self):
        """A second pass over a rewritten script changes nothing."""
        once = rewrite_command("eyes-storybook", Platform.APPLITOOLS)
        assert rewrite_command(once, Platform.APPLITOOLS) == once == "smartui-storybook"


class TestPackageJson:
    """package.json dependency and script rewrites."""

    def test_dependencies_renamed(self):
        """Vendor packages become SmartUI packages pinned to latest."""
        content = json.dumps(
            {
                "name": "shop",
                "scripts": {"visual": "percy exec -- playwright test", "build": "tsc"},
                "devDependencies": {"@percy/cli": "^1.27.0", "@percy/playwright": "^1.0.4", "typescript": "^5.0.0"},
            },
            indent=4,
        ) + "\n"
        result = ExecutionTransformer(Platform.PERCY).transform("package.json", content)
        data = json.loads(result.content)
        assert result.changed
        assert data["devDependencies"] == {
            "@lambdatest/smartui-cli": "latest",
            "@lambdatest/smartui-playwright": "latest",
            "typescript": "^5.0.0",
        }
        assert data["scripts"] == {"visual": "npx smartui exec -- playwright test", "build": "tsc"}
        assert result.content.startswith('{\n    "name"')
        assert result.content.endswith("}\n")

    def test_existing_target_not_duplicated(self):
        """A SmartUI package that is already declared keeps its version."""
        content = '{"devDependencies": {"@percy/cli": "1", "@lambdatest/smartui-cli": "^4.0.0"}}'
        result = ExecutionTransformer(Platform.PERCY).transform("package.json", content)
        assert json.loads(result.content)["devDependencies"] == {"@lambdatest/smartui-cli": "^4.0.0"}

    def test_invalid_json_warns(self):
        """Unparseable package.json is left alone with a warning."""
        result = ExecutionTransformer(Platform.PERCY).transform("package.json", "{ nope")
        assert result.content == "{ nope"
        assert not result.changed
        assert result.warnings[0].file == "package.json"


class TestRequirementsAndPom:
    """pip and Maven manifests."""

    def test_requirements(self):
        """Renames keep indentation and line endings; other lines are untouched."""
        content = "selenium==4.15\nPercy-Selenium>=2.0\npercy-appium-app\n"
        result = ExecutionTransformer(Platform.PERCY).transform("requirements.txt", content)
        assert result.content == "selenium==4.15\nlambdatest-selenium-driver\n"

    def test_pom(self):
        """Coordinates are replaced inside the dependency block."""
        content = """<project>
  <dependencies>
    <dependency>
      <groupId>io.percy</groupId>
      <artifactId>percy-java-selenium</artifactId>
      <version>2.0.0</version>
    </dependency>
  </dependencies>
</project>
"""
        result = ExecutionTransformer(Platform.PERCY).transform("pom.xml", content)
        assert "<groupId>io.github.lambdatest</groupId>" in result.content
        assert "<artifactId>lambdatest-java-sdk</artifactId>" in result.content
        assert "<version>2.0.0</version>" in result.content
        assert len(result.warnings) == 1


class TestCi:
    """CI definitions."""

    def test_env_vars_and_exec(self, percy_playwright_project):
        """Secrets are renamed and percy exec replaced."""
        path = percy_playwright_project / ".github/workflows/visual.yml"
        result = ExecutionTransformer(Platform.PERCY).transform(".github/workflows/visual.yml", path.read_text())
        assert "PROJECT_TOKEN: ${{ secrets.PROJECT_TOKEN }}" in result.content
        assert "run: npx smartui exec -- npx playwright test" in result.content
        assert "PERCY" not in result.content
        assert result.warnings[0].message == "CI environment variables were renamed for SmartUI."

    def test_word_boundaries(self):
        """Longer names that merely contain a vendor variable are kept."""
        content = "env:\n  MY_SAUCE_USERNAME_X: a\n  SAUCE_USERNAME: b\n"
        result = ExecutionTransformer(Platform.SAUCE_LABS).transform("Jenkinsfile", content)
        assert result.content == "env:\n  MY_SAUCE_USERNAME_X: a\n  LT_USERNAME: b\n"

    def test_unchanged_ci_has_no_warning(self):
        """Nothing to rename, nothing to report."""
        result = ExecutionTransformer(Platform.APPLITOOLS).transform(".gitlab-ci.yml", "test:\n  script: make\n")
        assert not result.changed
        assert result.warnings == []

    def test_storybook_step_replaced(self):
        """A CI step running the vendor Storybook CLI is swapped, package names are not."""
        content = "steps:\n  - run: npm i @applitools/eyes-storybook\n  - run: npx eyes-storybook\n"
        result = ExecutionTransformer(Platform.APPLITOOLS).transform(".github/workflows/sb.yml", content)
        assert result.content == "steps:\n  - run: npm i @applitools/eyes-storybook\n  - run: npx smartui-storybook\n"
        assert result.changed


class TestStorybookPackageJson:
    def test_script_and_dependency(self):
        """percy storybook scripts and the Storybook SDK move together."""
        content = json.dumps(
            {
                "scripts": {"snapshots": "build-storybook && percy storybook ./storybook-static"},
                "devDependencies": {"@percy/cli": "^1.27.0", "@percy/storybook": "^5.0.0"},
            },
            indent=2,
        )
        data = json.loads(ExecutionTransformer(Platform.PERCY).transform("package.json", content).content)
        assert data["scripts"] == {"snapshots": "build-storybook && smartui-storybook ./storybook-static"}
        assert "@lambdatest/smartui-storybook" in data["devDependencies"]
