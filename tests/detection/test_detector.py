"""Tests for detection/detector.py - platform, framework and file collection."""

import pytest

from smartui_migrator.detection import Detector
from smartui_migrator.exceptions import (
    InvalidPathError,
    ManifestReadError,
    MultiplePlatformsDetectedError,
    PlatformNotDetectedError,
)
from smartui_migrator.models import Confidence, EvidenceSource, Framework, Language, Platform, TestType


class TestManifestDetection:
    """Tier 1: dependency manifests are authoritative."""

    def test_percy_playwright(self, percy_playwright_project, config):
        """@percy/playwright in package.json means Percy on Playwright."""
        result = Detector(config).detect(percy_playwright_project)
        assert result.platform is Platform.PERCY
        assert result.framework is Framework.PLAYWRIGHT
        assert result.language is Language.JAVASCRIPT
        assert result.test_type is TestType.E2E
        assert result.evidence[0].source is EvidenceSource.DEPENDENCY_MANIFEST
        assert result.evidence[0].confidence is Confidence.HIGH

    def test_collects_files_by_category(self, percy_playwright_project, config):
        """Config, source, CI and package files land in their own lists."""
        files = Detector(config).detect(percy_playwright_project).files
        assert files.config == (".percy.yml",)
        assert files.source == ("tests/home.spec.ts",)
        assert files.ci == (".github/workflows/visual.yml",)
        assert files.package == ("package.json",)

    def test_manifest_beats_config_file(self, make_project, config):
        """A config file for another vendor does not override the manifest."""
        root = make_project(
            {
                "package.json": {"devDependencies": {"@percy/cypress": "^3.1.0"}},
                "applitools.config.js": "module.exports = { appName: 'x' };\n",
            }
        )
        result = Detector(config).detect(root)
        assert result.platform is Platform.PERCY
        assert result.framework is Framework.CYPRESS

    def test_python_requirements(self, make_project, config):
        """percy-selenium in requirements.txt means Percy on Selenium/Python."""
        root = make_project(
            {
                "requirements.txt": "selenium==4.15.0\nPercy_Selenium>=2.0  # visual\n",
                "tests/test_home.py": "def test_home(driver):\n    pass\n",
            }
        )
        result = Detector(config).detect(root)
        assert (result.platform, result.framework, result.language) == (
            Platform.PERCY,
            Framework.SELENIUM,
            Language.PYTHON,
        )
        assert result.files.source == ("tests/test_home.py",)
        assert result.files.package == ("requirements.txt",)

    def test_robot_framework_gate(self, make_project, config):
        """saucelabs-visual with .robot files means Robot Framework."""
        root = make_project(
            {
                "requirements.txt": "saucelabs-visual\nrobotframework\n",
                "tests/home.robot": "*** Test Cases ***\nHome\n    Visual Snapshot    Home\n",
            }
        )
        result = Detector(config).detect(root)
        assert result.platform is Platform.SAUCE_LABS
        assert result.framework is Framework.ROBOT_FRAMEWORK
        assert "tests/home.robot" in result.files.source

    def test_sauce_python_without_robot_files(self, make_project, config):
        """Without .robot files the Selenium signature applies."""
        root = make_project({"requirements.txt": "saucelabs-visual\n"})
        assert Detector(config).detect(root).framework is Framework.SELENIUM

    def test_maven_appium_gate(self, make_project, config):
        """percy-appium-java only counts when an Appium client is declared."""
        pom = """<project xmlns="http://maven.apache.org/POM/4.0.0">
  <dependencies>
    <dependency>
      <groupId>io.percy</groupId>
      <artifactId>percy-appium-java</artifactId>
      <version>1.0.0</version>
    </dependency>
    <dependency>
      <groupId>io.appium</groupId>
      <artifactId>java-client</artifactId>
    </dependency>
  </dependencies>
</project>
"""
        root = make_project({"pom.xml": pom, "src/test/java/HomeTest.java": "class HomeTest {}\n"})
        result = Detector(config).detect(root)
        assert result.platform is Platform.PERCY
        assert result.framework is Framework.APPIUM
        assert result.language is Language.JAVA
        assert result.test_type is TestType.APPIUM
        assert result.files.source == ("src/test/java/HomeTest.java",)

    def test_storybook_requires_directory(self, make_project, config):
        """@percy/storybook without .storybook/ is not evidence."""
        root = make_project({"package.json": {"devDependencies": {"@percy/storybook": "^5.0.0"}}})
        with pytest.raises(PlatformNotDetectedError):
            Detector(config).detect(root)

    def test_malformed_manifest_raises(self, make_project, config):
        """A broken package.json is an error, not silence."""
        root = make_project({"package.json": "{ not json"})
        with pytest.raises(ManifestReadError):
            Detector(config).detect(root)


class TestConfigFileDetection:
    """Tier 2: vendor config files when no manifest evidences a platform."""

    def test_percy_config_with_cypress_layout(self, make_project, config):
        """.percy.yml plus a cypress/ tree infers Cypress."""
        root = make_project(
            {
                ".percy.yml": "version: 2\n",
                "cypress/e2e/home.cy.js": "cy.percySnapshot('Home');\n",
            }
        )
        result = Detector(config).detect(root)
        assert result.platform is Platform.PERCY
        assert result.framework is Framework.CYPRESS
        assert result.evidence[0].source is EvidenceSource.CONFIG_FILE
        assert result.evidence[0].confidence is Confidence.MEDIUM
        assert result.files.source == ("cypress/e2e/home.cy.js",)

    def test_default_framework_for_language(self, make_project, config):
        """Without structural hints the language default is used."""
        root = make_project({"saucectl.yml": "apiVersion: v1alpha\n", "pom.xml": "<project/>\n"})
        result = Detector(config).detect(root)
        assert result.platform is Platform.SAUCE_LABS
        assert result.language is Language.JAVA
        assert result.framework is Framework.SELENIUM
        assert result.evidence[1].confidence is Confidence.LOW

    def test_two_vendor_configs_are_ambiguous(self, make_project, config):
        """Config files for two vendors raise with candidates."""
        root = make_project(
            {".percy.yml": "version: 2\n", "applitools.config.js": "module.exports = {};\n"}
        )
        with pytest.raises(MultiplePlatformsDetectedError) as exc_info:
            Detector(config).detect(root)
        platforms = {c.platform for c in exc_info.value.candidates}
        assert platforms == {Platform.PERCY, Platform.APPLITOOLS}


class TestDetectionFailures:
    """No evidence, ambiguous evidence and bad roots."""

    def test_empty_project(self, make_project, config):
        """Nothing to go on raises PlatformNotDetectedError."""
        root = make_project({"README.md": "hello\n"})
        with pytest.raises(PlatformNotDetectedError):
            Detector(config).detect(root)

    def test_two_platforms_in_manifest(self, make_project, config):
        """Percy and Applitools in one package.json is ambiguous."""
        root = make_project(
            {
                "package.json": {
                    "devDependencies": {"@percy/cypress": "^3.0.0", "@applitools/eyes-cypress": "^3.0.0"}
                }
            }
        )
        with pytest.raises(MultiplePlatformsDetectedError) as exc_info:
            Detector(config).detect(root)
        assert "Percy" in str(exc_info.value)
        assert len(exc_info.value.candidates) == 2

    def test_root_must_be_directory(self, tmp_path, config):
        """A file path is not a project root."""
        target = tmp_path / "file.txt"
        target.write_text("x")
        with pytest.raises(InvalidPathError):
            Detector(config).detect(target)

    def test_ignored_directories_are_not_scanned(self, make_project, config):
        """Files under node_modules never become evidence or sources."""
        root = make_project(
            {
                "package.json": {"devDependencies": {"@percy/playwright": "^1.0.0"}},
                "node_modules/pkg/tests/a.spec.js": "percySnapshot(page, 'x');\n",
                "tests/a.spec.js": "percySnapshot(page, 'x');\n",
            }
        )
        assert Detector(config).detect(root).files.source == ("tests/a.spec.js",)


class TestCandidates:
    """Broad scan used to resolve ambiguity."""

    def test_scan_lists_every_platform(self, make_project, config):
        """scan_candidates never raises for ambiguity."""
        root = make_project(
            {
                "package.json": {
                    "devDependencies": {"@percy/playwright": "^1.0.0", "@applitools/eyes-playwright": "^1.0.0"}
                }
            }
        )
        candidates = Detector(config).scan_candidates(root)
        assert [c.platform for c in candidates] == [Platform.APPLITOOLS, Platform.PERCY]
        assert all(c.confidence is Confidence.HIGH for c in candidates)
        assert candidates[0].files == ["package.json"]

    def test_result_from_candidate(self, make_project, config):
        """A chosen candidate becomes a full result with user-selection evidence."""
        root = make_project(
            {
                "package.json": {
                    "devDependencies": {"@percy/playwright": "^1.0.0", "@applitools/eyes-playwright": "^1.0.0"}
                },
                "tests/a.spec.js": "test('a', () => {});\n",
            }
        )
        detector = Detector(config)
        chosen = next(c for c in detector.scan_candidates(root) if c.platform is Platform.PERCY)
        result = detector.result_from_candidate(root, chosen)
        assert result.platform is Platform.PERCY
        assert result.evidence[-1].source is EvidenceSource.USER_SELECTION
        assert result.files.source == ("tests/a.spec.js",)
