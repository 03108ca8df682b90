"""Dependency, module and environment mapping tables.

Single source of truth for which package names identify a platform and what
each one becomes on SmartUI. Pure data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..models import Framework, Language, Platform

MIGRATION_VERSION = "1.5.0"

# ---------------------------------------------------------------------------
# npm packages
# ---------------------------------------------------------------------------

NPM_PACKAGE_MAPPINGS: dict[Platform, dict[str, str]] = {
    Platform.PERCY: {
        "@percy/cli": "@lambdatest/smartui-cli",
        "@percy/cypress": "@lambdatest/smartui-cypress",
        "@percy/playwright": "@lambdatest/smartui-playwright",
        "@percy/selenium-webdriver": "@lambdatest/smartui-selenium",
        "@percy/storybook": "@lambdatest/smartui-storybook",
        "@percy/appium-app": "@lambdatest/smartui-appium",
        "@percy/automate": "@lambdatest/smartui-automate",
        "@percy/puppeteer": "@lambdatest/smartui-puppeteer",
        "@percy/agent": "@lambdatest/smartui-cli",
        "@percy/sdk": "@lambdatest/smartui-cli",
    },
    Platform.APPLITOOLS: {
        "@applitools/eyes-selenium": "@lambdatest/smartui-selenium",
        "@applitools/eyes-cypress": "@lambdatest/smartui-cypress",
        "@applitools/eyes-playwright": "@lambdatest/smartui-playwright",
        "@applitools/eyes-storybook": "@lambdatest/smartui-storybook",
        "@applitools/eyes-webdriverio": "@lambdatest/smartui-webdriverio",
        "@applitools/eyes-puppeteer": "@lambdatest/smartui-puppeteer",
        "@applitools/eyes": "@lambdatest/smartui-cli",
        "@applitools/eyes-api": "@lambdatest/smartui-cli",
    },
    Platform.SAUCE_LABS: {
        "@saucelabs/cypress-plugin": "@lambdatest/smartui-cypress",
        "@saucelabs/cypress-visual-plugin": "@lambdatest/smartui-cypress",
        "@saucelabs/webdriverio": "@lambdatest/smartui-selenium",
        "@saucelabs/playwright-plugin": "@lambdatest/smartui-playwright",
        "@saucelabs/sauce-cypress-runner": "@lambdatest/smartui-cypress",
        "@saucelabs/sauce-playwright-runner": "@lambdatest/smartui-playwright",
        "screener-storybook": "@lambdatest/smartui-storybook",
        "saucectl": "@lambdatest/smartui-cli",
    },
}

# ---------------------------------------------------------------------------
# Maven coordinates (groupId:artifactId) and pip distributions
# ---------------------------------------------------------------------------

MAVEN_PACKAGE_MAPPINGS: dict[Platform, dict[str, str]] = {
    Platform.PERCY: {
        "io.percy:percy-java-selenium": "io.github.lambdatest:lambdatest-java-sdk",
        "io.percy:percy-appium-java": "io.github.lambdatest:lambdatest-java-sdk",
    },
    Platform.APPLITOOLS: {
        "com.applitools:eyes-selenium-java5": "io.github.lambdatest:lambdatest-java-sdk",
        "com.applitools:eyes-appium-java5": "io.github.lambdatest:lambdatest-java-sdk",
    },
    Platform.SAUCE_LABS: {
        "com.saucelabs.visual:java-client": "io.github.lambdatest:lambdatest-java-sdk",
    },
}

# Keys are PEP 503 normalized
PIP_PACKAGE_MAPPINGS: dict[Platform, dict[str, str]] = {
    Platform.PERCY: {
        "percy-selenium": "lambdatest-selenium-driver",
        "percy-appium-app": "lambdatest-selenium-driver",
    },
    Platform.APPLITOOLS: {
        "eyes-selenium": "lambdatest-selenium-driver",
    },
    Platform.SAUCE_LABS: {
        "saucelabs-visual": "lambdatest-selenium-driver",
    },
}

# ---------------------------------------------------------------------------
# Module references inside source files
# ---------------------------------------------------------------------------

PYTHON_TARGET_MODULE = "lambdatest_selenium_driver"

PYTHON_MODULE_MAPPINGS: dict[Platform, dict[str, str]] = {
    Platform.PERCY: {
        "percy": PYTHON_TARGET_MODULE,
        "percy.selenium": PYTHON_TARGET_MODULE,
        "percy.snapshot": PYTHON_TARGET_MODULE,
    },
    Platform.APPLITOOLS: {
        "applitools": PYTHON_TARGET_MODULE,
        "applitools.selenium": PYTHON_TARGET_MODULE,
        "applitools.common": PYTHON_TARGET_MODULE,
    },
    Platform.SAUCE_LABS: {
        "saucelabs_visual": PYTHON_TARGET_MODULE,
        "saucelabs_visual.client": PYTHON_TARGET_MODULE,
        "saucelabs": PYTHON_TARGET_MODULE,
    },
}

JAVA_TARGET_IMPORT = "io.github.lambdatest.SmartUISnapshot"

# Entries ending in ".*" cover every class of that package
JAVA_IMPORT_MAPPINGS: dict[Platform, dict[str, str]] = {
    Platform.PERCY: {
        "io.percy.selenium.Percy": JAVA_TARGET_IMPORT,
        "io.percy.appium.AppPercy": JAVA_TARGET_IMPORT,
        "io.percy.selenium.*": JAVA_TARGET_IMPORT,
        "io.percy.appium.*": JAVA_TARGET_IMPORT,
    },
    Platform.APPLITOOLS: {
        "com.applitools.eyes.selenium.Eyes": JAVA_TARGET_IMPORT,
        "com.applitools.eyes.appium.Eyes": JAVA_TARGET_IMPORT,
        "com.applitools.eyes.selenium.fluent.Target": JAVA_TARGET_IMPORT,
        "com.applitools.eyes.selenium.ClassicRunner": JAVA_TARGET_IMPORT,
        "com.applitools.eyes.visualgrid.services.VisualGridRunner": JAVA_TARGET_IMPORT,
        "com.applitools.eyes.BatchInfo": JAVA_TARGET_IMPORT,
        "com.applitools.eyes.selenium.*": JAVA_TARGET_IMPORT,
        "com.applitools.eyes.*": JAVA_TARGET_IMPORT,
    },
    Platform.SAUCE_LABS: {
        "com.saucelabs.visual.VisualApi": JAVA_TARGET_IMPORT,
        "com.saucelabs.visual.CheckOptions": JAVA_TARGET_IMPORT,
        "com.saucelabs.visual.*": JAVA_TARGET_IMPORT,
    },
}

# Imported names: a string renames the symbol, None drops it
JS_SYMBOL_RENAMES: dict[Platform, dict[str, Optional[str]]] = {
    Platform.PERCY: {"percySnapshot": "smartuiSnapshot", "percyScreenshot": "smartuiSnapshot"},
    Platform.APPLITOOLS: {
        "Eyes": None,
        "Target": None,
        "ClassicRunner": None,
        "VisualGridRunner": None,
        "BatchInfo": None,
        "Configuration": None,
    },
    Platform.SAUCE_LABS: {"sauceVisualCheck": "smartuiSnapshot"},
}

PYTHON_SYMBOL_RENAMES: dict[Platform, dict[str, Optional[str]]] = {
    Platform.PERCY: {"percy_snapshot": "smartui_snapshot", "percy_screenshot": "smartui_snapshot"},
    Platform.APPLITOOLS: {
        "Eyes": None,
        "Target": None,
        "ClassicRunner": None,
        "VisualGridRunner": None,
        "BatchInfo": None,
    },
    Platform.SAUCE_LABS: {"SauceLabsVisual": None},
}

# ---------------------------------------------------------------------------
# Environment variables (CI files and .env)
# ---------------------------------------------------------------------------

ENV_VAR_MAPPINGS: dict[Platform, dict[str, str]] = {
    Platform.PERCY: {
        "PERCY_TOKEN": "PROJECT_TOKEN",
        "PERCY_BRANCH": "LT_BRANCH",
        "PERCY_PROJECT": "LT_PROJECT",
    },
    Platform.APPLITOOLS: {
        "APPLITOOLS_API_KEY": "PROJECT_TOKEN",
        "APPLITOOLS_BATCH_ID": "LT_BATCH_ID",
        "APPLITOOLS_BRANCH_NAME": "LT_BRANCH",
    },
    Platform.SAUCE_LABS: {
        "SAUCE_USERNAME": "LT_USERNAME",
        "SAUCE_ACCESS_KEY": "LT_ACCESS_KEY",
        "SAUCE_REGION": "LT_REGION",
    },
}

# ---------------------------------------------------------------------------
# Storybook runners (package scripts and CI steps)
# ---------------------------------------------------------------------------

STORYBOOK_RUNNER = "smartui-storybook"

STORYBOOK_COMMAND_MAPPINGS: dict[Platform, dict[str, str]] = {
    Platform.PERCY: {"percy storybook": STORYBOOK_RUNNER},
    Platform.APPLITOOLS: {"eyes-storybook": STORYBOOK_RUNNER},
    Platform.SAUCE_LABS: {"screener-storybook": STORYBOOK_RUNNER},
}

# ---------------------------------------------------------------------------
# Detection signatures
# ---------------------------------------------------------------------------

NPM = "npm"
MAVEN = "maven"
PIP = "pip"

ECOSYSTEM_LANGUAGE: dict[str, Language] = {
    NPM: Language.JAVASCRIPT,
    MAVEN: Language.JAVA,
    PIP: Language.PYTHON,
}

ECOSYSTEM_MANIFEST: dict[str, str] = {
    NPM: "package.json",
    MAVEN: "pom.xml",
    PIP: "requirements.txt",
}

APPIUM_MAVEN = ("io.appium:java-client", "io.appium:appium-java-client")
APPIUM_PIP = ("appium-python-client",)


@dataclass(frozen=True)
class Signature:
    """A dependency that identifies a platform and framework.

    Gates: the signature only applies when `requires_dir` exists under the
    project root, any of `requires_any` is also declared, none of
    `excludes_any` is declared, and (if set) `requires_glob` matches a file.
    """

    ecosystem: str
    package: str
    platform: Platform
    framework: Framework
    requires_dir: Optional[str] = None
    requires_any: tuple[str, ...] = ()
    excludes_any: tuple[str, ...] = ()
    requires_glob: Optional[str] = None

    @property
    def language(self) -> Language:
        return ECOSYSTEM_LANGUAGE[self.ecosystem]


# Order matters: the first signature per platform wins its framework
SIGNATURES: tuple[Signature, ...] = (
    # npm
    Signature(NPM, "@percy/cypress", Platform.PERCY, Framework.CYPRESS),
    Signature(NPM, "@percy/playwright", Platform.PERCY, Framework.PLAYWRIGHT),
    Signature(NPM, "@percy/storybook", Platform.PERCY, Framework.STORYBOOK, requires_dir=".storybook"),
    Signature(NPM, "@percy/selenium-webdriver", Platform.PERCY, Framework.SELENIUM),
    Signature(NPM, "@applitools/eyes-cypress", Platform.APPLITOOLS, Framework.CYPRESS),
    Signature(NPM, "@applitools/eyes-playwright", Platform.APPLITOOLS, Framework.PLAYWRIGHT),
    Signature(
        NPM, "@applitools/eyes-storybook", Platform.APPLITOOLS, Framework.STORYBOOK,
        requires_dir=".storybook",
    ),
    Signature(NPM, "@applitools/eyes-selenium", Platform.APPLITOOLS, Framework.SELENIUM),
    Signature(NPM, "@saucelabs/cypress-visual-plugin", Platform.SAUCE_LABS, Framework.CYPRESS),
    Signature(NPM, "screener-storybook", Platform.SAUCE_LABS, Framework.STORYBOOK, requires_dir=".storybook"),
    # maven
    Signature(MAVEN, "io.percy:percy-appium-java", Platform.PERCY, Framework.APPIUM, requires_any=APPIUM_MAVEN),
    Signature(MAVEN, "io.percy:percy-java-selenium", Platform.PERCY, Framework.SELENIUM),
    Signature(MAVEN, "com.applitools:eyes-selenium-java5", Platform.APPLITOOLS, Framework.SELENIUM),
    Signature(
        MAVEN, "com.applitools:eyes-appium-java5", Platform.APPLITOOLS, Framework.APPIUM,
        requires_any=APPIUM_MAVEN,
    ),
    Signature(
        MAVEN, "com.saucelabs.visual:java-client", Platform.SAUCE_LABS, Framework.APPIUM,
        requires_any=APPIUM_MAVEN,
    ),
    Signature(
        MAVEN, "com.saucelabs.visual:java-client", Platform.SAUCE_LABS, Framework.SELENIUM,
        excludes_any=APPIUM_MAVEN,
    ),
    # pip
    Signature(PIP, "percy-appium-app", Platform.PERCY, Framework.APPIUM, requires_any=APPIUM_PIP),
    Signature(PIP, "percy-selenium", Platform.PERCY, Framework.SELENIUM),
    Signature(PIP, "eyes-selenium", Platform.APPLITOOLS, Framework.APPIUM, requires_any=APPIUM_PIP),
    Signature(PIP, "eyes-selenium", Platform.APPLITOOLS, Framework.SELENIUM, excludes_any=APPIUM_PIP),
    Signature(PIP, "saucelabs-visual", Platform.SAUCE_LABS, Framework.APPIUM, requires_any=APPIUM_PIP),
    Signature(
        PIP, "saucelabs-visual", Platform.SAUCE_LABS, Framework.ROBOT_FRAMEWORK,
        excludes_any=APPIUM_PIP, requires_glob="**/*.robot",
    ),
    Signature(PIP, "saucelabs-visual", Platform.SAUCE_LABS, Framework.SELENIUM, excludes_any=APPIUM_PIP),
)

# ---------------------------------------------------------------------------
# Platform configuration files (tier 2)
# ---------------------------------------------------------------------------

CONFIG_FILES: dict[Platform, tuple[str, ...]] = {
    Platform.PERCY: (
        ".percy.yml",
        ".percy.yaml",
        ".percy.js",
        ".percy.json",
        "percy.config.js",
        "percy.config.ts",
    ),
    Platform.APPLITOOLS: ("applitools.config.js", "applitools.config.ts"),
    Platform.SAUCE_LABS: ("saucectl.yml", ".sauce/config.yml", "sauce.config.js", "sauce.config.ts"),
}

SMARTUI_CONFIG_FILE = ".smartui.json"

# Files a migration may introduce; removed again by cleanup after rollback
GENERATED_ARTIFACTS: tuple[str, ...] = (
    SMARTUI_CONFIG_FILE,
    ".env.smartui",
    "setup-smartui.sh",
    "test-smartui.sh",
    "cleanup-smartui.sh",
    "validate-smartui.sh",
    ".github/workflows/smartui.yml",
)
