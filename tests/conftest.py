"""Shared test fixtures for SmartUI migrator tests."""

import json

import pytest

from smartui_migrator.config import MigrationConfig


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def write_files(root, files):
    """Write {relative path: content} under root, creating directories."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if not isinstance(content, str):
            content = json.dumps(content, indent=2) + "\n"
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_project(tmp_path):
    """Factory: build a project directory from a file map."""

    def _make(files, name="shop-app"):
        root = tmp_path / name
        root.mkdir(exist_ok=True)
        return write_files(root, files)

    return _make


@pytest.fixture
def config():
    """Small, deterministic config."""
    return MigrationConfig(workers=2)


PERCY_PLAYWRIGHT_SPEC = """\
import { test } from '@playwright/test';
import percySnapshot from '@percy/playwright';

test('home page', async ({ page }) => {
  await page.goto('https://example.com');
  await percySnapshot(page, 'Home page');
});
"""

PERCY_PACKAGE_JSON = {
    "name": "shop-app",
    "scripts": {"test:visual": "percy exec -- playwright test"},
    "devDependencies": {"@percy/cli": "^1.27.0", "@percy/playwright": "^1.0.4", "@playwright/test": "^1.40.0"},
}

PERCY_CONFIG = """\
version: 2
snapshot:
  widths: [375, 1280]
  min-height: 1024
"""

CI_WORKFLOW = """\
name: visual
on: [push]
jobs:
  test:
    runs-on: ubuntu-latest
    env:
      PERCY_TOKEN: ${{ secrets.PERCY_TOKEN }}
    steps:
      - run: npx percy exec -- npx playwright test
"""


@pytest.fixture
def percy_playwright_project(make_project):
    """Percy + Playwright project with config, spec, package and CI files."""
    return make_project(
        {
            "package.json": PERCY_PACKAGE_JSON,
            ".percy.yml": PERCY_CONFIG,
            "tests/home.spec.ts": PERCY_PLAYWRIGHT_SPEC,
            ".github/workflows/visual.yml": CI_WORKFLOW,
            "README.md": "# shop\n",
        }
    )
