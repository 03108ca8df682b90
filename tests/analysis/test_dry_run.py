"""Tests for analysis/dry_run.py - side-effect-free migration preview."""

import json

import pytest

from smartui_migrator.analysis import ANALYSIS_PATH, DryRunAnalyzer
from smartui_migrator.config import MigrationConfig
from smartui_migrator.detection import Detector
from smartui_migrator.models import ChangeType


def snapshot_tree(root):
    """{relative path: bytes} for every file under root."""
    return {p.relative_to(root).as_posix(): p.read_bytes() for p in sorted(root.rglob("*")) if p.is_file()}


@pytest.fixture
def detection(percy_playwright_project, config):
    return Detector(config).detect(percy_playwright_project)


class TestDryRunPreview:
    """What the preview reports for a Percy/Playwright project."""

    def test_counts(self, detection, config):
        """One config file is created, spec, manifest and CI are modified."""
        result = DryRunAnalyzer(config).analyze(detection)
        assert result.files_to_create == 1
        assert result.files_to_modify == 3
        assert result.snapshot_count == 1

    def test_changes_in_file_order(self, detection, config):
        """Config first, then sources, then package and CI files."""
        result = DryRunAnalyzer(config).analyze(detection)
        structural = [(c.file_path, c.type, c.description) for c in result.changes if c.type is not ChangeType.INFO]
        assert structural == [
            (".smartui.json", ChangeType.CREATE, "Generated SmartUI configuration from .percy.yml"),
            ("tests/home.spec.ts", ChangeType.MODIFY, "Transform 1 snapshot(s) using TypeScript transformer"),
            ("package.json", ChangeType.MODIFY, "Update dependencies for SmartUI"),
            (".github/workflows/visual.yml", ChangeType.MODIFY, "Update CI configuration for SmartUI"),
        ]

    def test_warnings_are_listed_as_info(self, detection, config):
        """Every warning also appears as an INFO change."""
        result = DryRunAnalyzer(config).analyze(detection)
        info = [c for c in result.changes if c.type is ChangeType.INFO]
        assert len(info) == len(result.warnings) == 1
        assert info[0].file_path == ANALYSIS_PATH
        assert info[0].description.startswith(".github/workflows/visual.yml: ")

    def test_planned_writes(self, detection, config):
        """Planned content is what apply will write, in phase order."""
        result = DryRunAnalyzer(config).analyze(detection)
        assert result.paths_to_write == [
            ".smartui.json",
            "tests/home.spec.ts",
            "package.json",
            ".github/workflows/visual.yml",
        ]
        smartui = json.loads(result.planned_writes[0].content)
        assert smartui["projectName"] == "shop-app"
        assert smartui["web"]["viewports"] == [[375], [1280]]
        assert "smartuiSnapshot(page, 'Home page')" in result.planned_writes[1].content


class TestDryRunPurity:
    """Analysis never touches the project."""

    def test_no_files_written(self, detection, percy_playwright_project, config):
        """The tree is byte-identical after a dry run."""
        before = snapshot_tree(percy_playwright_project)
        DryRunAnalyzer(config).analyze(detection)
        assert snapshot_tree(percy_playwright_project) == before
        assert not (percy_playwright_project / ".smartui.json").exists()
        assert not (percy_playwright_project / config.checkpoint_dir).exists()

    def test_deterministic(self, detection):
        """Repeated runs with different pool sizes give identical output."""
        first = DryRunAnalyzer(MigrationConfig(workers=1)).analyze(detection).to_dict()
        second = DryRunAnalyzer(MigrationConfig(workers=8)).analyze(detection).to_dict()
        assert first == second


class TestDryRunDegradation:
    """Per-file failures become warnings."""

    def test_oversized_files_are_skipped(self, detection):
        """Files above the size limit are reported, not fatal."""
        tiny = MigrationConfig(workers=2, max_file_size_mb=0.00001)
        result = DryRunAnalyzer(tiny).analyze(detection)
        assert result.planned_writes == []
        assert result.files_to_create == 0
        assert len(result.warnings) == 4
        assert all(w.message.startswith("Could not analyze ") for w in result.warnings)

    def test_extra_config_files_warn(self, make_project, config):
        """Only the first config file generates .smartui.json."""
        root = make_project(
            {
                "package.json": {"devDependencies": {"@percy/cypress": "^3.0.0"}},
                ".percy.yml": "version: 2\n",
                ".percy.json": '{"version": 2}',
            }
        )
        result = DryRunAnalyzer(config).analyze(Detector(config).detect(root))
        assert result.files_to_create == 1
        assert any("was not merged" in w.message for w in result.warnings)

    def test_failing_file_does_not_hide_others(self, make_project, config, monkeypatch):
        """A rewriter error in one source leaves the other previews intact."""
        from smartui_migrator.transform import engine as engine_module

        real_rewrite = engine_module.Rewriter.rewrite

        def flaky(self, source, root):
            if b"Checkout" in source:
                raise RuntimeError("unexpected node")
            return real_rewrite(self, source, root)

        monkeypatch.setattr(engine_module.Rewriter, "rewrite", flaky)
        spec = "import percySnapshot from '@percy/playwright';\nawait percySnapshot(page, '{name}');\n"
        root = make_project(
            {
                "package.json": {"devDependencies": {"@percy/playwright": "^1.0.4"}},
                "tests/checkout.spec.js": spec.format(name="Checkout"),
                "tests/home.spec.js": spec.format(name="Home"),
            }
        )
        result = DryRunAnalyzer(config).analyze(Detector(config).detect(root))
        assert "tests/home.spec.js" in result.paths_to_write
        assert "tests/checkout.spec.js" not in result.paths_to_write
        failures = [w for w in result.warnings if w.message.startswith("Failed to rewrite source code")]
        assert [w.file for w in failures] == ["tests/checkout.spec.js"]
