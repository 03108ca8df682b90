"""Tests for the typer CLI commands."""

import json

from typer.testing import CliRunner

from smartui_migrator import __version__
from smartui_migrator.apply import TransformationManager
from smartui_migrator.checkpoint import CheckpointManager, CheckpointStatus
from smartui_migrator.cli import app

runner = CliRunner()

AMBIGUOUS_PACKAGE = {
    "devDependencies": {"@percy/playwright": "^1.0.0", "@applitools/eyes-playwright": "^1.0.0"}
}


def invoke(*args):
    return runner.invoke(app, [str(a) for a in args])


def interrupt(*args, **kwargs):
    raise KeyboardInterrupt


class TestGlobalOptions:
    def test_version(self):
        """--version prints the version and exits cleanly."""
        result = invoke("--version")
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_invalid_workers(self, percy_playwright_project):
        """Out-of-range worker counts are rejected by the parser."""
        result = invoke("--workers", "0", "detect", percy_playwright_project)
        assert result.exit_code != 0


class TestDetectCommand:
    """smartui-migrator detect"""

    def test_json(self, percy_playwright_project):
        """--json prints the detection result."""
        result = invoke("detect", percy_playwright_project, "--json")
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["platform"] == "Percy"
        assert data["framework"] == "Playwright"
        assert data["files"]["config"] == [".percy.yml"]

    def test_human_readable(self, percy_playwright_project):
        """The default output names platform and framework."""
        result = invoke("detect", percy_playwright_project)
        assert result.exit_code == 0
        assert "Percy" in result.output
        assert "Playwright" in result.output

    def test_nothing_detected(self, make_project):
        """A project without evidence exits with status 1."""
        root = make_project({"README.md": "hello\n"})
        result = invoke("detect", root)
        assert result.exit_code == 1
        assert "Could not detect" in result.output

    def test_ambiguous_needs_platform(self, make_project):
        """Ambiguity fails until --platform picks a candidate."""
        root = make_project({"package.json": AMBIGUOUS_PACKAGE, "tests/a.spec.js": "test('a', () => {});\n"})
        assert invoke("detect", root).exit_code == 1

        result = invoke("detect", root, "--platform", "applitools", "--json")
        assert result.exit_code == 0
        assert json.loads(result.stdout)["platform"] == "Applitools"

    def test_all_candidates(self, make_project):
        """--all lists every candidate without resolving."""
        root = make_project({"package.json": AMBIGUOUS_PACKAGE})
        result = invoke("detect", root, "--all", "--json")
        assert result.exit_code == 0
        platforms = {c["platform"] for c in json.loads(result.stdout)}
        assert platforms == {"Percy", "Applitools"}


class TestAnalyzeCommand:
    """smartui-migrator analyze"""

    def test_json(self, percy_playwright_project):
        """--json prints detection and analysis without touching files."""
        result = invoke("analyze", percy_playwright_project, "--json")
        assert result.exit_code == 0
        analysis = json.loads(result.stdout)["analysis"]
        assert analysis["files_to_create"] == 1
        assert analysis["files_to_modify"] == 3
        assert analysis["snapshot_count"] == 1
        assert not (percy_playwright_project / ".smartui.json").exists()


class TestMigrateCommand:
    """smartui-migrator migrate"""

    def test_dry_run(self, percy_playwright_project):
        """--dry-run previews and stops."""
        result = invoke("migrate", percy_playwright_project, "--dry-run")
        assert result.exit_code == 0
        assert "Dry run" in result.output
        assert not (percy_playwright_project / ".smartui.json").exists()

    def test_migrate_and_rollback(self, percy_playwright_project):
        """A migration can be undone with the printed checkpoint id."""
        original = (percy_playwright_project / "tests/home.spec.ts").read_text()
        result = invoke("migrate", percy_playwright_project)
        assert result.exit_code == 0
        assert (percy_playwright_project / ".smartui.json").exists()
        assert "smartuiSnapshot" in (percy_playwright_project / "tests/home.spec.ts").read_text()

        (checkpoint,) = CheckpointManager(percy_playwright_project).list_checkpoints()
        assert checkpoint.status is CheckpointStatus.COMMITTED

        result = invoke("rollback", checkpoint.id, "-C", percy_playwright_project)
        assert result.exit_code == 0
        assert (percy_playwright_project / "tests/home.spec.ts").read_text() == original
        assert not (percy_playwright_project / ".smartui.json").exists()

    def test_no_backup(self, percy_playwright_project):
        """--no-backup writes without a checkpoint store."""
        result = invoke("migrate", percy_playwright_project, "--no-backup")
        assert result.exit_code == 0
        assert CheckpointManager(percy_playwright_project).list_checkpoints() == []

    def test_confirm_declined(self, percy_playwright_project):
        """Answering no to every prompt writes nothing."""
        result = runner.invoke(app, ["migrate", str(percy_playwright_project), "--confirm"], input="n\nn\nn\nn\n")
        assert result.exit_code == 0
        assert not (percy_playwright_project / ".smartui.json").exists()

    def test_interrupt_with_checkpoint(self, percy_playwright_project, monkeypatch):
        """Ctrl-C exits with 130 and says the checkpoint restored the files."""
        monkeypatch.setattr(TransformationManager, "execute_transformation", interrupt)
        result = invoke("migrate", percy_playwright_project)
        assert result.exit_code == 130
        assert "restored from the checkpoint" in result.output

    def test_interrupt_without_checkpoint(self, percy_playwright_project, monkeypatch):
        """With --no-backup nothing was restored, and the message says so."""
        monkeypatch.setattr(TransformationManager, "execute_transformation", interrupt)
        result = invoke("migrate", percy_playwright_project, "--no-backup")
        assert result.exit_code == 130
        assert "No checkpoint was taken" in result.output
        assert "restored" not in result.output


class TestCheckpointCommands:
    """checkpoints, rollback and delete-checkpoint"""

    def test_empty_list(self, percy_playwright_project):
        result = invoke("checkpoints", "-C", percy_playwright_project)
        assert result.exit_code == 0
        assert "No checkpoints found" in result.output

    def test_unknown_checkpoint(self, percy_playwright_project):
        """Rolling back an unknown id is an error."""
        result = invoke("rollback", "checkpoint_1_abc", "-C", percy_playwright_project)
        assert result.exit_code == 1
        assert "Checkpoint not found" in result.output

    def test_delete(self, percy_playwright_project):
        """A committed checkpoint can be deleted; it is then hidden from the list."""
        invoke("migrate", percy_playwright_project)
        manager = CheckpointManager(percy_playwright_project)
        (checkpoint,) = manager.list_checkpoints()

        result = invoke("delete-checkpoint", checkpoint.id, "-C", percy_playwright_project)
        assert result.exit_code == 0
        assert manager.list_checkpoints() == []
        assert manager.get_checkpoint(checkpoint.id).status is CheckpointStatus.DELETED

    def test_rollback_with_cleanup(self, percy_playwright_project):
        """--cleanup retires the checkpoint after restoring."""
        invoke("migrate", percy_playwright_project)
        manager = CheckpointManager(percy_playwright_project)
        (checkpoint,) = manager.list_checkpoints()

        result = invoke("rollback", checkpoint.id, "-C", percy_playwright_project, "--cleanup")
        assert result.exit_code == 0
        assert manager.get_checkpoint(checkpoint.id).status is CheckpointStatus.DELETED
