"""
Tests for the coursereader CLI.

Each test gets its own config dir, database file and content directory.
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from coursereader.domain.models import Progress
from coursereader.infrastructure.sqlite import DEMO_COURSE_ID, CourseStore
from coursereader.interface.cli import app

runner = CliRunner()


def write_course(content_dir: Path, course_id: str, version: str) -> None:
    folder = content_dir / course_id
    (folder / "chapters").mkdir(parents=True, exist_ok=True)
    (folder / "metadata.json").write_text(
        json.dumps(
            {
                "id": course_id,
                "title": course_id.title(),
                "version": version,
                "chapters": [{"id": "intro", "title": "Intro", "order": 1, "file": "intro.md"}],
            }
        ),
        encoding="utf-8",
    )
    (folder / "chapters" / "intro.md").write_text("# Intro", encoding="utf-8")


@pytest.fixture
def workspace(tmp_path):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "coursereader.json").write_text(
        json.dumps({"seed_demo_course": False}), encoding="utf-8"
    )
    content_dir = tmp_path / "courses"
    content_dir.mkdir()
    return {
        "config": config_dir,
        "db": tmp_path / "data" / "courses.db",
        "content": content_dir,
    }


def invoke(workspace, *args, **kwargs):
    options = [
        "--config-dir", str(workspace["config"]),
        "--db", str(workspace["db"]),
        "--content-dir", str(workspace["content"]),
    ]
    return runner.invoke(app, [*options, *args], **kwargs)


def stored_ids(workspace) -> list[str]:
    store = CourseStore(workspace["db"])
    try:
        return [c.id for c in store.list_courses()]
    finally:
        store.close()


class TestSyncCommand:
    def test_sync_imports_courses(self, workspace):
        write_course(workspace["content"], "python", "1.0")

        result = invoke(workspace, "sync")

        assert result.exit_code == 0, result.output
        assert "Sync complete" in result.output
        assert stored_ids(workspace) == ["python"]

    def test_second_sync_leaves_progress_alone(self, workspace):
        write_course(workspace["content"], "python", "1.0")
        invoke(workspace, "sync")

        store = CourseStore(workspace["db"])
        store.upsert_progress(Progress("python", "intro", completed=True))
        store.close()

        write_course(workspace["content"], "python", "2.0")
        assert invoke(workspace, "sync").exit_code == 0

        store = CourseStore(workspace["db"])
        try:
            assert store.get_course("python").version == "2.0"
            assert store.get_progress("python", "intro").completed
        finally:
            store.close()

    def test_unreadable_catalog_exits_nonzero(self, workspace):
        not_a_dir = workspace["content"].parent / "file.txt"
        not_a_dir.write_text("x")

        result = runner.invoke(
            app,
            [
                "--config-dir", str(workspace["config"]),
                "--db", str(workspace["db"]),
                "--content-dir", str(not_a_dir),
                "sync",
            ],
        )

        assert result.exit_code == 1
        assert "Sync error" in result.output


class TestOtherCommands:
    def test_status(self, workspace):
        result = invoke(workspace, "status")
        assert result.exit_code == 0, result.output
        assert "v2)" in result.output

    def test_courses_empty(self, workspace):
        result = invoke(workspace, "courses")
        assert result.exit_code == 0
        assert "No courses yet" in result.output

    def test_remove_with_yes(self, workspace):
        write_course(workspace["content"], "python", "1.0")
        invoke(workspace, "sync")

        result = invoke(workspace, "remove", "python", "--yes")

        assert result.exit_code == 0, result.output
        assert stored_ids(workspace) == []

    def test_remove_declined_keeps_course(self, workspace):
        write_course(workspace["content"], "python", "1.0")
        invoke(workspace, "sync")

        result = invoke(workspace, "remove", "python", input="n\n")

        assert result.exit_code == 1
        assert stored_ids(workspace) == ["python"]

    def test_remove_unknown_course(self, workspace):
        result = invoke(workspace, "remove", "ghost", "-y")
        assert result.exit_code == 1

    def test_import_single_course(self, workspace):
        write_course(workspace["content"], "python", "1.0")
        write_course(workspace["content"], "rust", "1.0")

        result = invoke(workspace, "import", "rust")

        assert result.exit_code == 0, result.output
        assert stored_ids(workspace) == ["rust"]

    def test_import_unknown_course(self, workspace):
        write_course(workspace["content"], "python", "1.0")

        result = invoke(workspace, "import", "ghost")

        assert result.exit_code == 1
        assert "not in catalog" in result.output
        assert stored_ids(workspace) == []

    def test_progress_reports_stats_and_orphans(self, workspace):
        write_course(workspace["content"], "python", "1.0")
        invoke(workspace, "sync")

        store = CourseStore(workspace["db"])
        store.upsert_progress(Progress("python", "intro", completed=True))
        store.upsert_progress(Progress("python", "gone", completed=True))
        store.close()

        result = invoke(workspace, "progress")

        assert result.exit_code == 0, result.output
        assert "1 completed" in result.output
        assert "Continue learning" in result.output
        assert "removed content" in result.output

    def test_seed_is_idempotent(self, workspace):
        first = invoke(workspace, "seed")
        second = invoke(workspace, "seed")

        assert first.exit_code == 0 and second.exit_code == 0
        assert "already exists" in second.output
        assert stored_ids(workspace) == [DEMO_COURSE_ID]

    def test_new_database_is_seeded_when_enabled(self, workspace):
        (workspace["config"] / "coursereader.json").write_text("{}", encoding="utf-8")

        assert invoke(workspace, "status").exit_code == 0
        assert stored_ids(workspace) == [DEMO_COURSE_ID]

    def test_invalid_settings_file(self, workspace):
        (workspace["config"] / "coursereader.json").write_text("{oops", encoding="utf-8")

        result = invoke(workspace, "status")

        assert result.exit_code == 1
        assert "Error" in result.output
