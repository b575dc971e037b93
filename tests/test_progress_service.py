"""
Tests for progress, notes, orphan detection and progress statistics.
"""

from datetime import datetime, timedelta, timezone

import pytest

from coursereader.application.progress_service import ProgressService
from coursereader.application.sync_service import SyncEngine
from coursereader.domain.models import Note, Progress

from conftest import make_course


@pytest.fixture
def service(store):
    return ProgressService(store)


@pytest.fixture
def synced(store, catalog):
    """Store holding c1 (ch1 with sub s1, ch2) and c2 (one chapter)."""
    catalog.courses = [
        make_course(
            "c1",
            "1.0",
            order=1,
            chapters=[
                {"id": "ch1", "title": "One", "order": 1, "subchapters": [{"id": "s1", "title": "S"}]},
                {"id": "ch2", "title": "Two", "order": 2},
            ],
        ),
        make_course("c2", "1.0", order=2),
    ]
    engine = SyncEngine(store, catalog)
    engine.sync()
    return engine


class TestCompletion:
    def test_first_toggle_creates_completed_row(self, service, store):
        progress = service.toggle_completion("c1", "ch1")
        assert progress.completed
        assert progress.last_read is not None
        assert store.get_progress("c1", "ch1").completed

    def test_second_toggle_flips(self, service):
        service.toggle_completion("c1", "ch1")
        assert not service.toggle_completion("c1", "ch1").completed
        assert not service.is_completed("c1", "ch1")

    def test_subchapter_progress_is_separate(self, service):
        service.toggle_completion("c1", "ch1", "s1")
        assert service.is_completed("c1", "ch1", "s1")
        assert not service.is_completed("c1", "ch1")

    def test_toggle_never_touches_another_courses_row(self, service, store):
        # ("a", "b-c") and ("a-b", "c") share the id "a-b-c"
        service.toggle_completion("a", "b-c")

        assert not service.is_completed("a-b", "c")
        with pytest.raises(ValueError):
            service.toggle_completion("a-b", "c")
        assert service.is_completed("a", "b-c")

    def test_set_completed(self, service):
        service.set_completed("c1", "ch1")
        assert service.is_completed("c1", "ch1")
        service.set_completed("c1", "ch1", completed=False)
        assert not service.is_completed("c1", "ch1")


class TestNotes:
    def test_blank_title_rejected(self, service):
        with pytest.raises(ValueError):
            service.add_note("c1", "   ", "body")

    def test_notes_get_random_ids(self, service):
        a = service.add_note("c1", "A")
        b = service.add_note("c1", "B")
        assert a.id != b.id

    def test_list_by_chapter_newest_first(self, service, store):
        now = datetime.now(timezone.utc)
        store.add_note(Note("c1", "Old", chapter_id="ch1", created_at=now - timedelta(days=1)))
        store.add_note(Note("c1", "New", chapter_id="ch1", created_at=now))
        store.add_note(Note("c1", "Elsewhere", chapter_id="ch2", created_at=now))

        assert [n.title for n in service.list_notes("c1", "ch1")] == ["New", "Old"]

    def test_delete_note(self, service):
        note = service.add_note("c1", "Temp")
        assert service.delete_note(note.id)
        assert service.list_notes("c1") == []


class TestOrphans:
    def test_records_for_existing_content_are_not_orphans(self, synced, service):
        progress = service.toggle_completion("c1", "ch1", "s1")
        note = service.add_note("c1", "N", chapter_id="ch2")
        assert not service.is_orphaned(progress)
        assert not service.is_orphaned(note)
        assert service.find_orphans("c1").count == 0

    def test_version_bump_orphans_removed_chapter_records(self, synced, service, catalog):
        progress = service.toggle_completion("c1", "ch2")
        note = service.add_note("c1", "About ch2", chapter_id="ch2")

        catalog.courses = [
            make_course("c1", "2.0", chapters=[{"id": "ch1", "title": "One"}])
        ]
        synced.sync()

        assert service.is_orphaned(progress)
        orphans = service.find_orphans("c1")
        assert [p.chapter_id for p in orphans.progress] == ["ch2"]
        assert [n.id for n in orphans.notes] == [note.id]

    def test_course_level_note_is_not_orphaned(self, synced, service):
        note = service.add_note("c1", "General")
        assert not service.is_orphaned(note)


class TestStatistics:
    def test_course_progress_counts_chapters_and_subchapters(self, synced, service):
        # ch1, s1, ch2 -> three items
        service.toggle_completion("c1", "ch1")
        assert service.course_progress("c1") == 33
        service.toggle_completion("c1", "ch1", "s1")
        service.toggle_completion("c1", "ch2")
        assert service.course_progress("c1") == 100

    def test_orphaned_progress_does_not_count(self, synced, service, store):
        store.upsert_progress(Progress("c1", "gone", completed=True))
        assert service.course_progress("c1") == 0

    def test_course_without_content_is_zero(self, service):
        assert service.course_progress("nothing") == 0

    def test_overall_stats(self, synced, service):
        service.toggle_completion("c1", "ch1")
        service.toggle_completion("c2", "ch1")
        stats = service.overall_stats()
        assert (stats.completed, stats.in_progress, stats.total) == (1, 1, 2)
        assert stats.to_dict() == {"completed": 1, "inProgress": 1, "total": 2}

    def test_continue_learning_prefers_recent_in_progress(self, synced, service, store):
        now = datetime.now(timezone.utc)
        store.upsert_progress(Progress("c1", "ch1", completed=True, last_read=now))
        assert service.continue_learning().id == "c1"

    def test_continue_learning_falls_back_to_first_incomplete(self, synced, service):
        service.toggle_completion("c1", "ch1")
        service.toggle_completion("c1", "ch1", "s1")
        service.toggle_completion("c1", "ch2")
        assert service.continue_learning().id == "c2"

    def test_continue_learning_empty_library(self, service):
        assert service.continue_learning() is None
