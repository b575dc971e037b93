"""
Tests for the filesystem catalog reader.
"""

import json
import shutil
import tempfile
import unittest
from pathlib import Path

from coursereader.domain.errors import CatalogUnavailable
from coursereader.infrastructure.catalog import FilesystemCatalogReader


def write_course(root: Path, folder: str, metadata: dict, files: dict | None = None) -> Path:
    course_dir = root / folder
    chapters = course_dir / "chapters"
    chapters.mkdir(parents=True)
    (course_dir / "metadata.json").write_text(json.dumps(metadata), encoding="utf-8")
    for name, text in (files or {}).items():
        (chapters / name).write_text(text, encoding="utf-8")
    return course_dir


class TestFilesystemCatalogReader(unittest.TestCase):
    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.root = self.temp_dir / "courses"
        self.root.mkdir()
        self.reader = FilesystemCatalogReader(self.root)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_loads_course_with_chapters_and_subchapters(self):
        write_course(
            self.root,
            "python",
            {
                "id": "python",
                "title": "Python",
                "description": "Learn Python",
                "version": "1.2",
                "estimatedHours": 6,
                "parts": [{"id": "basics", "title": "Basics", "order": 1}],
                "chapters": [
                    {
                        "id": "intro",
                        "title": "Intro",
                        "part": "basics",
                        "order": 1,
                        "file": "01-intro.md",
                        "subchapters": [
                            {"id": "b", "title": "B", "order": 2, "file": "01b.md"},
                            {"id": "a", "title": "A", "order": 1, "file": "01a.md"},
                        ],
                    }
                ],
            },
            {"01-intro.md": "# Intro", "01a.md": "# A", "01b.md": "# B"},
        )

        courses = self.reader.list_available_courses()

        self.assertEqual(len(courses), 1)
        course = courses[0]
        self.assertEqual(course.version, "1.2")
        self.assertEqual(course.estimated_hours, 6)
        self.assertEqual(course.parts[0].id, "basics")
        chapter = course.chapters_content[0]
        self.assertEqual(chapter.part_id, "basics")
        self.assertEqual(chapter.content, "# Intro")
        self.assertEqual([s.id for s in chapter.subchapters], ["a", "b"])

    def test_missing_chapter_file_gives_empty_content(self):
        write_course(
            self.root,
            "c",
            {
                "id": "c",
                "title": "C",
                "chapters": [{"id": "ch1", "title": "One", "file": "missing.md"}],
            },
        )
        chapter = self.reader.list_available_courses()[0].chapters_content[0]
        self.assertEqual(chapter.content, "")

    def test_missing_subchapter_file_drops_subchapter(self):
        write_course(
            self.root,
            "c",
            {
                "id": "c",
                "title": "C",
                "chapters": [
                    {
                        "id": "ch1",
                        "title": "One",
                        "file": "one.md",
                        "subchapters": [
                            {"id": "s1", "title": "S1", "file": "s1.md"},
                            {"id": "s2", "title": "S2", "file": "gone.md"},
                        ],
                    }
                ],
            },
            {"one.md": "x", "s1.md": "y"},
        )
        chapter = self.reader.list_available_courses()[0].chapters_content[0]
        self.assertEqual([s.id for s in chapter.subchapters], ["s1"])

    def test_broken_metadata_skips_only_that_course(self):
        write_course(self.root, "good", {"id": "good", "title": "Good"})
        bad = self.root / "bad" / "chapters"
        bad.mkdir(parents=True)
        (self.root / "bad" / "metadata.json").write_text("{not json", encoding="utf-8")

        courses = self.reader.list_available_courses()
        self.assertEqual([c.id for c in courses], ["good"])

    def test_folders_without_metadata_or_chapters_are_ignored(self):
        (self.root / "empty").mkdir()
        no_chapters = self.root / "no-chapters"
        no_chapters.mkdir()
        (no_chapters / "metadata.json").write_text('{"id": "x", "title": "X"}')

        self.assertEqual(self.reader.list_available_courses(), [])

    def test_courses_sorted_by_order_missing_last(self):
        write_course(self.root, "a", {"id": "a", "title": "A", "order": 2})
        write_course(self.root, "b", {"id": "b", "title": "B"})
        write_course(self.root, "c", {"id": "c", "title": "C", "order": 1})

        ids = [c.id for c in self.reader.list_available_courses()]
        self.assertEqual(ids, ["c", "a", "b"])

    def test_missing_root_is_empty_catalog(self):
        reader = FilesystemCatalogReader(self.temp_dir / "nowhere")
        self.assertEqual(reader.list_available_courses(), [])

    def test_root_that_is_a_file_is_unavailable(self):
        path = self.temp_dir / "file.txt"
        path.write_text("x")
        with self.assertRaises(CatalogUnavailable):
            FilesystemCatalogReader(path).list_available_courses()


if __name__ == "__main__":
    unittest.main()
