"""
Tests for catalog document models and sync classification.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from coursereader.domain.catalog import AvailableCourse, sort_by_order
from coursereader.domain.sync_types import (
    CourseAction,
    SyncReport,
    SyncStatus,
    classify_course,
)


class TestAvailableCourse:
    def test_accepts_camel_case_wire_format(self):
        course = AvailableCourse.model_validate(
            {
                "id": "c1",
                "title": "Course",
                "estimatedHours": 4.5,
                "chaptersContent": [
                    {"id": "ch1", "title": "One", "partId": "p1", "content": "x"}
                ],
            }
        )
        assert course.estimated_hours == 4.5
        assert course.chapters_content[0].part_id == "p1"

    def test_accepts_snake_case_names(self):
        course = AvailableCourse(id="c1", title="Course", estimated_hours=2)
        assert course.estimated_hours == 2

    def test_numeric_version_becomes_string(self):
        course = AvailableCourse.model_validate({"id": "c1", "title": "C", "version": 1.0})
        assert course.version == "1.0"

    def test_empty_version_is_unversioned(self):
        course = AvailableCourse(id="c1", title="C", version="")
        assert not course.has_version

    def test_blank_id_rejected(self):
        with pytest.raises(ValidationError):
            AvailableCourse(id="", title="C")

    def test_to_wire_uses_camel_case_and_drops_none(self):
        course = AvailableCourse(id="c1", title="C", estimated_hours=3)
        wire = course.to_wire()
        assert wire["estimatedHours"] == 3
        assert wire["chaptersContent"] == []
        assert "version" not in wire


class TestSortByOrder:
    def test_missing_order_sorts_last(self):
        courses = [
            AvailableCourse(id="a", title="A", order=2),
            AvailableCourse(id="b", title="B"),
            AvailableCourse(id="c", title="C", order=1),
        ]
        assert [c.order for c in sort_by_order(courses)] == [1, 2, None]

    def test_equal_orders_keep_input_order(self):
        courses = [
            AvailableCourse(id="x", title="X", order=5),
            AvailableCourse(id="y", title="Y", order=5),
        ]
        assert [c.id for c in sort_by_order(courses)] == ["x", "y"]


class TestClassifyCourse:
    def test_absent_course_is_new(self):
        course = AvailableCourse(id="c1", title="C", version="1.0")
        assert classify_course(course, {}) is CourseAction.NEW

    def test_different_version_is_changed(self):
        course = AvailableCourse(id="c1", title="C", version="2.0")
        assert classify_course(course, {"c1": "1.0"}) is CourseAction.CHANGED

    def test_versioned_over_unversioned_is_changed(self):
        course = AvailableCourse(id="c1", title="C", version="1.0")
        assert classify_course(course, {"c1": None}) is CourseAction.CHANGED

    def test_same_version_is_unchanged(self):
        course = AvailableCourse(id="c1", title="C", version="1.0")
        assert classify_course(course, {"c1": "1.0"}) is CourseAction.UNCHANGED

    def test_unversioned_catalog_course_never_changes(self):
        course = AvailableCourse(id="c1", title="C")
        assert classify_course(course, {"c1": "1.0"}) is CourseAction.UNCHANGED
        assert classify_course(course, {"c1": None}) is CourseAction.UNCHANGED


class TestSyncReport:
    def test_to_dict_uses_camel_case(self):
        ts = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        report = SyncReport(timestamp=ts, new_courses_imported=1, courses_updated=2)
        data = report.to_dict()
        assert data["newCoursesImported"] == 1
        assert data["coursesUpdated"] == 2
        assert data["timestamp"] == "2025-01-02T03:04:05+00:00"
        assert data["error"] is None
        assert report.ok
        assert report.changes == 3

    def test_error_report_not_ok(self):
        report = SyncReport(timestamp=datetime.now(timezone.utc), error="boom")
        assert not report.ok

    def test_default_status_is_idle(self):
        assert not SyncStatus().syncing
