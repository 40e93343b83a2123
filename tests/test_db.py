"""Tests for trackademic.data.db — AssignmentDB (SQLite storage)."""

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from trackademic.data.db import AssignmentDB
from trackademic.data.models import REMINDER_1H, REMINDER_24H, Threshold


def _add(db, student, due_in, title="Essay", now=None, **kwargs):
    now = now or datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)
    return db.add_assignment(
        user_id=student.id,
        title=title,
        course="HIST 200",
        deadline=now + due_in,
        **kwargs,
    )


class TestUsers:
    def test_add_user_normalizes_email(self, assignment_db):
        user = assignment_db.add_user(email="  Bob@Example.COM ", name=" Bob ")
        assert user.email == "bob@example.com"
        assert user.name == "Bob"
        assert user.id

    def test_get_user(self, assignment_db, student):
        fetched = assignment_db.get_user(student.id)
        assert fetched == student

    def test_get_user_not_found(self, assignment_db):
        assert assignment_db.get_user("missing") is None

    def test_duplicate_email_rejected(self, assignment_db, student):
        with pytest.raises(sqlite3.IntegrityError):
            assignment_db.add_user(email="ada@example.com", name="Other Ada")

    def test_delete_user_cascades(self, assignment_db, student):
        a = _add(assignment_db, student, timedelta(hours=3))
        assert assignment_db.delete_user(student.id) is True
        assert assignment_db.get_assignment(a.id) is None


class TestAddAndGetAssignment:
    def test_add_assignment_defaults(self, assignment_db, student):
        a = _add(assignment_db, student, timedelta(days=2))
        assert a.priority == "medium"
        assert a.is_completed is False
        assert a.reminder_24h_sent is False
        assert a.reminder_1h_sent is False

    def test_round_trip_deadline_is_utc(self, assignment_db, student):
        ist = timezone(timedelta(hours=5, minutes=30))
        deadline = datetime(2025, 3, 11, 9, 0, tzinfo=ist)
        a = assignment_db.add_assignment(student.id, "Quiz", "MATH 1", deadline)
        fetched = assignment_db.get_assignment(a.id)
        assert fetched.deadline == deadline
        assert fetched.deadline.tzinfo == timezone.utc

    def test_unknown_priority_rejected(self, assignment_db, student):
        with pytest.raises(ValueError):
            _add(assignment_db, student, timedelta(days=1), priority="urgent")

    def test_priority_case_insensitive(self, assignment_db, student):
        a = _add(assignment_db, student, timedelta(days=1), priority="HIGH")
        assert a.priority == "high"

    def test_get_assignment_not_found(self, assignment_db):
        assert assignment_db.get_assignment("nope") is None

    def test_plain_get_has_no_user_contact(self, assignment_db, student):
        a = _add(assignment_db, student, timedelta(days=1))
        fetched = assignment_db.get_assignment(a.id)
        assert fetched.user_email is None
        assert fetched.user_name is None


class TestListAssignments:
    def test_ordered_by_deadline(self, assignment_db, student, now):
        _add(assignment_db, student, timedelta(days=3), title="C")
        _add(assignment_db, student, timedelta(days=1), title="A")
        _add(assignment_db, student, timedelta(days=2), title="B")
        titles = [a.title for a in assignment_db.list_assignments(student.id, now=now)]
        assert titles == ["A", "B", "C"]

    def test_status_filters(self, assignment_db, student, now):
        pending = _add(assignment_db, student, timedelta(days=1), title="pending")
        overdue = _add(assignment_db, student, timedelta(days=-1), title="overdue")
        done = _add(assignment_db, student, timedelta(days=2), title="done")
        assignment_db.set_completed(done.id)

        def ids(status):
            return [a.id for a in assignment_db.list_assignments(student.id, status=status, now=now)]

        assert ids("pending") == [pending.id]
        assert ids("overdue") == [overdue.id]
        assert ids("completed") == [done.id]
        assert len(ids(None)) == 3

    def test_unknown_status_rejected(self, assignment_db, student):
        with pytest.raises(ValueError):
            assignment_db.list_assignments(student.id, status="someday")

    def test_scoped_to_user(self, assignment_db, student):
        other = assignment_db.add_user(email="grace@example.com", name="Grace")
        _add(assignment_db, student, timedelta(days=1))
        assert assignment_db.list_assignments(other.id) == []


class TestCompletion:
    def test_set_completed_stamps_time(self, assignment_db, student):
        a = _add(assignment_db, student, timedelta(days=1))
        updated = assignment_db.set_completed(a.id)
        assert updated.is_completed is True
        assert updated.completed_at is not None

    def test_reopen_clears_completed_at(self, assignment_db, student):
        a = _add(assignment_db, student, timedelta(days=1))
        assignment_db.set_completed(a.id)
        reopened = assignment_db.set_completed(a.id, completed=False)
        assert reopened.is_completed is False
        assert reopened.completed_at is None

    def test_toggle_complete(self, assignment_db, student):
        a = _add(assignment_db, student, timedelta(days=1))
        assert assignment_db.toggle_complete(a.id).is_completed is True
        assert assignment_db.toggle_complete(a.id).is_completed is False

    def test_completion_leaves_flags(self, assignment_db, student):
        a = _add(assignment_db, student, timedelta(hours=2))
        assignment_db.set_reminder_flag(a.id, REMINDER_24H)
        assignment_db.set_completed(a.id)
        reopened = assignment_db.set_completed(a.id, completed=False)
        assert reopened.reminder_24h_sent is True
        assert reopened.reminder_1h_sent is False

    def test_set_completed_missing_raises(self, assignment_db):
        with pytest.raises(ValueError):
            assignment_db.set_completed("missing")

    def test_toggle_missing_raises(self, assignment_db):
        with pytest.raises(ValueError):
            assignment_db.toggle_complete("missing")


class TestUpdateAndDelete:
    def test_update_deadline_keeps_flags(self, assignment_db, student, now):
        a = _add(assignment_db, student, timedelta(hours=2))
        assignment_db.set_reminder_flag(a.id, REMINDER_24H)
        moved = assignment_db.update_deadline(a.id, now + timedelta(days=5))
        assert moved.deadline == now + timedelta(days=5)
        assert moved.reminder_24h_sent is True

    def test_update_deadline_missing_raises(self, assignment_db, now):
        with pytest.raises(ValueError):
            assignment_db.update_deadline("missing", now)

    def test_delete_assignment(self, assignment_db, student):
        a = _add(assignment_db, student, timedelta(days=1))
        assert assignment_db.delete_assignment(a.id) is True
        assert assignment_db.get_assignment(a.id) is None

    def test_delete_missing_returns_false(self, assignment_db):
        assert assignment_db.delete_assignment("missing") is False


class TestFindReminderCandidates:
    def test_window_bounds(self, assignment_db, student, now):
        _add(assignment_db, student, timedelta(0), title="exactly now")
        _add(assignment_db, student, timedelta(minutes=-1), title="past")
        _add(assignment_db, student, timedelta(hours=1), title="edge 1h")
        _add(assignment_db, student, timedelta(hours=1, seconds=1), title="just over 1h")
        _add(assignment_db, student, timedelta(hours=24), title="edge 24h")
        _add(assignment_db, student, timedelta(hours=25), title="25h")

        titles_1h = [a.title for a in assignment_db.find_reminder_candidates(REMINDER_1H, now)]
        titles_24h = [a.title for a in assignment_db.find_reminder_candidates(REMINDER_24H, now)]

        assert titles_1h == ["edge 1h"]
        assert titles_24h == ["edge 1h", "just over 1h", "edge 24h"]

    def test_sub_second_deadlines_compare_correctly(self, assignment_db, student, now):
        _add(assignment_db, student, timedelta(microseconds=500), title="half ms")
        titles = [a.title for a in assignment_db.find_reminder_candidates(REMINDER_1H, now)]
        assert titles == ["half ms"]

    def test_excludes_completed(self, assignment_db, student, now):
        a = _add(assignment_db, student, timedelta(minutes=30))
        assignment_db.set_completed(a.id)
        assert assignment_db.find_reminder_candidates(REMINDER_1H, now) == []

    def test_excludes_flagged_for_that_threshold_only(self, assignment_db, student, now):
        a = _add(assignment_db, student, timedelta(minutes=30))
        assignment_db.set_reminder_flag(a.id, REMINDER_24H)
        assert assignment_db.find_reminder_candidates(REMINDER_24H, now) == []
        assert [c.id for c in assignment_db.find_reminder_candidates(REMINDER_1H, now)] == [a.id]

    def test_includes_owner_contact(self, assignment_db, student, now):
        _add(assignment_db, student, timedelta(minutes=30))
        [candidate] = assignment_db.find_reminder_candidates(REMINDER_1H, now)
        assert candidate.user_email == "ada@example.com"
        assert candidate.user_name == "Ada"

    def test_unknown_flag_rejected(self, assignment_db, now):
        bogus = Threshold(name="x", window_hours=2, flag_field="title")
        with pytest.raises(ValueError):
            assignment_db.find_reminder_candidates(bogus, now)


class TestSetReminderFlag:
    def test_sets_only_that_flag(self, assignment_db, student):
        a = _add(assignment_db, student, timedelta(minutes=30))
        assert assignment_db.set_reminder_flag(a.id, REMINDER_1H) is True
        fetched = assignment_db.get_assignment(a.id)
        assert fetched.reminder_1h_sent is True
        assert fetched.reminder_24h_sent is False

    def test_idempotent(self, assignment_db, student):
        a = _add(assignment_db, student, timedelta(minutes=30))
        assert assignment_db.set_reminder_flag(a.id, REMINDER_24H) is True
        assert assignment_db.set_reminder_flag(a.id, REMINDER_24H) is True
        assert assignment_db.get_assignment(a.id).reminder_24h_sent is True

    def test_missing_assignment_returns_false(self, assignment_db):
        assert assignment_db.set_reminder_flag("missing", REMINDER_1H) is False

    def test_persists_across_instances(self, tmp_db_path, assignment_db, student):
        a = _add(assignment_db, student, timedelta(minutes=30))
        assignment_db.set_reminder_flag(a.id, REMINDER_1H)
        reopened = AssignmentDB(db_path=tmp_db_path)
        assert reopened.get_assignment(a.id).reminder_1h_sent is True
