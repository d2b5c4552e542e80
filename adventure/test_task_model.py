from datetime import date, datetime

import pytest

from task_model import Task, UserStats, coerce_tasks


def test_from_dict_normalizes_provider_fields():
    t = Task.from_dict({'id': 42, 'title': 'Gym', 'priority': 'HIGH',
                        'due_date': '2025-03-01', 'completed_date': '2025-03-02T08:15:00'})
    assert t.id == '42'
    assert t.category == 'uncategorized'
    assert t.priority == 'high'
    assert t.due_date == date(2025, 3, 1)
    assert t.completed_date == datetime(2025, 3, 2, 8, 15)


def test_malformed_dates_become_none():
    t = Task.from_dict({'id': 'a', 'due_date': 'next tuesday', 'completed_date': '??'})
    assert t.due_date is None
    assert t.completed_date is None


def test_is_overdue_only_before_today():
    t = Task(id='1', due_date=date(2025, 3, 9))
    assert t.is_overdue(date(2025, 3, 10))
    assert not t.is_overdue(date(2025, 3, 9))
    assert not Task(id='2').is_overdue(date(2025, 3, 10))


def test_coerce_tasks_skips_records_without_id():
    tasks = coerce_tasks([{'id': 1}, {'title': 'no id'}, Task(id='x'), 'junk', None])
    assert [t.id for t in tasks] == ['1', 'x']
    assert coerce_tasks(None) == []


def test_user_stats_tolerates_bad_values():
    stats = UserStats.from_dict({'current_streak': '7', 'tasks_completed_today': 'many'})
    assert stats.current_streak == 7
    assert stats.tasks_completed_today == 0
    assert UserStats.from_dict(None).tasks_completed_this_week == 0


@pytest.mark.parametrize("raw,expected", [
    ("0", False), ("1", True), ("false", False), ("True", True), ("", False),
    (0, False), (1, True), (True, True), (None, False),
])
def test_completed_flag_string_forms(raw, expected):
    assert Task.from_dict({'id': 1, 'completed': raw}).completed is expected
