from objective_model import (
    CompleteTaskObjective,
    DailyQuantityObjective,
    MasterChallengeObjective,
    Objective,
    OverdueClearObjective,
    QuantityTimeObjective,
    UnknownObjective,
    as_objective,
    generic_objective,
)


def test_from_dict_dispatches_on_type():
    obj = Objective.from_dict({'type': 'daily_quantity', 'data': {'count': 4}})
    assert isinstance(obj, DailyQuantityObjective)
    assert obj.count == 4
    assert obj.text == 'Complete 4 tasks today'


def test_complete_task_accepts_top_level_fields():
    obj = Objective.from_dict({'type': 'complete_task', 'task_id': 42, 'task_title': 'Gym',
                               'description': 'Complete: Gym'})
    assert isinstance(obj, CompleteTaskObjective)
    assert obj.task_id == '42'
    assert obj.to_dict() == {'type': 'complete_task',
                             'data': {'task_id': '42', 'task_title': 'Gym'},
                             'description': 'Complete: Gym'}


def test_missing_parameters_use_defaults():
    qt = Objective.from_dict({'type': 'quantity_time', 'data': {'count': 'x'}})
    assert isinstance(qt, QuantityTimeObjective)
    assert (qt.count, qt.days, qt.category) == (10, 5, None)
    master = Objective.from_dict({'type': 'master_challenge', 'data': {'count': 20, 'days': 7}})
    assert isinstance(master, MasterChallengeObjective)
    assert master.min_categories == 3
    assert isinstance(Objective.from_dict({'type': 'overdue_clear'}), OverdueClearObjective)


def test_unknown_type_keeps_raw_record():
    raw = {'type': 'routine_streak', 'data': {'days': 14}, 'description': 'Old boss'}
    obj = Objective.from_dict(raw)
    assert isinstance(obj, UnknownObjective)
    assert obj.to_dict() == raw
    assert isinstance(Objective.from_dict('garbage'), UnknownObjective)


def test_generic_objective_and_as_objective():
    g = generic_objective()
    assert isinstance(g, DailyQuantityObjective) and g.count == 1
    assert as_objective(g) is g
    assert as_objective(g.to_dict()) == g
