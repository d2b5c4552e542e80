from constants import (
    ERROR_INVALID_PATH_SHAPE,
    ERROR_LEVEL_COMPLETED,
    ERROR_LEVEL_LOCKED,
    ERROR_LEVEL_NOT_FOUND,
    ERROR_OBJECTIVES_INCOMPLETE,
    ERROR_WORLD_LOCKED,
    ERROR_WORLD_NOT_FOUND,
    ERROR_WORLD_UNKNOWN,
)
from objective_model import CompleteTaskObjective
from world_path_model import LevelStatus, LevelType
from world_path_service import (
    complete_level,
    create_world_path,
    get_world_path,
    is_world_unlocked,
    refresh_level_objectives,
)


def _path(ctx, owner='alice', world=1):
    return ctx.store.get_world_path(owner, world)


def _all_done(tasks, when='2025-03-10T12:00:00'):
    return [dict(t, completed=True, completed_date=t.get('completed_date') or when) for t in tasks]


def _personal_sprint(n=10):
    return [{'id': 100 + i, 'title': f'Chore {i}', 'category': 'personal', 'completed': True,
             'completed_date': '2025-03-09T08:00:00'} for i in range(n)]


def test_world_one_is_open_and_world_two_is_locked(ctx, sample_tasks):
    ok, err, payload = create_world_path(ctx, 'alice', 1, sample_tasks, level_count=8, mini_boss_position=5)
    assert ok, err
    assert payload['world']['world_number'] == 1
    assert payload['path']['level_count'] == 8
    assert create_world_path(ctx, 'alice', 2, sample_tasks) == (False, ERROR_WORLD_LOCKED, {})
    assert ctx.store.get_world_path('alice', 2) is None


def test_unknown_world_is_rejected(ctx, sample_tasks):
    assert create_world_path(ctx, 'alice', 0, sample_tasks)[1] == ERROR_WORLD_UNKNOWN
    assert create_world_path(ctx, 'alice', 9, sample_tasks)[1] == ERROR_WORLD_UNKNOWN


def test_bad_path_shape_is_rejected(ctx, sample_tasks):
    for level_count, mini in [(5, None), (13, None), (10, 9), (10, 3), (None, 11)]:
        result = create_world_path(ctx, 'alice', 1, sample_tasks, level_count=level_count,
                                   mini_boss_position=mini)
        assert result == (False, ERROR_INVALID_PATH_SHAPE, {})
    assert ctx.store.get_world_path('alice', 1) is None


def test_mini_boss_without_level_count_gets_room_after_it(ctx, sample_tasks):
    ok, err, payload = create_world_path(ctx, 'alice', 1, sample_tasks, mini_boss_position=9)
    assert ok, err
    assert payload['path']['level_count'] >= 11
    assert payload['path']['mini_boss_position'] == 9


def test_existing_path_is_returned_unless_regenerated(ctx, sample_tasks):
    _, _, first = create_world_path(ctx, 'alice', 1, sample_tasks)
    _, _, again = create_world_path(ctx, 'alice', 1, sample_tasks)
    assert again['path']['id'] == first['path']['id']
    _, _, fresh = create_world_path(ctx, 'alice', 1, sample_tasks, regenerate=True)
    assert fresh['path']['id'] != first['path']['id']
    assert get_world_path(ctx, 'alice', 1)[2]['path']['id'] == fresh['path']['id']


def test_get_world_path_without_path(ctx):
    assert get_world_path(ctx, 'alice', 1) == (False, ERROR_WORLD_NOT_FOUND, {})


def test_complete_level_rejections(ctx, sample_tasks):
    assert complete_level(ctx, 'alice', 1, 1, sample_tasks)[1] == ERROR_WORLD_NOT_FOUND
    create_world_path(ctx, 'alice', 1, sample_tasks, level_count=8, mini_boss_position=5)
    path = _path(ctx)
    assert complete_level(ctx, 'alice', 1, 999, sample_tasks)[1] == ERROR_LEVEL_NOT_FOUND

    boss = path.levels['8']
    assert complete_level(ctx, 'alice', 1, boss.id, _all_done(sample_tasks))[1] == ERROR_LEVEL_LOCKED

    first = path.levels['1']
    assert complete_level(ctx, 'alice', 1, first.id, sample_tasks)[1] == ERROR_OBJECTIVES_INCOMPLETE
    assert first.status == LevelStatus.UNLOCKED


def test_complete_level_unlocks_the_next_position(ctx, sample_tasks):
    create_world_path(ctx, 'alice', 1, sample_tasks, level_count=8, mini_boss_position=5)
    path = _path(ctx)
    first = path.levels['1']

    ok, err, payload = complete_level(ctx, 'alice', 1, first.id, _all_done(sample_tasks))
    assert ok, err
    assert payload['reward'] == first.reward
    assert not payload['world_completed']
    assert first.status == LevelStatus.COMPLETED
    second = path.levels_at(2)
    assert sorted(payload['unlocked']) == sorted(lv.slot_key for lv in second)
    assert all(lv.status == LevelStatus.UNLOCKED for lv in second)
    assert all(lv.status == LevelStatus.LOCKED for lv in path.levels_at(3))

    assert complete_level(ctx, 'alice', 1, first.id, _all_done(sample_tasks))[1] == ERROR_LEVEL_COMPLETED


def test_boss_completes_world_and_opens_the_next(ctx, sample_tasks):
    create_world_path(ctx, 'alice', 1, sample_tasks, level_count=8, mini_boss_position=5)
    boss = _path(ctx).levels['8']
    assert boss.type == LevelType.BOSS
    boss.status = LevelStatus.UNLOCKED

    # Village Elder Challenge: 10 personal tasks in the last 5 days
    ok, err, payload = complete_level(ctx, 'alice', 1, boss.id, _personal_sprint())
    assert ok, err
    assert payload['world_completed']
    progress = ctx.store.world_progress['alice']
    assert progress.completed_worlds == [1]
    assert progress.current_world == 2
    assert is_world_unlocked(ctx.store, 'alice', 2)
    assert not is_world_unlocked(ctx.store, 'bob', 2)

    ok, err, _ = create_world_path(ctx, 'alice', 2, sample_tasks)
    assert ok, err


def test_boss_needs_its_challenge_met(ctx, sample_tasks):
    create_world_path(ctx, 'alice', 1, sample_tasks, level_count=8, mini_boss_position=5)
    boss = _path(ctx).levels['8']
    boss.status = LevelStatus.UNLOCKED
    assert complete_level(ctx, 'alice', 1, boss.id, _personal_sprint(9))[1] == ERROR_OBJECTIVES_INCOMPLETE
    assert not _path(ctx).completed


def test_refresh_replaces_objectives_for_deleted_tasks(ctx, sample_tasks):
    create_world_path(ctx, 'alice', 1, sample_tasks, level_count=8, mini_boss_position=5)
    path = _path(ctx)
    regular = [lv for lv in path.levels.values() if lv.type == LevelType.REGULAR]
    regular[0].objectives = [CompleteTaskObjective(task_id='2', task_title='Write project report')]
    boss_before = path.levels['8'].objectives
    remaining = [t for t in sample_tasks if t['id'] != 2]

    ok, err, payload = refresh_level_objectives(ctx, 'alice', 1, remaining)
    assert ok, err
    assert payload['replaced'] >= 1
    new = regular[0].objectives[0]
    assert isinstance(new, CompleteTaskObjective)
    assert new.task_id in {'1', '3'}
    assert path.levels['8'].objectives == boss_before


def test_refresh_keeps_objectives_already_met(ctx, sample_tasks):
    create_world_path(ctx, 'alice', 1, sample_tasks, level_count=8, mini_boss_position=5)
    first = _path(ctx).levels['1']
    met = CompleteTaskObjective(task_id='2', task_title='Write project report')
    first.objectives = [met]
    done = [dict(t, completed=True, completed_date='2025-03-10T11:00:00') if t['id'] == 2 else t
            for t in sample_tasks]

    ok, err, payload = refresh_level_objectives(ctx, 'alice', 1, done)
    assert ok, err
    assert first.objectives == [met]
    ok, err, _ = complete_level(ctx, 'alice', 1, first.id, done)
    assert ok, err


def test_refresh_leaves_valid_objectives_alone(ctx, sample_tasks):
    create_world_path(ctx, 'alice', 1, sample_tasks, level_count=8, mini_boss_position=5)
    ok, _, payload = refresh_level_objectives(ctx, 'alice', 1, sample_tasks)
    assert ok and payload['replaced'] == 0
    assert refresh_level_objectives(ctx, 'bob', 1, sample_tasks)[1] == ERROR_WORLD_NOT_FOUND


def test_world_paths_are_saved(ctx, sample_tasks):
    from adventure_store import AdventureStore

    create_world_path(ctx, 'alice', 1, sample_tasks)
    loaded = AdventureStore.load_from_file(ctx.state_path)
    assert loaded.get_world_path('alice', 1).to_dict() == _path(ctx).to_dict()
