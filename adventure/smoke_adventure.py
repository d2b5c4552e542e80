"""Quick manual run: generate an area and a world path and walk a few steps.

    python adventure/smoke_adventure.py
"""

import random
import tempfile

from area_service import complete_node, generate_area, move_to_node
from config import setup_logging
from persistence_utils import flush_all_saves
from service_context import ServiceContext
from world_path_service import complete_level, create_world_path

SAMPLE_TASKS = [
    {'id': 1, 'title': 'Gym session', 'category': 'health', 'priority': 'high'},
    {'id': 2, 'title': 'Write project report', 'category': 'work', 'priority': 'medium'},
    {'id': 3, 'title': 'Call grandma', 'category': 'family', 'priority': 'low'},
    {'id': 4, 'title': 'Personal budget review', 'category': 'personal', 'priority': 'medium'},
]

if __name__ == "__main__":
    setup_logging()
    state_file = tempfile.NamedTemporaryFile(suffix='.json', delete=False).name
    ctx = ServiceContext(state_path=state_file, rng=random.Random(7))

    ok, err, payload = generate_area(ctx, 'smoke', 'bronze')
    print('generate_area:', ok, err, len(payload['area']['nodes']), 'nodes')
    start = payload['current_node_id']
    ok, err, payload = complete_node(ctx, 'smoke', start)
    print('complete_node:', ok, err, 'unlocked', payload['unlocked'])
    if payload['unlocked']:
        print('move_to_node:', move_to_node(ctx, 'smoke', payload['unlocked'][0])[:2])

    ok, err, payload = create_world_path(ctx, 'smoke', 1, SAMPLE_TASKS)
    path = payload['path']
    print('world 1:', path['level_count'], 'positions, mini-boss at', path['mini_boss_position'])
    for level in path['levels']:
        print(f"  {level['slot_key']:>5} {level['type']:<9} {level['name']}")
    first = path['levels'][0]
    print('complete_level (nothing done yet):', complete_level(ctx, 'smoke', 1, first['id'], SAMPLE_TASKS)[:2])

    flush_all_saves()
    print('state written to', state_file)
