"""
Quest Adventure Constants

Central location for grid geometry, generation quotas, reward bases,
environment variable names, and shared rejection messages. Keeping them in one
place keeps the generators and services free of magic numbers.
"""

# =============================================================================
# Free-Roam Grid
# =============================================================================

# Areas are 7x7 grids; coordinates run 0..6 on both axes
GRID_SIZE = 7

# Target node count recorded on every Area (the full grid)
TOTAL_NODES = GRID_SIZE * GRID_SIZE

# Anchor coordinates (x, y): START middle-left, BOSS middle-right, SHOP top-center
START_POS = (0, 3)
BOSS_POS = (6, 3)
SHOP_POS = (3, 0)

# Storage encoding of a grid position
NODE_ID_PREFIX = 'node'

# Weighted walk: stepping toward the target on x is preferred over y, and any
# unvisited neighbour keeps a small chance so paths wander
WALK_WEIGHT_X = 3
WALK_WEIGHT_Y = 2
WALK_WEIGHT_ADJACENT = 1

# Steps after which the walk stops sampling and forces direct moves
DEFAULT_MAX_WALK_STEPS = 200

# Branch growth: how many extra nodes to try for, and the hard attempt cap
BRANCH_NODES_MIN = 8
BRANCH_NODES_MAX = 12
BRANCH_MAX_ATTEMPTS = 50

# Node type quotas applied in order to the shuffled non-anchor nodes.
# Sized for a full 49-node grid; leftovers keep the COMBAT default.
NODE_TYPE_QUOTAS = (
    ('COMBAT', 30),
    ('TREASURE', 8),
    ('EVENT', 8),
)

# =============================================================================
# World Paths
# =============================================================================

LEVEL_COUNT_MIN = 8
LEVEL_COUNT_MAX = 12

# Mini-boss never sits in the first three or the last two positions
MINI_BOSS_MIN_POSITION = 4
MINI_BOSS_END_MARGIN = 2

MIN_PARALLEL_LANES = 2
MAX_PARALLEL_LANES = 4

# Section boundaries (fraction of the way through the world)
EARLY_SECTION_END = 0.3
MID_SECTION_END = 0.6

# Layout used by renderers: horizontal step per position, vertical lane gap
LAYOUT_X_SPACING = 150
LAYOUT_Y_CENTER = 200
LAYOUT_Y_SPACING = 80

# Base reward per level type before the world difficulty modifier
LEVEL_REWARD_BASE = {
    'regular': 50,
    'mini_boss': 150,
    'boss': 500,
}

# Chance (percent, before the difficulty multiplier) that a regular level
# carries several objectives
COMPLEX_LEVEL_BASE_CHANCE = 30

# =============================================================================
# Objectives
# =============================================================================

# Regeneration scales this base by the difficulty modifier
REGEN_BASE_COUNT = 3
REGEN_DAILY_MAX = 10
REGEN_CATEGORY_MIN = 2
REGEN_CATEGORY_MAX = 4

# Defaults used when a task record omits a field
DEFAULT_TASK_CATEGORY = 'uncategorized'
DEFAULT_TASK_PRIORITY = 'medium'

# Affinity tag that matches every task
AFFINITY_MIXED = 'mixed'

# =============================================================================
# Environment Variable Keys
# =============================================================================

ENV_STATE_PATH = 'QUEST_STATE_PATH'
ENV_SAVE_DEBOUNCE_MS = 'QUEST_SAVE_DEBOUNCE_MS'
ENV_MAX_WALK_STEPS = 'QUEST_MAX_WALK_STEPS'
ENV_RNG_SEED = 'QUEST_RNG_SEED'
ENV_LOG_LEVEL = 'QUEST_LOG_LEVEL'
ENV_LOG_FORMAT = 'QUEST_LOG_FORMAT'

DEFAULT_STATE_FILE = 'adventure_state.json'
DEFAULT_SAVE_DEBOUNCE_MS = 300
DEFAULT_LOG_FORMAT = '[%(levelname)s] %(message)s'

# =============================================================================
# Rejection Messages
# =============================================================================

ERROR_NO_ACTIVE_AREA = 'No active adventure area found.'
ERROR_NODE_NOT_FOUND = 'Target node not found.'
ERROR_NODE_LOCKED = 'Target node is locked.'
ERROR_NODE_NOT_CONNECTED = 'Nodes are not connected.'
ERROR_NODE_COMPLETED = 'Node is already completed.'
ERROR_WORLD_LOCKED = 'World is locked. Defeat the previous world boss first.'
ERROR_WORLD_NOT_FOUND = 'No path generated for this world.'
ERROR_WORLD_UNKNOWN = 'Unknown world.'
ERROR_INVALID_PATH_SHAPE = 'Invalid level count or mini-boss position.'
ERROR_LEVEL_NOT_FOUND = 'Level not found.'
ERROR_LEVEL_LOCKED = 'Level is locked.'
ERROR_LEVEL_COMPLETED = 'Level is already completed.'
ERROR_OBJECTIVES_INCOMPLETE = 'Level objectives are not yet met.'
