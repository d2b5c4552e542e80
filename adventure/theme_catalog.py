"""Theme catalog: static, read-only thematic data for adventures.

Two catalogs live here:
- Age themes (stone .. space) dress free-roam areas: enemies, the area boss,
  treasure pool, event flavours, colours. The player's level picks the age.
- World definitions (1 .. 8) drive world paths: difficulty modifier, task
  affinity used to filter tasks, and the fixed boss challenge every player
  faces in that world.

Lookups are fail-soft. An unknown age key resolves to the stone age and an
unknown world number to world 1, because missing cosmetic data must never
stop a player from progressing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple

from constants import AFFINITY_MIXED
from rng_utils import RandomSource, round_half_up

logger = logging.getLogger(__name__)

DEFAULT_AGE_KEY = 'stone'
DEFAULT_WORLD_NUMBER = 1


@dataclass(frozen=True)
class EnemyTemplate:
    name: str
    health: int
    attack: int
    xp: int
    description: str = ""

    def to_dict(self) -> dict:
        out = {"name": self.name, "health": self.health, "attack": self.attack, "xp": self.xp}
        if self.description:
            out["description"] = self.description
        return out


@dataclass(frozen=True)
class AgeTheme:
    key: str
    display_name: str
    colors: Tuple[str, str]
    difficulty_modifier: float
    enemies: Tuple[EnemyTemplate, ...]
    boss: EnemyTemplate
    treasure_pool: Tuple[str, ...]
    event_themes: Tuple[str, ...]
    task_affinity: str = AFFINITY_MIXED


@dataclass(frozen=True)
class ChallengeTemplate:
    """A named objective used by boss and mini-boss levels."""
    name: str
    description: str
    objective_type: str
    objective_data: Mapping[str, Any]

    def objective_dict(self) -> dict:
        return {
            "type": self.objective_type,
            "data": dict(self.objective_data),
            "description": self.description,
        }


@dataclass(frozen=True)
class WorldDefinition:
    number: int
    theme: str
    display_name: str
    description: str
    colors: Tuple[str, str]
    task_affinity: str
    difficulty_modifier: float
    boss: ChallengeTemplate

    def to_dict(self) -> dict:
        return {
            "world_number": self.number,
            "theme": self.theme,
            "name": self.display_name,
            "description": self.description,
            "color_primary": self.colors[0],
            "color_secondary": self.colors[1],
            "task_focus": self.task_affinity,
            "difficulty_modifier": self.difficulty_modifier,
            "boss": self.boss.objective_dict() | {"name": self.boss.name},
        }


def _enemies(*rows: Tuple[str, int, int, int]) -> Tuple[EnemyTemplate, ...]:
    return tuple(EnemyTemplate(name, hp, atk, xp) for name, hp, atk, xp in rows)


def _challenge(name: str, description: str, objective_type: str, **data: Any) -> ChallengeTemplate:
    return ChallengeTemplate(name, description, objective_type, MappingProxyType(dict(data)))


# =============================================================================
# Age themes (free-roam areas)
# =============================================================================

_AGE_THEMES: Dict[str, AgeTheme] = {
    'stone': AgeTheme(
        key='stone', display_name='Stone Age', colors=('#8b7355', '#a0826d'), difficulty_modifier=1.0,
        enemies=_enemies(('Wild Wolf', 30, 5, 15), ('Cave Bear', 50, 8, 25),
                         ('Sabertooth Cat', 40, 7, 20), ('Giant Boar', 45, 6, 22)),
        boss=EnemyTemplate('Mammoth Alpha', 120, 12, 100,
                           'A massive woolly mammoth that rules the frozen plains'),
        treasure_pool=('stone_spear', 'stone_axe', 'stone_fur_decorated', 'stone_shell_bracelet'),
        event_themes=('cave_paintings', 'hunting_grounds', 'ritual_site', 'ancient_burial'),
    ),
    'bronze': AgeTheme(
        key='bronze', display_name='Bronze Age', colors=('#cd7f32', '#daa520'), difficulty_modifier=1.1,
        enemies=_enemies(('Raider Scout', 50, 10, 30), ('Bronze Warrior', 60, 12, 35),
                         ('Desert Nomad', 55, 11, 32), ('Temple Guard', 65, 13, 38)),
        boss=EnemyTemplate('Bronze Chieftain', 180, 18, 150,
                           'A legendary warlord clad in gleaming bronze armor'),
        treasure_pool=('bronze_sword', 'bronze_armor', 'bronze_amulet', 'bronze_dagger'),
        event_themes=('ancient_forge', 'merchant_caravan', 'sacred_temple', 'tribal_gathering'),
    ),
    'iron': AgeTheme(
        key='iron', display_name='Iron Age', colors=('#71706e', '#a9a9a9'), difficulty_modifier=1.2,
        enemies=_enemies(('Iron Legionnaire', 70, 15, 45), ('Barbarian Raider', 80, 17, 50),
                         ('Shield Maiden', 75, 16, 48), ('Celtic Warrior', 78, 16, 49)),
        boss=EnemyTemplate('Iron Warlord', 250, 25, 200,
                           'A fearsome conqueror wielding an iron longsword'),
        treasure_pool=('iron_longsword', 'iron_armor', 'iron_helmet', 'iron_battle_axe'),
        event_themes=('iron_mine', 'war_camp', 'fortified_village', 'battlefield'),
    ),
    'medieval': AgeTheme(
        key='medieval', display_name='Medieval Age', colors=('#8b4513', '#cd853f'), difficulty_modifier=1.3,
        enemies=_enemies(('Knight Errant', 90, 20, 60), ('Crossbowman', 85, 19, 58),
                         ('Mounted Knight', 95, 22, 65), ('Tower Guard', 100, 21, 63)),
        boss=EnemyTemplate('Dragon Knight', 320, 32, 250,
                           'A legendary knight who has slain many dragons'),
        treasure_pool=('medieval_mace', 'medieval_plate_armor', 'medieval_crown', 'medieval_shield'),
        event_themes=('castle_siege', 'tournament_grounds', 'monastery', 'royal_court'),
    ),
    'renaissance': AgeTheme(
        key='renaissance', display_name='Renaissance', colors=('#daa520', '#ffd700'), difficulty_modifier=1.4,
        enemies=_enemies(('Musketeer', 110, 25, 75), ('Rapier Duelist', 105, 24, 72),
                         ('Mercenary Captain', 115, 26, 78), ('Naval Officer', 120, 27, 80)),
        boss=EnemyTemplate('Grand Master', 400, 40, 300,
                           'A master strategist and undefeated duelist'),
        treasure_pool=('renaissance_rapier', 'renaissance_doublet', 'renaissance_hat', 'renaissance_pistol'),
        event_themes=('art_gallery', 'opera_house', 'printing_press', 'navigation_guild'),
    ),
    'industrial': AgeTheme(
        key='industrial', display_name='Industrial Age', colors=('#696969', '#808080'), difficulty_modifier=1.5,
        enemies=_enemies(('Factory Guard', 130, 30, 90), ('Steam Automaton', 140, 32, 95),
                         ('Railway Bandit', 135, 31, 92), ('Coal Baron Enforcer', 145, 33, 98)),
        boss=EnemyTemplate('Iron Titan', 500, 50, 400,
                           'A massive steam-powered war machine'),
        treasure_pool=('industrial_wrench', 'industrial_goggles', 'industrial_coat', 'industrial_gear'),
        event_themes=('steam_factory', 'railway_station', 'mining_operation', 'inventors_lab'),
    ),
    'modern': AgeTheme(
        key='modern', display_name='Modern Age', colors=('#4169e1', '#6495ed'), difficulty_modifier=1.6,
        enemies=_enemies(('Corporate Security', 150, 35, 110), ('Spec Ops Soldier', 160, 38, 115),
                         ('Cyber Hacker', 155, 36, 112), ('Elite Agent', 165, 40, 120)),
        boss=EnemyTemplate('Megacorp CEO', 600, 60, 500,
                           'A ruthless corporate overlord with unlimited resources'),
        treasure_pool=('modern_suit', 'modern_briefcase', 'modern_sunglasses', 'modern_phone'),
        event_themes=('skyscraper', 'research_lab', 'stock_exchange', 'airport'),
    ),
    'digital': AgeTheme(
        key='digital', display_name='Digital Age', colors=('#00ced1', '#00ffff'), difficulty_modifier=1.8,
        enemies=_enemies(('AI Sentinel', 180, 45, 135), ('Virtual Warrior', 190, 48, 140),
                         ('Data Ghost', 185, 46, 137), ('Cybernetic Hunter', 195, 50, 145)),
        boss=EnemyTemplate('System Administrator', 750, 75, 600,
                           'A sentient AI that controls the entire network'),
        treasure_pool=('digital_visor', 'digital_gloves', 'digital_implant', 'digital_neural_link'),
        event_themes=('server_room', 'virtual_reality_hub', 'data_center', 'quantum_lab'),
    ),
    'space': AgeTheme(
        key='space', display_name='Space Age', colors=('#9370db', '#ba55d3'), difficulty_modifier=2.0,
        enemies=_enemies(('Alien Scout', 220, 55, 165), ('Space Pirate', 230, 58, 170),
                         ('Plasma Soldier', 240, 60, 175), ('Void Wanderer', 250, 62, 180)),
        boss=EnemyTemplate('Galactic Overlord', 1000, 100, 800,
                           'An ancient cosmic being from beyond the stars'),
        treasure_pool=('space_laser', 'space_suit', 'space_helmet', 'space_jetpack'),
        event_themes=('space_station', 'alien_ruins', 'asteroid_field', 'wormhole'),
    ),
}

# Upper bound (exclusive) of player level for each age, in order
_AGE_LEVEL_BOUNDS: Tuple[Tuple[int, str], ...] = (
    (10, 'stone'),
    (20, 'bronze'),
    (30, 'iron'),
    (40, 'medieval'),
    (50, 'renaissance'),
    (60, 'industrial'),
    (75, 'modern'),
    (100, 'digital'),
)
_FINAL_AGE = 'space'


# =============================================================================
# World definitions (world paths)
# =============================================================================

_WORLDS: Dict[int, WorldDefinition] = {
    1: WorldDefinition(
        1, 'personal', 'Grassland Village', 'A peaceful village where personal tasks await completion',
        ('#4CAF50', '#81C784'), 'personal', 1.0,
        _challenge('Village Elder Challenge', 'Complete 10 personal tasks in 5 days',
                   'quantity_time', count=10, category='personal', days=5),
    ),
    2: WorldDefinition(
        2, 'work', 'Desert Pyramid', 'Ancient pyramids hiding work challenges in the burning sands',
        ('#FF9800', '#FFB74D'), 'work', 1.2,
        _challenge("Pharaoh's Trial", 'Clear every high-priority task',
                   'priority_clear', priority='high'),
    ),
    3: WorldDefinition(
        3, 'fitness', 'Mountain Peak', 'Rocky mountains where fitness goals reach new heights',
        ('#795548', '#A1887F'), 'fitness', 1.3,
        _challenge('Peak Conqueror', 'Achieve a 10-day fitness streak',
                   'streak', days=10, category='fitness'),
    ),
    4: WorldDefinition(
        4, 'creative', 'Enchanted Forest', 'Magical woods where creativity blooms and ideas take flight',
        ('#9C27B0', '#BA68C8'), 'creative', 1.4,
        _challenge('Forest Guardian', 'Complete 15 creative tasks in 7 days',
                   'quantity_time', count=15, category='creative', days=7),
    ),
    5: WorldDefinition(
        5, 'discipline', 'Ice Castle', 'Frozen fortress testing discipline and routine mastery',
        ('#2196F3', '#64B5F6'), 'routine', 1.5,
        _challenge("Ice King's Challenge", 'Complete daily routines for 14 consecutive days',
                   'streak', days=14, category='routine'),
    ),
    6: WorldDefinition(
        6, 'social', 'Sky Kingdom', 'Floating islands where social connections bridge the clouds',
        ('#03DAC6', '#4DD0E1'), 'social', 1.6,
        _challenge("Sky Lord's Test", 'Complete 20 tasks across 3 categories in 7 days',
                   'master_challenge', count=20, days=7, min_categories=3),
    ),
    7: WorldDefinition(
        7, 'urgent', 'Volcano Depths', 'Fiery caverns where urgent tasks burn with importance',
        ('#F44336', '#EF5350'), 'urgent', 1.8,
        _challenge('Volcano Demon', 'Clear all overdue tasks',
                   'overdue_clear'),
    ),
    8: WorldDefinition(
        8, 'master', 'Shadow Realm', 'The ultimate challenge where task mastery is proven',
        ('#424242', '#616161'), AFFINITY_MIXED, 2.0,
        _challenge('Shadow Master', 'Complete 25 tasks across all categories in 7 days',
                   'master_challenge', count=25, days=7, min_categories=3),
    ),
}


# Mini-boss challenges; {count} is filled with the scaled count
_MINI_BOSS_TEMPLATES: Tuple[Tuple[str, str, str], ...] = (
    ('Guardian Sentinel', 'Complete {count} tasks today', 'daily_quantity'),
    ('Category Master', 'Finish tasks from {count} different categories', 'category_diversity'),
    ('Priority Crusher', 'Complete all high-priority tasks', 'priority_clear'),
)


# =============================================================================
# Lookups
# =============================================================================

def get_theme(age_key: str) -> AgeTheme:
    theme = _AGE_THEMES.get(age_key)
    if theme is None:
        logger.debug(f"Unknown age theme {age_key!r}; using {DEFAULT_AGE_KEY}")
        return _AGE_THEMES[DEFAULT_AGE_KEY]
    return theme


def all_age_keys() -> List[str]:
    return list(_AGE_THEMES.keys())


def age_key_for_level(level: int) -> str:
    """Map a player level onto an age; ranges are contiguous and ordered."""
    for upper, key in _AGE_LEVEL_BOUNDS:
        if level < upper:
            return key
    return _FINAL_AGE


def theme_colors(age_key: str) -> dict:
    theme = get_theme(age_key)
    return {'primary': theme.colors[0], 'secondary': theme.colors[1]}


def get_world(number: int) -> WorldDefinition:
    world = _WORLDS.get(number)
    if world is None:
        logger.debug(f"Unknown world {number!r}; using world {DEFAULT_WORLD_NUMBER}")
        return _WORLDS[DEFAULT_WORLD_NUMBER]
    return world


def all_worlds() -> List[WorldDefinition]:
    return [_WORLDS[n] for n in sorted(_WORLDS)]


def world_count() -> int:
    return len(_WORLDS)


def mini_boss_challenge(rng: RandomSource, difficulty_modifier: float, position: int) -> ChallengeTemplate:
    """Pick a mini-boss challenge scaled by world difficulty and position."""
    base = max(3, round_half_up(3 * difficulty_modifier))
    position_multiplier = (position / 10) + 0.5
    count = max(3, round_half_up(base * position_multiplier))
    name, desc, objective_type = rng.choice(_MINI_BOSS_TEMPLATES)
    if objective_type == 'daily_quantity':
        return _challenge(name, desc.format(count=count), objective_type, count=count)
    if objective_type == 'category_diversity':
        category_count = min(count, 4)
        return _challenge(name, desc.format(count=category_count), objective_type,
                          category_count=category_count)
    return _challenge(name, desc, objective_type, priority='high')


# =============================================================================
# Encounter content
# =============================================================================

def random_enemy(rng: RandomSource, age_key: str) -> dict:
    return rng.choice(get_theme(age_key).enemies).to_dict()


def get_boss(age_key: str) -> dict:
    return get_theme(age_key).boss.to_dict()


def random_treasure(rng: RandomSource, age_key: str) -> dict:
    theme = get_theme(age_key)
    return {
        'type': 'equipment',
        'item_key': rng.choice(theme.treasure_pool),
        'gold': rng.randint(50, 150),
    }


def random_event(rng: RandomSource, age_key: str) -> dict:
    place = rng.choice(get_theme(age_key).event_themes)
    kind = rng.choice(('gold_find', 'xp_bonus', 'health_restore', 'mystery_reward'))
    if kind == 'gold_find':
        return {'type': kind, 'description': f"You discover hidden treasure at the {place}!",
                'reward': {'gold': rng.randint(100, 300)}}
    if kind == 'xp_bonus':
        return {'type': kind, 'description': f"You gain valuable knowledge from the {place}.",
                'reward': {'xp': rng.randint(50, 150)}}
    if kind == 'health_restore':
        return {'type': kind, 'description': f"You rest and recover at the {place}.",
                'reward': {'health': rng.randint(20, 50)}}
    return {'type': kind, 'description': f"Something mysterious happens at the {place}...",
            'reward': {'gold': rng.randint(50, 100), 'xp': rng.randint(25, 75)}}
