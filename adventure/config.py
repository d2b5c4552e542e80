"""Environment-driven configuration and logging setup.

Variables (a local .env file is honoured via python-dotenv):
- QUEST_STATE_PATH: JSON file the store is saved to (default adventure_state.json)
- QUEST_SAVE_DEBOUNCE_MS: debounce window for saves (default 300; read by persistence_utils)
- QUEST_MAX_WALK_STEPS: step cap for the area walk (default 200)
- QUEST_RNG_SEED: optional integer seed for reproducible generation
- QUEST_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR|CRITICAL (default INFO)
- QUEST_LOG_FORMAT: 'json' or 'text' (default text)
- DEBUG_RAISE_EXCEPTIONS: see safe_utils
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from adventure_store import AdventureStore
from constants import (
    DEFAULT_LOG_FORMAT,
    DEFAULT_MAX_WALK_STEPS,
    DEFAULT_STATE_FILE,
    ENV_LOG_FORMAT,
    ENV_LOG_LEVEL,
    ENV_MAX_WALK_STEPS,
    ENV_RNG_SEED,
    ENV_STATE_PATH,
)
from rng_utils import make_rng
from safe_utils import safe_call
from service_context import ServiceContext

logger = logging.getLogger(__name__)


def env_str(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == '' else v.strip()


def env_int(name: str, default: int) -> int:
    try:
        return int(env_str(name, str(default)))
    except ValueError:
        logger.warning(f"{name} is not an integer; using {default}")
        return default


def env_optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return None
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer; ignoring")
        return None


@dataclass(frozen=True)
class AdventureConfig:
    state_path: str = DEFAULT_STATE_FILE
    max_walk_steps: int = DEFAULT_MAX_WALK_STEPS
    rng_seed: Optional[int] = None
    log_level: str = 'INFO'
    log_format: str = 'text'


def load_config(load_env_file: bool = True) -> AdventureConfig:
    if load_env_file:
        load_dotenv()
    return AdventureConfig(
        state_path=env_str(ENV_STATE_PATH, DEFAULT_STATE_FILE),
        max_walk_steps=max(1, env_int(ENV_MAX_WALK_STEPS, DEFAULT_MAX_WALK_STEPS)),
        rng_seed=env_optional_int(ENV_RNG_SEED),
        log_level=env_str(ENV_LOG_LEVEL, 'INFO').upper(),
        log_format=env_str(ENV_LOG_FORMAT, 'text').lower(),
    )


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            'ts': self.formatTime(record, datefmt='%Y-%m-%dT%H:%M:%S'),
            'level': record.levelname,
            'name': record.name,
            'message': record.getMessage(),
        }
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(config: Optional[AdventureConfig] = None) -> None:
    """Configure the root logger from QUEST_LOG_LEVEL / QUEST_LOG_FORMAT."""
    cfg = config or load_config()

    def _configure() -> None:
        level = getattr(logging, cfg.log_level, logging.INFO)
        handler = logging.StreamHandler()
        if cfg.log_format == 'json':
            handler.setFormatter(JsonFormatter())
        else:
            handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
        root = logging.getLogger()
        root.handlers = [handler]
        root.setLevel(level)

    safe_call(_configure)


def build_context(config: Optional[AdventureConfig] = None) -> ServiceContext:
    """Production context: store loaded from disk, RNG seeded from the environment."""
    cfg = config or load_config()
    store = AdventureStore.load_from_file(cfg.state_path)
    if cfg.rng_seed is not None:
        logger.info(f"Using fixed RNG seed {cfg.rng_seed}")
    return ServiceContext(
        store=store,
        state_path=cfg.state_path,
        rng=make_rng(cfg.rng_seed),
        max_walk_steps=cfg.max_walk_steps,
    )
