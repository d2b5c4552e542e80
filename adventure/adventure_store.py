"""In-memory persistence store for adventure state.

Holds every owner's areas, progress, world paths, and world progress, and
round-trips them through a single JSON file. Records are keyed by plain
strings so the JSON form mirrors the in-memory maps:
- areas: area id -> Area
- progress: owner id -> Progress
- world_paths: "<owner>:<world>" -> WorldPath
- world_progress: owner id -> WorldProgress

Writes go through persistence_utils.save_store(); nothing else should call
save_to_file() directly.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Dict, List, Optional

from grid_model import Area, Progress
from world_path_model import WorldPath, WorldProgress

logger = logging.getLogger(__name__)

STORE_VERSION = 1


def world_path_key(owner_id: str, world_number: int) -> str:
    return f"{owner_id}:{world_number}"


class AdventureStore:
    def __init__(self) -> None:
        self.store_version: int = STORE_VERSION
        self.areas: Dict[str, Area] = {}
        self.progress: Dict[str, Progress] = {}
        self.world_paths: Dict[str, WorldPath] = {}
        self.world_progress: Dict[str, WorldProgress] = {}

    # --- Areas ---
    def areas_for(self, owner_id: str) -> List[Area]:
        return sorted((a for a in self.areas.values() if a.owner_id == owner_id),
                      key=lambda a: a.area_number)

    def next_area_number(self, owner_id: str) -> int:
        numbers = [a.area_number for a in self.areas.values() if a.owner_id == owner_id]
        return max(numbers, default=0) + 1

    def current_area(self, owner_id: str) -> Optional[Area]:
        prog = self.progress.get(owner_id)
        if prog is None or not prog.current_area_id:
            return None
        return self.areas.get(prog.current_area_id)

    def write_area(self, area: Area, progress: Progress) -> None:
        """Insert a freshly generated area and its owner's progress together."""
        self.areas[area.id] = area
        self.progress[progress.owner_id] = progress

    # --- World paths ---
    def get_world_path(self, owner_id: str, world_number: int) -> Optional[WorldPath]:
        return self.world_paths.get(world_path_key(owner_id, world_number))

    def write_world_path(self, path: WorldPath) -> None:
        self.world_paths[world_path_key(path.owner_id, path.world_number)] = path

    def world_progress_for(self, owner_id: str) -> WorldProgress:
        wp = self.world_progress.get(owner_id)
        if wp is None:
            wp = WorldProgress(owner_id=owner_id)
            self.world_progress[owner_id] = wp
        return wp

    # --- Serialization ---
    def to_dict(self) -> dict:
        return {
            "store_version": self.store_version,
            "areas": {aid: area.to_dict() for aid, area in self.areas.items()},
            "progress": {oid: p.to_dict() for oid, p in self.progress.items()},
            "world_paths": {key: wp.to_dict() for key, wp in self.world_paths.items()},
            "world_progress": {oid: wp.to_dict() for oid, wp in self.world_progress.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AdventureStore":
        store = cls()
        store.store_version = int(data.get("store_version", STORE_VERSION))

        areas = data.get("areas", {})
        if isinstance(areas, dict):
            for adata in areas.values():
                if isinstance(adata, dict):
                    area = Area.from_dict(adata)
                    store.areas[area.id] = area

        progress = data.get("progress", {})
        if isinstance(progress, dict):
            for pdata in progress.values():
                if isinstance(pdata, dict):
                    prog = Progress.from_dict(pdata)
                    store.progress[prog.owner_id] = prog

        paths = data.get("world_paths", {})
        if isinstance(paths, dict):
            for wdata in paths.values():
                if isinstance(wdata, dict):
                    try:
                        store.write_world_path(WorldPath.from_dict(wdata))
                    except (TypeError, ValueError) as e:
                        logger.warning(f"Skipped malformed world path record: {e}")

        wprog = data.get("world_progress", {})
        if isinstance(wprog, dict):
            for wdata in wprog.values():
                if isinstance(wdata, dict):
                    wp = WorldProgress.from_dict(wdata)
                    store.world_progress[wp.owner_id] = wp
        return store

    def save_to_file(self, path: str) -> None:
        folder = os.path.dirname(path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)

    @classmethod
    def load_from_file(cls, path: str) -> "AdventureStore":
        """Load the store from ``path``; a missing or unreadable file yields an empty store."""
        try:
            if os.path.exists(path):
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                return cls.from_dict(data)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load adventure state from {path}: {e}")
        return cls()
