import os
import logging

import yaml

from minimud.errors import ConfigurationError, NotFoundError
from minimud.world import World

logger = logging.getLogger(__name__)

WORLD_FILES = ("manifest.yaml", "rooms.yaml", "items.yaml")


def _read_yaml(path):
    if not os.path.exists(path):
        raise NotFoundError(f"No existe el archivo {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error de sintaxis YAML en {path}: {e}") from e


def load_world(world_path):
    """
    Loads and merges the YAML files of a world directory.
    Returns (World, manifest).
    """
    manifest, rooms, items = (_read_yaml(os.path.join(world_path, name)) for name in WORLD_FILES)

    for name, data in zip(WORLD_FILES, (manifest, rooms, items)):
        if not isinstance(data, dict):
            raise ConfigurationError(f"{name} debe ser un mapa, no {type(data).__name__}")

    world = World.from_data({'rooms': rooms, 'items': items})

    start_room = manifest.get('start_room', next(iter(world.rooms), None))
    if start_room not in world.rooms:
        raise ConfigurationError(f"La sala inicial no existe: {start_room}")
    manifest['start_room'] = start_room

    logger.debug("Loaded world %r from %s", manifest.get('title', 'Untitled'), world_path)
    return world, manifest
