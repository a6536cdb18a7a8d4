"""
Snapshot codec for the mutable part of a session.

Only the player and each room's `items`/`flags` are written. Names,
descriptions, exits and effects always come from the live World, so a
snapshot stays loadable while content keeps the same room/item keys.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict

from jsonschema import Draft202012Validator

from minimud.errors import NotFoundError, SnapshotParseError, StorageError
from minimud.world import Player

logger = logging.getLogger(__name__)

SNAPSHOT_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["player", "rooms"],
    "properties": {
        "player": {
            "type": "object",
            "required": ["name", "location", "inventory"],
            "properties": {
                "name": {"type": "string"},
                "location": {"type": "string"},
                "inventory": {"type": "array", "items": {"type": "string"}, "uniqueItems": True},
            },
        },
        "rooms": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["items", "flags"],
                "properties": {
                    "items": {"type": "array", "items": {"type": "string"}},
                    "flags": {"type": "object", "additionalProperties": {"type": "boolean"}},
                },
            },
        },
    },
}

_validator = Draft202012Validator(SNAPSHOT_SCHEMA)


def build_snapshot(world, player) -> Dict[str, Any]:
    return {
        "player": player.to_state(),
        "rooms": {key: room.to_state() for key, room in world.rooms.items()},
    }


def atomic_write_text(path: Path, text: str) -> None:
    """Write `text` to `path` so that either the old or the new content survives.

    The destination directory is not created; a missing directory is a
    storage failure like any other.
    """
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        logger.debug("Replacing %s with %s", path, tmp_name)
        os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)


def save(path, world, player) -> Dict[str, Any]:
    path = Path(path)
    snapshot = build_snapshot(world, player)
    payload = json.dumps(snapshot, indent=2, ensure_ascii=False)
    try:
        atomic_write_text(path, payload)
    except OSError as e:
        logger.error("Failed to write snapshot %s: %s", path, e)
        raise StorageError(f"No se pudo guardar en {path}: {e.strerror or e}") from e
    logger.debug("Snapshot written to %s (%d rooms)", path, len(snapshot["rooms"]))
    return snapshot


def _format_errors(path: Path, errors) -> str:
    lines = [f"Archivo de guardado inválido ({path}):"]
    for err in errors:
        where = "/".join(str(p) for p in err.absolute_path) or "$"
        lines.append(f" - {where}: {err.message}")
    return "\n".join(lines)


def read_snapshot(path) -> Dict[str, Any]:
    """Read, parse and validate a snapshot without touching any game state."""
    path = Path(path)
    if not path.exists():
        raise NotFoundError(f"No existe el archivo {path}")
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as e:
        raise StorageError(f"No se pudo leer {path}: {e.strerror or e}") from e

    try:
        data = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SnapshotParseError(
            f"Archivo de guardado inválido ({path}): no es UTF-8 (byte {e.start}: {e.reason})"
        ) from e

    try:
        snapshot = json.loads(data)
    except json.JSONDecodeError as e:
        raise SnapshotParseError(
            f"Archivo de guardado inválido ({path}): línea {e.lineno}, columna {e.colno}: {e.msg}"
        ) from e
    except RecursionError as e:
        raise SnapshotParseError(f"Archivo de guardado inválido ({path}): anidamiento demasiado profundo") from e

    errors = sorted(_validator.iter_errors(snapshot), key=lambda e: [str(p) for p in e.absolute_path])
    if errors:
        for err in errors:
            logger.info("Snapshot validation error at %s: %s", list(err.absolute_path), err.message)
        raise SnapshotParseError(_format_errors(path, errors))
    return snapshot


def apply_snapshot(snapshot: Dict[str, Any], world) -> Player:
    """
    Overwrite room state from a validated snapshot and return the restored player.
    Rooms unknown to the live world are ignored; live rooms missing from
    the snapshot keep their current state.
    """
    player_state = snapshot["player"]
    if player_state["location"] not in world.rooms:
        raise SnapshotParseError(f"La ubicación guardada no existe: {player_state['location']}")

    def known(keys, where):
        kept = [k for k in keys if k in world.items]
        if len(kept) != len(keys):
            logger.warning("Dropping unknown items from %s: %s", where, sorted(set(keys) - set(kept)))
        return kept

    player = Player.from_state(player_state)
    player.inventory = known(player.inventory, "inventory")

    restored = {}
    for key, state in snapshot["rooms"].items():
        if key not in world.rooms:
            logger.debug("Ignoring snapshot room absent from world: %s", key)
            continue
        restored[key] = {"items": known(state["items"], key), "flags": state["flags"]}

    # every item must end up in at most one container once the snapshot is applied
    owner = {key: "inventory" for key in player.inventory}
    for room in world.rooms.values():
        items = restored[room.key]["items"] if room.key in restored else room.items
        for item_key in items:
            if item_key in owner:
                raise SnapshotParseError(
                    f"Archivo de guardado inválido: el objeto {item_key} aparece en {owner[item_key]} y en {room.key}"
                )
            owner[item_key] = room.key

    for key, state in restored.items():
        world.rooms[key].load_state(state)
    return player


def load(path, world) -> Player:
    snapshot = read_snapshot(path)
    player = apply_snapshot(snapshot, world)
    logger.debug("Snapshot loaded from %s", path)
    return player
