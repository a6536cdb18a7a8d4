import logging

from minimud.errors import ConfigurationError

logger = logging.getLogger(__name__)

LIGHTS = 'lights'
UNLOCKS = 'unlocks'
DARK = 'dark'


def lock_flag(direction):
    return f"locked_{direction.lower()}"


def normalize_flag(flag):
    """Directions are case-insensitive: `locked_North` is stored as `locked_north`."""
    if flag.lower().startswith("locked_"):
        return lock_flag(flag[len("locked_"):])
    return flag


def normalize_unlocks(value):
    """Lowercase the direction of a well-formed `room:direction`; leave malformed values as authored."""
    parts = value.split(':')
    if len(parts) != 2: return value
    return f"{parts[0]}:{parts[1].lower()}"


# ==========================================
# CORE OBJECT MODEL
# ==========================================

class Item:
    def __init__(self, key, data):
        self.key = key
        self.name = data.get('name', key)
        self.description = data.get('description', "")
        self.portable = bool(data.get('portable', True))
        self.effects = {str(k): str(v) for k, v in (data.get('effects') or {}).items()}
        if UNLOCKS in self.effects:
            self.effects[UNLOCKS] = normalize_unlocks(self.effects[UNLOCKS])

    def match_name(self, token):
        token = token.lower()
        return self.key.lower() == token or self.name.lower() == token

    def has_effect(self, effect):
        return effect in self.effects

    def __repr__(self):
        return f"Item({self.key!r})"


class Room:
    def __init__(self, key, data):
        self.key = key
        self.name = data.get('name', key)
        self.description = data.get('description', "")
        self.exits = {str(d).lower(): str(t) for d, t in (data.get('exits') or {}).items()}
        self.items = list(data.get('items') or [])
        self.flags = {normalize_flag(str(k)): bool(v) for k, v in (data.get('flags') or {}).items()}

    def has_flag(self, flag):
        return self.flags.get(flag, False)

    def set_flag(self, flag, value):
        self.flags[flag] = value

    def is_locked(self, direction):
        return self.has_flag(lock_flag(direction))

    def to_state(self):
        return {
            'items': self.items[:],
            'flags': self.flags.copy()
        }

    def load_state(self, state):
        self.items = state.get('items', [])[:]
        self.flags = {normalize_flag(k): v for k, v in state.get('flags', {}).items()}

    def __repr__(self):
        return f"Room({self.key!r})"


class Player:
    def __init__(self, name, location, inventory=None):
        self.name = name
        self.location = location
        self.inventory = list(inventory or [])

    def carries(self, item_key):
        return item_key in self.inventory

    def to_state(self):
        return {
            'name': self.name,
            'location': self.location,
            'inventory': self.inventory[:]
        }

    @classmethod
    def from_state(cls, state):
        return cls(state['name'], state['location'], state['inventory'])

    def __eq__(self, other):
        if not isinstance(other, Player): return NotImplemented
        return self.to_state() == other.to_state()

    def __repr__(self):
        return f"Player({self.name!r}, location={self.location!r}, inventory={self.inventory!r})"


class World:
    """
    Owns every room and item, keyed by their stable string keys.
    Cross references (exits, room contents, inventory, unlock targets)
    are always keys, never object references.
    """
    def __init__(self, rooms=None, items=None):
        self.rooms = {}
        self.items = {}
        for item in items or []:
            self.items[item.key] = item
        for room in rooms or []:
            self.rooms[room.key] = room

    @classmethod
    def from_data(cls, data):
        """
        Build a world from plain mappings:
        {'rooms': {key: {...}}, 'items': {key: {...}}}
        """
        items = [Item(key, attrs or {}) for key, attrs in (data.get('items') or {}).items()]
        rooms = [Room(key, attrs or {}) for key, attrs in (data.get('rooms') or {}).items()]
        world = cls(rooms, items)
        world.validate()
        return world

    def validate(self, inventory=()):
        owner = {key: 'inventory' for key in inventory}
        for room in self.rooms.values():
            for direction, target in room.exits.items():
                if target not in self.rooms:
                    raise ConfigurationError(f"La salida {direction} de {room.key} lleva a una sala desconocida: {target}")
            for item_key in room.items:
                if item_key not in self.items:
                    raise ConfigurationError(f"La sala {room.key} contiene un objeto desconocido: {item_key}")
                if item_key in owner:
                    raise ConfigurationError(f"El objeto {item_key} aparece en {owner[item_key]} y en {room.key}")
                owner[item_key] = room.key
        for item_key in inventory:
            if item_key not in self.items:
                raise ConfigurationError(f"El inventario contiene un objeto desconocido: {item_key}")
        unplaced = [key for key in self.items if key not in owner]
        if unplaced:
            raise ConfigurationError(f"Objetos sin ubicación: {', '.join(unplaced)}")
        logger.debug("World validated: %d rooms, %d items", len(self.rooms), len(self.items))

    def get_room(self, key):
        return self.rooms[key]

    def get_item(self, key):
        return self.items[key]

    def find_item(self, token, keys):
        """First item among `keys` whose key or display name matches `token`."""
        for key in keys:
            item = self.items.get(key)
            if item and item.match_name(token):
                return item
        return None

    def names(self, keys):
        return [self.items[k].name for k in keys if k in self.items]

    def container_of(self, item_key, player=None):
        """Every container currently holding `item_key`; exactly one when the world is consistent."""
        holders = [room.key for room in self.rooms.values() if item_key in room.items]
        if player and player.carries(item_key):
            holders.append('inventory')
        return holders
