import logging

from minimud import persistence
from minimud.errors import ConfigurationError, GameError
from minimud.rulebook import Action, Rulebook
from minimud.world import DARK, LIGHTS, UNLOCKS, Player

logger = logging.getLogger(__name__)

DEFAULT_PLAYER_NAME = "Hero"
DEFAULT_SAVE_FILE = "save.json"

VERBS = {
    'look': 'look', 'l': 'look',
    'go': 'go', 'g': 'go',
    'take': 'take', 'get': 'take',
    'drop': 'drop',
    'use': 'use',
    'inventory': 'inventory', 'inv': 'inventory',
    'save': 'save',
    'load': 'load',
    'help': 'help',
    'quit': 'quit', 'exit': 'quit',
}

HELP_TEXT = """Comandos:
  look                 - mirar la sala
  go <dir>             - moverte (north, south, east, west, up, down)
  take <objeto>        - tomar objeto
  drop <objeto>        - soltar objeto
  use <objeto>         - usar objeto (linterna, llave, etc.)
  inv                  - inventario
  save / load          - guardar / cargar partida
  help                 - ayuda
  quit                 - salir"""

NOT_UNDERSTOOD = "No entiendo ese comando. Escribe 'help'."


def tokenize(text):
    """Split a command line into (verb, first argument or None)."""
    tokens = text.strip().split()
    if not tokens: return None, None
    return tokens[0].lower(), (tokens[1] if len(tokens) > 1 else None)


def is_known_verb(verb):
    return bool(verb) and verb.lower() in VERBS


# ==========================================
# GAME IO
# ==========================================
class GameIO:
    """Collects the text produced by one command."""
    def __init__(self):
        self.history = []
        self.last_input = None
        self.current_turn_output = []

    def write(self, message):
        self.current_turn_output.append(str(message))

    def log_input(self, text):
        if self.last_input is not None:
            self.history = ["User: " + self.last_input, "System: " + " ".join(self.current_turn_output)]

        self.last_input = text
        self.current_turn_output = []

    def output(self):
        return "\n".join(self.current_turn_output)

    def get_history_str(self):
        return "\n".join(self.history)


# ==========================================
# ENGINE
# ==========================================
class Game:
    def __init__(self, world, start_room=None, player_name=DEFAULT_PLAYER_NAME, save_path=DEFAULT_SAVE_FILE):
        self.world = world
        if start_room is None:
            start_room = next(iter(world.rooms), None)
        if start_room not in world.rooms:
            raise ConfigurationError(f"La sala inicial no existe: {start_room}")
        self.player = Player(player_name, start_room)
        self.save_path = save_path
        self.running = True
        self.io = GameIO()
        self.rulebook = Rulebook(self)

    def current_room(self):
        return self.world.get_room(self.player.location)

    def carried_items(self):
        return [self.world.get_item(k) for k in self.player.inventory]

    def has_light(self):
        return any(item.has_effect(LIGHTS) for item in self.carried_items())

    def holds_key_for(self, room_key, direction):
        target = f"{room_key}:{direction}"
        return any(item.effects.get(UNLOCKS) == target for item in self.carried_items())

    def write_exits(self, room):
        if room.exits:
            self.io.write("Salidas: " + ", ".join(room.exits))
        else:
            self.io.write("Salidas: ninguna")

    def look(self):
        room = self.current_room()
        if room.has_flag(DARK) and not self.has_light():
            self.io.write("Está muy oscuro. Apenas distingues siluetas.")
            self.write_exits(room)
            return

        self.io.write("")
        self.io.write(room.name)
        self.io.write("-" * len(room.name))
        self.io.write(room.description)
        if room.items:
            self.io.write("")
            self.io.write("Ves aquí: " + ", ".join(self.world.names(room.items)))
        self.write_exits(room)

    def show_inventory(self):
        if not self.player.inventory:
            self.io.write("No llevas nada.")
        else:
            self.io.write("Llevas: " + ", ".join(self.world.names(self.player.inventory)))

    def save_game(self, path=None):
        path = path or self.save_path
        persistence.save(path, self.world, self.player)
        self.io.write(f"Juego guardado en {path}")

    def load_game(self, path=None):
        path = path or self.save_path
        self.player = persistence.load(path, self.world)
        self.io.write(f"Juego cargado desde {path}")
        self.look()

    def show_help(self):
        self.io.write(HELP_TEXT)

    def terminate(self):
        self.running = False
        self.io.write("¡Hasta la próxima!")

    def dispatch(self, verb, arg):
        if verb == 'save': self.save_game(); return
        if verb == 'load': self.load_game(); return
        if verb == 'help': self.show_help(); return
        if verb == 'quit': self.terminate(); return
        if not self.rulebook.process(Action(verb, arg)):
            self.io.write(NOT_UNDERSTOOD)

    def execute(self, verb, arg=None):
        """
        Run one tokenized command and return its output text.
        Every GameError is reported here; it never escapes to the caller.
        """
        raw = verb if not arg else f"{verb} {arg}"
        self.io.log_input(raw or "")

        canonical = VERBS.get((verb or "").lower())
        if not canonical:
            self.io.write(NOT_UNDERSTOOD)
            return self.io.output()

        try:
            self.dispatch(canonical, arg)
        except ConfigurationError as e:
            logger.warning("Content error during %r: %s", raw, e.message)
            self.io.write(e.message)
        except GameError as e:
            logger.info("%s during %r: %s", type(e).__name__, raw, e.message)
            self.io.write(e.message)
        return self.io.output()

    def parse(self, text):
        verb, arg = tokenize(text)
        if verb is None: return ""
        return self.execute(verb, arg)
