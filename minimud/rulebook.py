import logging

from minimud.errors import ConfigurationError, NotFoundError, PermissionDeniedError, UsageError
from minimud.world import LIGHTS, UNLOCKS, lock_flag

logger = logging.getLogger(__name__)


class Action:
    def __init__(self, verb, token=None):
        self.verb = verb
        self.token = token
        self.item = None
        self.outcome = None


def parse_unlock_target(item):
    """Split an `unlocks` value into (room_key, direction)."""
    parts = item.effects[UNLOCKS].split(':')
    if len(parts) != 2:
        logger.warning("Item %s has a malformed unlocks value: %r", item.key, item.effects[UNLOCKS])
        raise ConfigurationError("La llave no está bien configurada.")
    return parts[0], parts[1].lower()


class Rulebook:
    """
    Each verb runs as check -> carry out -> report.
    Checks raise a GameError to refuse the action before any state changes.
    """
    def __init__(self, game):
        self.game = game

    def process(self, action):
        verb = action.verb
        check_f = getattr(self, f"check_{verb}", None)
        carry_f = getattr(self, f"carry_out_{verb}", None)
        report_f = getattr(self, f"report_{verb}", None)

        if not check_f and not carry_f and not report_f:
            return False

        if check_f: check_f(action)
        if carry_f: carry_f(action)
        if report_f: report_f(action)
        return True

    # --- LOOK ---
    def report_look(self, action):
        self.game.look()

    # --- INVENTORY ---
    def report_inventory(self, action):
        self.game.show_inventory()

    # --- GO ---
    def check_go(self, action):
        if not action.token: raise UsageError("Uso: go <north|south|east|west|up|down>")
        room = self.game.current_room()
        direction = action.token.lower()
        if direction not in room.exits: raise NotFoundError("No hay salida en esa dirección.")

        action.direction = direction
        action.destination = room.exits[direction]
        action.unlocking = False
        if room.is_locked(direction):
            if not self.game.holds_key_for(room.key, direction):
                raise PermissionDeniedError("La salida está bloqueada.")
            action.unlocking = True

    def carry_out_go(self, action):
        room = self.game.current_room()
        if action.unlocking:
            room.set_flag(lock_flag(action.direction), False)
            logger.debug("Exit %s:%s unlocked on the way through", room.key, action.direction)
        self.game.player.location = action.destination
        logger.debug("Player moved %s -> %s", room.key, action.destination)

    def report_go(self, action):
        if action.unlocking: self.game.io.write("Usas la llave y desbloqueas la salida.")
        self.game.look()

    # --- TAKE ---
    def check_take(self, action):
        if not action.token: raise UsageError("Uso: take <objeto>")
        room = self.game.current_room()
        action.item = self.game.world.find_item(action.token, room.items)
        if not action.item: raise NotFoundError("No ves eso aquí.")
        if not action.item.portable: raise PermissionDeniedError("No puedes cargar eso.")

    def carry_out_take(self, action):
        self.game.current_room().items.remove(action.item.key)
        self.game.player.inventory.append(action.item.key)
        logger.debug("Took %s", action.item.key)

    def report_take(self, action):
        self.game.io.write(f"Tomaste {action.item.name}.")

    # --- DROP ---
    def check_drop(self, action):
        if not action.token: raise UsageError("Uso: drop <objeto>")
        action.item = self.game.world.find_item(action.token, self.game.player.inventory)
        if not action.item: raise NotFoundError("No llevas eso.")

    def carry_out_drop(self, action):
        self.game.player.inventory.remove(action.item.key)
        self.game.current_room().items.append(action.item.key)
        logger.debug("Dropped %s in %s", action.item.key, self.game.player.location)

    def report_drop(self, action):
        self.game.io.write(f"Dejaste {action.item.name}.")

    # --- USE ---
    def check_use(self, action):
        if not action.token: raise UsageError("Uso: use <objeto>")
        action.item = self.game.world.find_item(action.token, self.game.player.inventory)
        if not action.item: raise NotFoundError("No llevas eso.")

        item = action.item
        if item.has_effect(LIGHTS):
            action.outcome = 'light'
        elif item.has_effect(UNLOCKS):
            action.target_room, action.direction = parse_unlock_target(item)
            room = self.game.current_room()
            if action.target_room != room.key:
                action.outcome = 'wrong_room'
            elif room.is_locked(action.direction):
                action.outcome = 'unlock'
            else:
                action.outcome = 'nothing_to_unlock'
        else:
            action.outcome = 'nothing'

    def carry_out_use(self, action):
        if action.outcome == 'unlock':
            self.game.current_room().set_flag(lock_flag(action.direction), False)
            logger.debug("Exit %s:%s unlocked with %s", action.target_room, action.direction, action.item.key)

    def report_use(self, action):
        io = self.game.io
        if action.outcome == 'light':
            io.write(f"Alzas {action.item.name}. La luz revela tu entorno.")
            self.game.look()
        elif action.outcome == 'unlock':
            io.write(f"Usas {action.item.name} y desbloqueas la salida {action.direction}.")
        elif action.outcome == 'nothing_to_unlock':
            io.write("Aquí no hay nada que desbloquear.")
        elif action.outcome == 'wrong_room':
            io.write("No parece servir aquí.")
        else:
            io.write("No pasa nada.")
