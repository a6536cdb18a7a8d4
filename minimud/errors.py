class GameError(Exception):
    """
    Base for every failure a command can report.
    The message is the text shown to the player.
    """
    def __init__(self, message):
        super().__init__(message)
        self.message = message


class UsageError(GameError):
    pass


class NotFoundError(GameError):
    pass


class PermissionDeniedError(GameError):
    pass


class ConfigurationError(GameError):
    """Authored content is malformed (a content defect, not a player mistake)."""
    pass


class PersistenceError(GameError):
    pass


class StorageError(PersistenceError):
    pass


class SnapshotParseError(PersistenceError):
    pass
