"""Domain layer: exceptions raised at the store and session boundaries."""


class EntityStoreError(Exception):
    """Raised by an entity store when a backend operation fails."""


class SessionError(Exception):
    """Base class for conversation session protocol errors."""


class SessionNotFoundError(SessionError):
    pass


class SessionBusyError(SessionError):
    """A command is already in flight for this session."""


class SessionClosedError(SessionError):
    pass
