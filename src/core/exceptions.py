"""Exceptions shared by all layers of the relay server."""


class RelayError(Exception):
    """Base class: everything the relay raises on purpose derives from this."""


class ConfigurationError(RelayError):
    pass


class TransportError(RelayError):
    """Read/write failure, disconnect, closed stream or receive timeout."""


class DecodeError(RelayError):
    """Payload does not describe a valid MoveMessage."""


class InvalidBoardError(RelayError):
    """Board snapshot has the wrong dimensions or contains invalid cell values."""


class InconsistentMoveError(InvalidBoardError):
    """Snapshot does not follow from the server's own board plus exactly one new mark."""
