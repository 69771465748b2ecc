class ApplicationError(Exception):
    status = 500


class DecodeError(ApplicationError):
    """Raised when a payload cannot be decoded into a registered type."""

    status = 400


class EncodeError(ApplicationError):
    pass


class TransportError(ApplicationError):
    """A request rejected before it reaches a decision function."""

    status = 400


class UnsupportedMediaType(TransportError):
    status = 415


class UnexpectedObject(TransportError):
    pass
