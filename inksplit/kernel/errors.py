"""Exception types raised by inksplit.

Every failure that can reach a host is an ``InksplitError`` so a caller can
show it to a user and keep going.
"""


class InksplitError(RuntimeError):
    pass


class StorageError(InksplitError):
    """File read, write or directory creation failed."""


class ProcessingError(InksplitError):
    """Image bytes could not be decoded or encoded."""


class NoImageSelectedError(InksplitError):
    def __init__(self, message: str = "No image selected") -> None:
        super().__init__(message)


class NoChannelsProducedError(InksplitError):
    def __init__(self, message: str = "No channels produced") -> None:
        super().__init__(message)


class UnsupportedChannelSelectionError(InksplitError):
    pass


class EmptyImageError(InksplitError):
    """Raster with a zero width or height."""


class InvalidInputError(InksplitError, ValueError):
    pass


class BufferGeometryError(InvalidInputError):
    """Pixel buffer length does not match width * height * depth."""
