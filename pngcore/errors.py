class DecodeError(ValueError):
    """Base class for every failure raised while decoding a PNG stream."""


class InvalidData(DecodeError):
    """Malformed or non-conformant byte stream."""


class InvalidImageDimensions(DecodeError):
    """Header level violation: zero sized image or misplaced image data."""
