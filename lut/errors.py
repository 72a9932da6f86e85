class InvalidShapeError(ValueError):
    """Raised when a buffer or array does not match its declared shape."""


class InvalidArgumentError(ValueError):
    """Raised when a count or image dimension is out of range."""
