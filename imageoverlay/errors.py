from __future__ import annotations


class ImageOverlayError(Exception):
    """Base error for everything raised by imageoverlay."""


class InvalidValueError(ImageOverlayError, ValueError):
    """A colour or alpha component outside its allowed range."""


class InvalidConfigError(ImageOverlayError, ValueError):
    """A cache directory or font path failed existence/permission checks."""


class UnsupportedFormatError(ImageOverlayError, ValueError):
    """The image type was recognised but cannot be decoded."""


class ResourceError(ImageOverlayError, OSError):
    """Opening, reading or writing a source, cache or font file failed."""


class InvalidStateError(ImageOverlayError, RuntimeError):
    """Operation on a canvas, colour or font that is unset or released."""
