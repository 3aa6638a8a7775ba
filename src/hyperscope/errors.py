"""Exception types raised by hyperscope."""


class HyperscopeError(Exception):
    """Base class for all hyperscope errors."""


class ConfigurationError(HyperscopeError, ValueError):
    """A simulation config is inconsistent (bad dimensions, plane indices, ranges)."""


class EncoderError(HyperscopeError, RuntimeError):
    """ffmpeg failed while encoding a video."""
