"""Audio-reactive N-dimensional particle simulation projected to 2D."""

from hyperscope.config import PRESETS, BaseConfig, SimulationConfig, load_config, preset
from hyperscope.errors import ConfigurationError, EncoderError, HyperscopeError

__version__ = "0.1.0"
__all__ = [
    "BaseConfig",
    "ConfigurationError",
    "EncoderError",
    "HyperscopeError",
    "PRESETS",
    "SimulationConfig",
    "load_config",
    "preset",
]
