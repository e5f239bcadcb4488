"""autograph_core -- compilation core of the Autograph workflow editor."""

__version__ = "0.1.0"
