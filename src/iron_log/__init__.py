"""IronLog - workout tracking with deload-aware progression suggestions."""

import importlib.metadata

try:
    __version__ = importlib.metadata.version("iron-log")
except importlib.metadata.PackageNotFoundError:
    __version__ = "unknown"
