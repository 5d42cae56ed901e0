"""
gcode_looper package initialisation.

1. **Expose the version string**
   ``gcode_looper.__version__`` is resolved at import-time from the installed
   distribution metadata.

2. **Re-export the public YAML loader** so call-sites can simply do::

       from gcode_looper import load_config
"""

from importlib.metadata import PackageNotFoundError, version

# --------------------------------------------------------------------------- #
# Version resolution
# --------------------------------------------------------------------------- #
try:
    __version__: str = version("gcode-looper")
except PackageNotFoundError:
    # Source tree without installed metadata.
    __version__ = "0.0.0"

# --------------------------------------------------------------------------- #
# Public re-exports
# --------------------------------------------------------------------------- #
from .config import load_config  # noqa: E402 – deliberate late import

__all__: list[str] = ["load_config", "__version__"]
