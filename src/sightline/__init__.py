"""sightline package root."""

from sightline.exceptions import NeverRaise, NeverThrown
from sightline.invariants import never

__all__ = ["__version__", "NeverRaise", "NeverThrown", "never"]

__version__ = "0.1.0"
