"""
Application constants for the Cart Uplift learning worker
"""

from .app import *
from .learning import *
from .interaction_types import *

__all__ = app.__all__ + learning.__all__ + interaction_types.__all__
