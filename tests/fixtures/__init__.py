"""Shared pytest fixtures and helpers for federation tests."""

from .api import *  # noqa: F401,F403
from .core import *  # noqa: F401,F403
from .legacy import *  # noqa: F401,F403
from .services import *  # noqa: F401,F403
