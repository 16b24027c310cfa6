# ruff: noqa: F403, F401
"""Schemas package initialization."""

# Import all schemas to ensure they're registered
from .base import *
from .room import *
from .post import *
from .user import *
from .upload import *
from .ai import *
