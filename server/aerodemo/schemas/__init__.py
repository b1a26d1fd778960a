"""Pydantic schemas for request/response validation."""

from .common import *  # noqa: F403
from .enlistment import *  # noqa: F403
from .health import *  # noqa: F403
from .presentation import *  # noqa: F403
from .showcase import *  # noqa: F403
