"""The `mvnlock` APIs."""

__version__ = "0.1.0"

from .mvnlock import *
