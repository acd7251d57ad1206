"""Application directories for mvnlock."""

from platformdirs import PlatformDirs

APP_DIRS = PlatformDirs("mvnlock", "mvnlock")
