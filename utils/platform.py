"""Host platform identification.

Adapters select their acquisition strategy from detect_platform(). The
probe is cached so the platform is identified once per process.
"""

import sys
from functools import lru_cache

from enums import Platform


@lru_cache(maxsize=1)
def detect_platform() -> Platform:
    """Identify the host platform from sys.platform.

    Returns:
        Platform enum value.
    """
    if sys.platform.startswith("win"):
        return Platform.WINDOWS
    if sys.platform.startswith("linux"):
        return Platform.LINUX
    if sys.platform == "darwin":
        return Platform.DARWIN
    return Platform.OTHER
