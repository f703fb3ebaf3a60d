"""Master server utilities package.

This package contains helpers shared across the master server, currently the
reader/writer lock guarding the registry.
"""

from hlds_master.utils.locks import ReadWriteLock

__all__ = [
    "ReadWriteLock",
]
