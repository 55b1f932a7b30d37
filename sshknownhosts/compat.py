"""
Import compatibility for ``importlib.metadata`` and ``importlib.resources``.

Python 3.10 ships both with the ``files()`` and ``entry_points(group=...)`` APIs.
Older versions use the ``importlib_metadata`` and ``importlib_resources`` backports.
"""

import sys

__all__ = ["metadata", "resources"]

if sys.version_info >= (3, 10):
    from importlib import metadata, resources
else:
    import importlib_metadata as metadata
    import importlib_resources as resources
