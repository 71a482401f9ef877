"""Scheduled, once-per-window collection of log files and command output.

The CLI in :mod:`logcollector.cli` is the usual entry point; the names below let
other Python code drive a collection directly::

    from logcollector import CollectionRequest, CollectionRunner

    result = CollectionRunner().run(CollectionRequest(source="/var/log/app.log"))
"""

from importlib.metadata import PackageNotFoundError, version

from logcollector.gate import should_collect
from logcollector.runner import CollectionRequest, CollectionResult, CollectionRunner
from logcollector.state import StatusStore, StorageError

try:
    __version__ = version("logcollector")
except PackageNotFoundError:  # running from a source checkout
    __version__ = "0.0.0"

__all__ = [
    "CollectionRequest",
    "CollectionResult",
    "CollectionRunner",
    "StatusStore",
    "StorageError",
    "should_collect",
    "__version__",
]
