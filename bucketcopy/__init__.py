"""Object-storage backend for the bucketcopy file-copy tool."""

__version__ = "0.1.0"
