"""mdarchive: archive completed tasks and restructure markdown task lists."""

__version__ = "0.1.0"
