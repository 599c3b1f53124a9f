"""Tab categorization, duplicate/stale detection and resource load scoring."""

__version__ = "0.3.0"
