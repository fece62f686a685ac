"""
Monitor package for website change detection.

This package contains:
- Change detection engine
- Content hashing and line diffs
- File-backed snapshot storage
- ntfy notifications
- Git commits of updated snapshots
- Run summary reporting
"""

__version__ = "1.0.0"
