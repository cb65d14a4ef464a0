# -*- coding: utf-8 -*-
"""
Up-to-date check for generated artifacts.

Each source produces two artifacts:
    Source (.cppx) -> Declarations (.h) + Definitions (.cpp)

Both artifacts are regenerated together whenever the source changes.
"""

import os

from ..logger import logger


class BuildCache:
    """
    Timestamp checks for incremental generation.

    Invalidation rules:
    - both artifacts regenerated when: either is missing
    - both artifacts regenerated when: the source is newer than either
    """

    @staticmethod
    def check_timestamp_skip(header_file: str, source_out_file: str, source_file: str,
                             force: bool = False) -> bool:
        """
        Check if the .h and .cpp artifacts are up-to-date based on timestamps.

        If they are outdated, delete them so a failed run never leaves a
        stale pair behind.

        Args:
            header_file: Path to the declaration artifact
            source_out_file: Path to the definition artifact
            source_file: Path to the .cppx source
            force: Never skip

        Returns:
            bool: True if generation can be skipped, False if it must run
        """
        if force or not os.path.exists(source_file):
            return False

        if not (os.path.exists(header_file) and os.path.exists(source_out_file)):
            return False

        source_mtime = os.path.getmtime(source_file)
        if source_mtime > os.path.getmtime(header_file) or source_mtime > os.path.getmtime(source_out_file):
            BuildCache._delete_files(header_file, source_out_file)
            return False

        return True

    @staticmethod
    def _delete_files(*files):
        """Delete files if they exist; failures are logged."""
        for f in files:
            if f and os.path.exists(f):
                try:
                    os.remove(f)
                except OSError as e:
                    logger.warning("Could not delete stale artifact", path=f, reason=e.strerror)
