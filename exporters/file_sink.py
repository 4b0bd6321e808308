"""Writes converted files into the output directory."""

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

PathLike = Union[str, Path]


class FileSink:
    """
    Creates the output directory and writes whole text files into it.

    Files are written as UTF-8 and overwrite any existing file of the
    same name. Every ``OSError`` is logged and re-raised: failing to
    write is fatal for the job.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('notion_obsidian_converter.exporters.file_sink')
        self.written_files: List[Path] = []

    def ensure_directory(self, directory: PathLike) -> Path:
        """Create ``directory`` and its parents if needed."""
        path = Path(directory)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            parent = path.parent
            self.logger.error(
                f"Permission denied creating directory {path}: {e}. "
                f"Parent exists: {parent.exists()}, "
                f"writable: {os.access(str(parent), os.W_OK) if parent.exists() else False}"
            )
            raise
        except OSError as e:
            self.logger.error(f"OS error creating directory {path}: {e}")
            raise
        self.logger.debug(f"Output directory ready: {path}")
        return path

    def write_text(self, directory: PathLike, filename: str, content: str) -> Path:
        """
        Write ``content`` to ``directory/filename``.

        Args:
            directory: Existing output directory
            filename: File name, no path separators
            content: Full file text

        Returns:
            Path of the written file
        """
        path = Path(directory) / filename
        try:
            path.write_text(content, encoding='utf-8')
        except OSError as e:
            self.logger.error(f"IO error writing to {path}: {e}")
            raise
        self.written_files.append(path)
        self.logger.debug(f"Wrote {len(content)} characters to {path}")
        return path


__all__ = ['FileSink']
