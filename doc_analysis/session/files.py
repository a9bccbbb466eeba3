"""File selection for a chat session, locked once the corpus is sent."""

import logging

from doc_analysis.models import UploadedFile

logger = logging.getLogger(__name__)


class FilesLockedError(Exception):
    """Raised when a locked file selection is modified."""

    pass


class FileSelection:
    """Ordered list of files chosen for the next session."""

    def __init__(self) -> None:
        self._files: list[UploadedFile] = []
        self._locked = False

    @property
    def files(self) -> tuple[UploadedFile, ...]:
        return tuple(self._files)

    @property
    def locked(self) -> bool:
        return self._locked

    def __len__(self) -> int:
        return len(self._files)

    def _check_unlocked(self) -> None:
        if self._locked:
            raise FilesLockedError("Files are locked for this session")

    def add(self, *files: UploadedFile) -> None:
        self._check_unlocked()
        self._files.extend(files)
        logger.debug(f"Selected {len(files)} file(s), {len(self._files)} total")

    def remove(self, index: int) -> UploadedFile:
        """Remove and return the file at the given position.

        Raises:
            FilesLockedError: If the selection is locked.
            IndexError: If no file is at that position.
        """
        self._check_unlocked()
        return self._files.pop(index)

    def clear(self) -> None:
        self._check_unlocked()
        self._files.clear()

    def lock(self) -> None:
        self._locked = True

    def reset(self) -> None:
        """Unlock and empty the selection for a new session."""
        self._files.clear()
        self._locked = False
