"""
Well Level Relay - Firmware Artifact Store
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Holds the single OTA image served to the sensor at GET /update.

Uploads are written to a temporary file next to the artifact and moved
into place with os.replace, so the device either downloads the old image
or the complete new one.
"""

import os
import shutil
import tempfile
from pathlib import Path
from threading import Lock
from typing import BinaryIO

from ..core.config import config
from ..core.exceptions import FirmwareNotFoundError, StorageError
from ..core.logging import get_logger, log_firmware_storage_failure

logger = get_logger(__name__)

FIRMWARE_FILENAME = "firmware.bin"


class FirmwareStore:
    """Stores and serves the single firmware artifact."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self._write_lock = Lock()

    @property
    def artifact_path(self) -> Path:
        return self.directory / FIRMWARE_FILENAME

    def ensure_directory(self) -> None:
        """Create the firmware directory if needed."""
        self.directory.mkdir(parents=True, exist_ok=True)

    def exists(self) -> bool:
        return self.artifact_path.is_file()

    def store(self, stream: BinaryIO) -> int:
        """
        Replace the artifact with the contents of ``stream``.

        Returns the number of bytes written.

        Raises:
            StorageError: the image could not be written. Any previously
                stored image is still the one served.
        """
        tmp_path: str | None = None
        with self._write_lock:
            try:
                self.ensure_directory()
                fd, tmp_path = tempfile.mkstemp(
                    dir=self.directory, prefix=".firmware-", suffix=".tmp"
                )
                with os.fdopen(fd, "wb") as tmp:
                    shutil.copyfileobj(stream, tmp)
                    tmp.flush()
                    os.fsync(tmp.fileno())
                    size = tmp.tell()
                os.replace(tmp_path, self.artifact_path)
                tmp_path = None
            except OSError as e:
                log_firmware_storage_failure(e)
                raise StorageError(
                    f"Failed to store firmware: {e}",
                    details={"directory": str(self.directory)},
                ) from e
            finally:
                if tmp_path is not None:
                    try:
                        os.unlink(tmp_path)
                    except OSError:
                        logger.warning(f"Could not remove temporary upload {tmp_path}")

        logger.info("New Firmware Uploaded!", extra={"size_bytes": size})
        return size

    def fetch(self) -> Path:
        """
        Path of the current artifact.

        Raises:
            FirmwareNotFoundError: nothing has been uploaded yet.
        """
        path = self.artifact_path
        if not path.is_file():
            raise FirmwareNotFoundError(FIRMWARE_FILENAME)
        return path


# Singleton instance
_store: FirmwareStore | None = None
_store_lock = Lock()


def get_firmware_store() -> FirmwareStore:
    """Get or create the firmware store singleton."""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                _store = FirmwareStore(config.firmware_dir)
    return _store


def reset_firmware_store() -> None:
    """Reset the firmware store singleton (for testing)."""
    global _store
    with _store_lock:
        _store = None
