"""
Export Delivery

Hands finished export bytes to the user. Serialization happens elsewhere
(kasafarm.reports.csv_export); a delivery only decides where the bytes go.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

import structlog

logger = structlog.get_logger(__name__)


class ExportDeliveryError(Exception):
    """The export could not be handed to the user."""
    pass


class ExportDeliveryInterface(ABC):
    """Abstract target for generated export files."""

    @abstractmethod
    def deliver(self, content: bytes, filename: str) -> None:
        """
        Deliver export content under a suggested filename.

        Args:
            content: Encoded file content
            filename: Suggested file name (no directory part)

        Raises:
            ExportDeliveryError: If the content cannot be delivered
        """
        pass


class DirectoryExportDelivery(ExportDeliveryInterface):
    """
    Writes exports into a local directory.

    An export with the same filename (same day) replaces the earlier one.
    """

    def __init__(self, directory: Union[str, Path]):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def deliver(self, content: bytes, filename: str) -> None:
        if Path(filename).name != filename:
            raise ExportDeliveryError(f"Filename must not contain a path: {filename}")

        target = self._directory / filename
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            raise ExportDeliveryError(f"Failed to write export {target}: {e}") from e

        logger.info("export_written", path=str(target), size_bytes=len(content))
