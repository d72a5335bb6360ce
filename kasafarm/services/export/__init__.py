"""Export delivery package."""

from kasafarm.services.export.delivery import (
    DirectoryExportDelivery,
    ExportDeliveryError,
    ExportDeliveryInterface,
)

__all__ = [
    "DirectoryExportDelivery",
    "ExportDeliveryError",
    "ExportDeliveryInterface",
]
