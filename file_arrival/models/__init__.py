"""Domain models for the FILE META arrival checker."""

from .config_models import AppConfig, ColumnLayout, NormalizeConfig, ScanConfig
from .error_record import ErrorRecord
from .processing_result import PassCounts, PassResult
from .row_data import FileMetaRow
from .transfer_method import LABEL_TO_CODE, TransferMethod

__all__ = [
    # Configuration models
    "AppConfig",
    "ColumnLayout",
    "NormalizeConfig",
    "ScanConfig",
    # Registry models
    "FileMetaRow",
    "TransferMethod",
    "LABEL_TO_CODE",
    # Result models
    "ErrorRecord",
    "PassCounts",
    "PassResult",
]
