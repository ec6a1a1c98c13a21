"""Built-in block handlers."""

from pyblockflow.executor.blocks.google_sheets import GOOGLE_SHEETS_NAMESPACE, GoogleSheetsBlock
from pyblockflow.executor.blocks.trigger import TriggerBlock

__all__ = ["GoogleSheetsBlock", "TriggerBlock", "GOOGLE_SHEETS_NAMESPACE"]
