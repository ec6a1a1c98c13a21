"""
Google Sheets block: read a range into the run, or write run data to a range.

Block data fields:
    spreadsheetId: Target spreadsheet (required, non-blank)
    range: A1 range, e.g. ``Sheet1!A1:C10`` (required, non-blank)
    type: ``get`` or ``update``
    firstRowAsKey: ``get`` only; turn rows into mappings keyed by the header row
    dataFrom: ``update`` only; ``data-columns`` or ``table`` (the run's table)
        or ``custom`` (``customData`` as JSON, raw string if it does not parse)
    keysAsFirstRow: ``update`` from the table; write a header row first
    valueInputOption: ``update`` only; passed to the client, default ``RAW``
    refKey: Name to publish a ``get`` result under in ``googleSheets``
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pyblockflow.clients.tabular import DEFAULT_VALUE_INPUT_OPTION, TabularResourceClient
from pyblockflow.executor.context import RunContext
from pyblockflow.executor.handler import BlockHandler
from pyblockflow.executor.outcome import ExternalServiceError, ValidationError
from pyblockflow.models import Block
from pyblockflow.utils import (
    convert_2d_array_to_objects,
    convert_objects_to_2d_array,
    is_whitespace,
    parse_json,
)

logger = logging.getLogger(__name__)

__all__ = [
    "GoogleSheetsBlock",
    "GOOGLE_SHEETS_NAMESPACE",
    "EMPTY_SPREADSHEET_ID",
    "EMPTY_SPREADSHEET_RANGE",
]

GOOGLE_SHEETS_NAMESPACE = "googleSheets"
EMPTY_SPREADSHEET_ID = "empty-spreadsheet-id"
EMPTY_SPREADSHEET_RANGE = "empty-spreadsheet-range"

DATA_FROM_COLUMNS = "data-columns"
DATA_FROM_TABLE = "table"
DATA_FROM_CUSTOM = "custom"


class GoogleSheetsBlock(BlockHandler):
    """Reads or updates a spreadsheet range through a TabularResourceClient."""

    kind = "google-sheets"
    namespace = GOOGLE_SHEETS_NAMESPACE

    def __init__(self, client: TabularResourceClient):
        self._client = client

    async def run(self, block: Block, context: RunContext) -> Any:
        data = block.data

        if is_whitespace(data.get("spreadsheetId")):
            raise ValidationError(EMPTY_SPREADSHEET_ID)
        if is_whitespace(data.get("range")):
            raise ValidationError(EMPTY_SPREADSHEET_RANGE)

        operation = data.get("type")
        if operation == "get":
            return await self._get_values(data)
        if operation == "update":
            await self._update_values(data, context)
            return None

        logger.warning(f"Block {block.id}: unknown spreadsheet operation {operation!r}")
        return []

    async def _get_values(self, data: Mapping[str, Any]) -> Any:
        response = await self._client.get_values(data["spreadsheetId"], data["range"])
        if not response.ok:
            raise ExternalServiceError(response.status_message or "Spreadsheet request failed")

        values = response.values or []
        if data.get("firstRowAsKey"):
            return convert_2d_array_to_objects(values)
        return values

    async def _update_values(self, data: Mapping[str, Any], context: RunContext) -> None:
        values = self._values_to_write(data, context)

        response = await self._client.update_values(
            data["spreadsheetId"],
            data["range"],
            values,
            data.get("valueInputOption") or DEFAULT_VALUE_INPUT_OPTION,
        )
        if not response.ok:
            raise ExternalServiceError(response.status_message or "Spreadsheet update failed")

    def _values_to_write(self, data: Mapping[str, Any], context: RunContext) -> Any:
        source = data.get("dataFrom")

        if source == DATA_FROM_CUSTOM:
            return parse_json(data.get("customData", ""))

        if source in (DATA_FROM_COLUMNS, DATA_FROM_TABLE):
            table = context.table
            if data.get("keysAsFirstRow"):
                return convert_objects_to_2d_array(table)
            return [list(row.values()) for row in table]

        raise ValidationError(f"unknown-data-source: {source}")
