"""
Tabular resource client: read and write ranges of a remote spreadsheet.

The Google Sheets block talks to this interface only. Production code
plugs in an HTTP client; tests and local runs use InMemoryTabularClient.

Responses never raise for service-level failures. They come back with
``ok=False`` and the service's status message, and the block decides what
to do with it.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

__all__ = [
    "TabularResponse",
    "TabularResourceClient",
    "InMemoryTabularClient",
    "DEFAULT_VALUE_INPUT_OPTION",
]

DEFAULT_VALUE_INPUT_OPTION = "RAW"


@dataclass(frozen=True)
class TabularResponse:
    """Result of one client call."""

    ok: bool
    values: list[list[Any]] | None = None
    status_message: str | None = None

    @classmethod
    def success(cls, values: list[list[Any]] | None = None) -> TabularResponse:
        return cls(ok=True, values=values)

    @classmethod
    def failure(cls, status_message: str) -> TabularResponse:
        return cls(ok=False, status_message=status_message)


class TabularResourceClient(ABC):
    """Read/write access to ranges of a spreadsheet."""

    @abstractmethod
    async def get_values(self, spreadsheet_id: str, range: str) -> TabularResponse:
        """Fetch the 2-D values of ``range``."""
        pass

    @abstractmethod
    async def update_values(
        self,
        spreadsheet_id: str,
        range: str,
        values: list[list[Any]],
        value_input_option: str = DEFAULT_VALUE_INPUT_OPTION,
    ) -> TabularResponse:
        """Overwrite ``range`` with ``values``."""
        pass


class InMemoryTabularClient(TabularResourceClient):
    """
    Dict-backed client for tests and local development.

    Sheets are addressed by exact range string; no A1 arithmetic is done.
    Unknown spreadsheets produce a failure response, unknown ranges an
    empty one. Every call is recorded in ``calls``.

    Usage:
        client = InMemoryTabularClient({"sheet-1": {"Sheet1!A1:B3": [["a", "b"]]}})
        response = await client.get_values("sheet-1", "Sheet1!A1:B3")
    """

    NOT_FOUND_MESSAGE = "Requested entity was not found."

    def __init__(self, spreadsheets: dict[str, dict[str, list[list[Any]]]] | None = None):
        self._spreadsheets: dict[str, dict[str, list[list[Any]]]] = copy.deepcopy(
            spreadsheets or {}
        )
        self._lock = asyncio.Lock()
        self.calls: list[tuple[str, str, str]] = []
        # When set, every call fails with this status message
        self.fail_with: str | None = None

    def values(self, spreadsheet_id: str, range: str) -> list[list[Any]] | None:
        sheet = self._spreadsheets.get(spreadsheet_id)
        if sheet is None or range not in sheet:
            return None
        return copy.deepcopy(sheet[range])

    async def get_values(self, spreadsheet_id: str, range: str) -> TabularResponse:
        async with self._lock:
            self.calls.append(("get", spreadsheet_id, range))
            if self.fail_with is not None:
                return TabularResponse.failure(self.fail_with)

            sheet = self._spreadsheets.get(spreadsheet_id)
            if sheet is None:
                return TabularResponse.failure(self.NOT_FOUND_MESSAGE)
            return TabularResponse.success(copy.deepcopy(sheet.get(range, [])))

    async def update_values(
        self,
        spreadsheet_id: str,
        range: str,
        values: list[list[Any]],
        value_input_option: str = DEFAULT_VALUE_INPUT_OPTION,
    ) -> TabularResponse:
        async with self._lock:
            self.calls.append(("update", spreadsheet_id, range))
            if self.fail_with is not None:
                return TabularResponse.failure(self.fail_with)

            sheet = self._spreadsheets.get(spreadsheet_id)
            if sheet is None:
                return TabularResponse.failure(self.NOT_FOUND_MESSAGE)

            sheet[range] = copy.deepcopy(values)
            logger.debug(
                f"Updated {spreadsheet_id} {range} with {len(values)} rows "
                f"({value_input_option})"
            )
            return TabularResponse.success()
