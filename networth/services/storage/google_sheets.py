"""
Google Sheets Storage Implementation

DESIGN DECISION: Goals and the audit trail live in a Google Sheet because:
1. Users can read and edit their goal directly in Sheets
2. No database setup required
3. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (one goal row per user is fine)
- No transactions (one row per user, replaced in place)
- gspread is synchronous, so calls run in a worker thread to keep the
  event loop free for the aggregation engine
"""

import asyncio
import json
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from networth.config import GoogleSheetsSettings, get_settings
from networth.models.audit import AuditEvent, AuditEventType, AuditSeverity
from networth.models.goal import Goal
from networth.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    GoalStoreInterface,
    StorageError,
)


# Column mappings for Goals sheet
GOAL_COLUMNS = [
    "user_id",
    "goal_id",
    "name",
    "target_amount",
    "current_net_worth",
    "target_date",
    "updated_at",
]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
]


def _safe_getter(row: list):
    """Index accessor that tolerates short rows and empty cells."""
    def safe_get(index: int, default: str = "") -> str:
        try:
            return row[index] if row[index] else default
        except IndexError:
            return default
    return safe_get


SCOPES = (
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
)

# Shared by every blocking gspread call; quota errors are usually transient
sheets_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


class GoogleSheetsClient:
    """
    Lazily opened handle on the configured spreadsheet.
    
    Worksheets are created with a header row the first time they are asked for.
    """
    
    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._settings = settings or get_settings().google_sheets
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
    
    @sheets_retry
    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Authorize with the service account and open the spreadsheet once."""
        if self._spreadsheet is not None:
            return self._spreadsheet
        
        path = self._settings.credentials_path
        try:
            credentials = Credentials.from_service_account_file(path, scopes=list(SCOPES))
        except FileNotFoundError:
            raise ConnectionError(f"Service account file missing: {path}")
        
        try:
            self._spreadsheet = gspread.authorize(credentials).open_by_key(
                self._settings.spreadsheet_id
            )
        except gspread.SpreadsheetNotFound:
            raise ConnectionError(
                f"No spreadsheet with ID {self._settings.spreadsheet_id}"
            )
        except Exception as e:
            raise ConnectionError(f"Could not open goal/audit spreadsheet: {e}")
        return self._spreadsheet
    
    def worksheet(self, title: str, header: list[str], rows: int) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            return spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(title=title, rows=rows, cols=len(header))
            sheet.append_row(header)
            return sheet
    
    def get_goals_sheet(self) -> gspread.Worksheet:
        return self.worksheet(self._settings.goals_sheet_name, GOAL_COLUMNS, rows=1000)
    
    def get_audit_sheet(self) -> gspread.Worksheet:
        return self.worksheet(self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000)


class GoogleSheetsGoalStore(GoalStoreInterface):
    """
    Google Sheets implementation of the goal store.
    
    One row per user; the user ID is the first column.
    """
    
    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()
    
    def _goal_to_row(self, identity_id: str, goal: Goal) -> list:
        """Convert a Goal to a spreadsheet row."""
        return [
            identity_id,
            str(goal.goal_id),
            goal.name,
            str(goal.target_amount),
            str(goal.current_net_worth),
            goal.target_date.isoformat() if goal.target_date else "",
            goal.updated_at.isoformat(),
        ]
    
    def _row_to_goal(self, row: list) -> Goal:
        """Convert a spreadsheet row to a Goal."""
        safe_get = _safe_getter(row)
        return Goal(
            goal_id=UUID(safe_get(1)),
            name=safe_get(2),
            target_amount=Decimal(safe_get(3, "0")),
            current_net_worth=Decimal(safe_get(4, "0")),
            target_date=date.fromisoformat(safe_get(5)) if safe_get(5) else None,
            updated_at=datetime.fromisoformat(safe_get(6)),
        )
    
    @sheets_retry
    def _read_sync(self, identity_id: str) -> Optional[Goal]:
        sheet = self._client.get_goals_sheet()
        for row in sheet.get_all_values()[1:]:  # Skip header
            if row and row[0] == identity_id:
                return self._row_to_goal(row)
        return None
    
    @sheets_retry
    def _write_sync(self, identity_id: str, goal: Goal) -> None:
        sheet = self._client.get_goals_sheet()
        new_row = self._goal_to_row(identity_id, goal)
        
        # Start from 2 (row 1 is header)
        for idx, row in enumerate(sheet.get_all_values()[1:], start=2):
            if row and row[0] == identity_id:
                sheet.update(
                    range_name=f"A{idx}",
                    values=[new_row],
                    value_input_option="RAW",
                )
                return
        
        sheet.append_row(new_row, value_input_option="RAW")
    
    async def read(self, identity_id: str) -> Optional[Goal]:
        """Load the active goal for a user."""
        try:
            return await asyncio.to_thread(self._read_sync, identity_id)
        except Exception as e:
            raise StorageError(f"Failed to read goal: {e}")
    
    async def write(self, identity_id: str, goal: Goal) -> bool:
        """Create or replace the active goal for a user."""
        try:
            await asyncio.to_thread(self._write_sync, identity_id, goal)
            return True
        except Exception as e:
            raise StorageError(f"Failed to write goal: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """Audit trail as an append-only worksheet, one event per row."""
    
    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()
    
    def _row_to_event(self, row: list) -> AuditEvent:
        cell = _safe_getter(row)
        return AuditEvent(
            event_id=UUID(cell(0)),
            timestamp=datetime.fromisoformat(cell(1)),
            event_type=AuditEventType(cell(2)),
            severity=AuditSeverity(cell(3)),
            entity_type=cell(4) or None,
            entity_id=cell(5) or None,
            correlation_id=UUID(cell(6)) if cell(6) else None,
            description=cell(7),
            details=json.loads(cell(8)) if cell(8) else {},
            error_message=cell(9) or None,
        )
    
    @sheets_retry
    def _append_sync(self, event: AuditEvent) -> None:
        self._client.get_audit_sheet().append_row(
            event.to_sheets_row(), value_input_option="RAW"
        )
    
    @sheets_retry
    def _rows_sync(self) -> list[list]:
        return self._client.get_audit_sheet().get_all_values()[1:]
    
    async def append_event(self, event: AuditEvent) -> bool:
        try:
            await asyncio.to_thread(self._append_sync, event)
        except Exception as e:
            raise StorageError(f"Could not append audit event {event.event_id}: {e}")
        return True
    
    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Newest first. Rows that no longer parse are left out."""
        try:
            rows = await asyncio.to_thread(self._rows_sync)
        except Exception as e:
            raise StorageError(f"Could not read the audit sheet: {e}")
        
        events = []
        for row in rows:
            if not row or not row[0]:
                continue
            try:
                events.append(self._row_to_event(row))
            except (ValueError, KeyError):
                continue
        
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
