# core/sheets_client.py

from __future__ import annotations

from typing import List, Dict, Any, Optional, Tuple

from googleapiclient.discovery import build

from product_drive_uploader.core.drive_client import DriveClient
from product_drive_uploader.core.drive_setup import get_or_create_spreadsheet_id
from product_drive_uploader.core.google_auth import get_credentials

CellValue = Any


def column_to_letter(col: int) -> str:
    """1 -> A, 26 -> Z, 27 -> AA, 37 -> AK"""
    result = ""
    n = col
    while n > 0:
        n, rem = divmod(n - 1, 26)
        result = chr(65 + rem) + result
    return result


def sheet_range(sheet_name: str, column_count: int) -> str:
    return f"{sheet_name}!A:{column_to_letter(column_count)}"


class SheetsClient:
    """Google Sheets v4 的简单封装，spreadsheet id 不传则自动查找/创建"""

    def __init__(self, service=None, spreadsheet_id: Optional[str] = None, drive: Optional[DriveClient] = None):
        if service is None:
            service = build("sheets", "v4", credentials=get_credentials(), cache_discovery=False)
        self.service = service
        self._spreadsheet_id = spreadsheet_id
        self._drive = drive

    @property
    def spreadsheet_id(self) -> str:
        if not self._spreadsheet_id:
            drive = self._drive or DriveClient()
            self._spreadsheet_id = get_or_create_spreadsheet_id(drive, self.service)
        return self._spreadsheet_id

    def _values(self):
        return self.service.spreadsheets().values()

    def read(self, range_: str = "A:Z") -> List[List[str]]:
        result = self._values().get(spreadsheetId=self.spreadsheet_id, range=range_).execute()
        return result.get("values", [])

    def append(self, values: List[List[CellValue]], range_: str = "A:Z") -> int:
        result = (
            self._values()
            .append(
                spreadsheetId=self.spreadsheet_id,
                range=range_,
                valueInputOption="USER_ENTERED",
                insertDataOption="INSERT_ROWS",
                body={"values": values},
            )
            .execute()
        )
        return (result.get("updates") or {}).get("updatedRows", 0)

    def write(self, values: List[List[CellValue]], range_: str) -> int:
        result = (
            self._values()
            .update(
                spreadsheetId=self.spreadsheet_id,
                range=range_,
                valueInputOption="USER_ENTERED",
                body={"values": values},
            )
            .execute()
        )
        return result.get("updatedRows", 0)

    def find_row_by_value(
        self,
        value: str,
        column_index: int = 0,
        range_: str = "A:Z",
    ) -> Optional[Tuple[int, List[str]]]:
        """返回 (1 开始的行号, 行数据)，找不到返回 None"""
        for i, row in enumerate(self.read(range_)):
            if column_index < len(row) and row[column_index] == value:
                return i + 1, row
        return None

    def update_row(self, row_index: int, values: List[CellValue], sheet_name: str) -> int:
        return self.write([values], f"{sheet_name}!A{row_index}")

    def get_info(self) -> Dict[str, Any]:
        data = self.service.spreadsheets().get(spreadsheetId=self.spreadsheet_id).execute()
        return {
            "title": (data.get("properties") or {}).get("title", ""),
            "sheets": [
                {
                    "title": s["properties"].get("title", ""),
                    "index": s["properties"].get("index", 0),
                    "rowCount": (s["properties"].get("gridProperties") or {}).get("rowCount", 0),
                    "columnCount": (s["properties"].get("gridProperties") or {}).get("columnCount", 0),
                }
                for s in data.get("sheets", [])
            ],
        }
