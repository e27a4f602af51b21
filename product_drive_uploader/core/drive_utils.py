# core/drive_utils.py

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
SPREADSHEET_MIME_TYPE = "application/vnd.google-apps.spreadsheet"

# Drive 的 id 只包含字母数字和 - _
_DRIVE_ID_RE = re.compile(r"^[A-Za-z0-9_-]{10,}$")
_FOLDER_LINK_RE = re.compile(r"/folders/([A-Za-z0-9_-]+)")
_SEQUENCE_RE = re.compile(r"^(\d+)_")


@dataclass(frozen=True)
class FolderRef:
    folder_id: str

    @property
    def url(self) -> str:
        return folder_url(self.folder_id)


def parse_folder_ref(ref: Optional[str]) -> Optional[FolderRef]:
    """
    从文件夹链接里解析出 folder id。
    支持：
      https://drive.google.com/drive/folders/{id}
      https://drive.google.com/drive/u/0/folders/{id}?usp=sharing
      直接给 id
    解析不了返回 None（调用方当作没有文件夹处理）。
    """
    if not ref:
        return None
    ref = ref.strip()
    if not ref:
        return None

    match = _FOLDER_LINK_RE.search(ref)
    if match:
        return FolderRef(match.group(1))

    if "/" not in ref and _DRIVE_ID_RE.match(ref):
        return FolderRef(ref)
    return None


def escape_drive_query(value: str) -> str:
    """Drive 查询语法里单引号要用反斜杠转义，反斜杠本身也要转义"""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def folder_url(folder_id: str) -> str:
    return f"https://drive.google.com/drive/folders/{folder_id}"


def file_view_url(file_id: str) -> str:
    return f"https://drive.google.com/file/d/{file_id}/view"


def next_sequence_number(names: Iterable[str]) -> int:
    """找出 "3_SKU.jpg" 这种文件名里最大的序号，返回下一个可用的序号"""
    max_number = 0
    for name in names:
        match = _SEQUENCE_RE.match(name or "")
        if match:
            max_number = max(max_number, int(match.group(1)))
    return max_number + 1
