# core/drive_client.py

from __future__ import annotations

import io
from typing import List, Dict, Any, Optional

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload
from loguru import logger

from product_drive_uploader.core.drive_setup import get_or_create_root_folder_id
from product_drive_uploader.core.drive_utils import (
    FOLDER_MIME_TYPE,
    escape_drive_query,
    file_view_url,
    folder_url,
)
from product_drive_uploader.core.google_auth import get_credentials

FILE_FIELDS = "id, name, mimeType, size, createdTime, modifiedTime, webViewLink, webContentLink"
UPLOAD_FIELDS = "id, name, webViewLink, webContentLink"


class DriveClient:
    """
    Google Drive v3 的最小封装。
    这一层不重试，错误（HttpError）直接抛给调用方。
    """

    def __init__(self, service=None):
        if service is None:
            service = build("drive", "v3", credentials=get_credentials(), cache_discovery=False)
        self.service = service

    def _default_parent(self) -> str:
        return get_or_create_root_folder_id(self)

    # --- 1. 创建文件夹 ---

    def create_folder(self, name: str, parent_id: Optional[str] = None) -> Dict[str, Any]:
        """不检查重名，去重由调用方负责"""
        parent = parent_id or self._default_parent()
        data = (
            self.service.files()
            .create(
                body={"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent]},
                fields=UPLOAD_FIELDS,
            )
            .execute()
        )
        return {
            "id": data["id"],
            "name": data.get("name", name),
            "webViewLink": data.get("webViewLink") or folder_url(data["id"]),
            "webContentLink": data.get("webContentLink") or "",
        }

    # --- 2. 上传文件 ---

    def upload_file(
        self,
        name: str,
        mime_type: str,
        content: bytes,
        folder_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        parent = folder_id or self._default_parent()
        media = MediaIoBaseUpload(io.BytesIO(content), mimetype=mime_type, resumable=True)
        data = (
            self.service.files()
            .create(
                body={"name": name, "parents": [parent]},
                media_body=media,
                fields=UPLOAD_FIELDS,
            )
            .execute()
        )
        return {
            "id": data["id"],
            "name": data.get("name", name),
            "webViewLink": data.get("webViewLink") or file_view_url(data["id"]),
            "webContentLink": data.get("webContentLink") or "",
        }

    # --- 3. 列出文件夹里的文件 ---

    def list_files(
        self,
        folder_id: Optional[str] = None,
        page_size: int = 100,
        all_pages: bool = False,
    ) -> List[Dict[str, Any]]:
        """all_pages=True 时按 nextPageToken 翻页，返回文件夹里的全部文件"""
        parent = folder_id or self._default_parent()
        files: List[Dict[str, Any]] = []
        page_token = None
        while True:
            params = dict(
                q=f"'{escape_drive_query(parent)}' in parents and trashed = false",
                pageSize=page_size,
                fields=f"nextPageToken, files({FILE_FIELDS})",
                orderBy="createdTime",
            )
            if page_token:
                params["pageToken"] = page_token
            results = self.service.files().list(**params).execute()
            files.extend(results.get("files", []))

            page_token = results.get("nextPageToken")
            if not all_pages or not page_token:
                return files

    # --- 4. 按 id 取文件信息 ---

    def get_file(self, file_id: str) -> Optional[Dict[str, Any]]:
        """
        文件不存在 / 没权限 / 已经在回收站时返回 None
        （比如有人手动把商品文件夹删了）
        """
        try:
            data = (
                self.service.files()
                .get(fileId=file_id, fields=f"{FILE_FIELDS}, trashed")
                .execute()
            )
        except HttpError as e:
            logger.warning(f"[Drive] get_file({file_id}) failed: {e}")
            return None
        if data.get("trashed"):
            return None
        return data

    # --- 5. 设置公开可读 ---

    def make_file_public(self, file_id: str) -> None:
        self.service.permissions().create(
            fileId=file_id,
            body={"role": "reader", "type": "anyone"},
        ).execute()

    # --- 6. 按名字找文件夹 ---

    def find_folder_by_name(self, name: str, parent_id: Optional[str] = None) -> Optional[str]:
        query = (
            f"name = '{escape_drive_query(name)}' and "
            f"mimeType = '{FOLDER_MIME_TYPE}' and "
            "trashed = false"
        )
        if parent_id:
            query += f" and '{escape_drive_query(parent_id)}' in parents"
        return self.find_file_id(query)

    def find_file_id(self, query: str) -> Optional[str]:
        results = (
            self.service.files()
            .list(q=query, fields="files(id, name)", pageSize=1)
            .execute()
        )
        files = results.get("files", [])
        return files[0]["id"] if files else None


def try_make_public(drive: DriveClient, file_id: str) -> bool:
    """设置公开失败只记警告，不影响上传结果"""
    try:
        drive.make_file_public(file_id)
        return True
    except Exception as e:
        logger.warning(f"⚠️ [DriveUpload] Could not make {file_id} public: {e}")
        return False
