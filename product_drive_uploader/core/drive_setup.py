# core/drive_setup.py

from __future__ import annotations

from typing import Optional

from loguru import logger

from product_drive_uploader.config import settings
from product_drive_uploader.core.drive_utils import (
    FOLDER_MIME_TYPE,
    SPREADSHEET_MIME_TYPE,
    escape_drive_query,
)

# 进程内缓存，丢了也没关系：按名字查找/创建本身是幂等的
_cached_root_folder_id: Optional[str] = None
_cached_spreadsheet_id: Optional[str] = None


def reset_cache() -> None:
    global _cached_root_folder_id, _cached_spreadsheet_id
    _cached_root_folder_id = None
    _cached_spreadsheet_id = None


def get_or_create_root_folder_id(drive) -> str:
    """
    商品文件夹的根目录：
      1. 环境变量 GOOGLE_DRIVE_FOLDER_ID
      2. 进程内缓存
      3. 按名字查找
      4. 创建
    """
    global _cached_root_folder_id

    if settings.DRIVE_ROOT_FOLDER_ID:
        return settings.DRIVE_ROOT_FOLDER_ID
    if _cached_root_folder_id:
        return _cached_root_folder_id

    name = settings.DRIVE_ROOT_FOLDER_NAME
    existing_id = drive.find_folder_by_name(name)
    if existing_id:
        logger.info(f"[GoogleSetup] Found existing Drive folder: {name} ({existing_id})")
        _cached_root_folder_id = existing_id
        return existing_id

    # 创建在 My Drive 根目录下，不能走 create_folder（它默认父目录就是这里）
    data = (
        drive.service.files()
        .create(body={"name": name, "mimeType": FOLDER_MIME_TYPE}, fields="id")
        .execute()
    )
    new_id = data["id"]
    logger.info(f"[GoogleSetup] Created Drive folder: {name} ({new_id})")
    _cached_root_folder_id = new_id
    return new_id


def get_or_create_spreadsheet_id(drive, sheets_service) -> str:
    """同样的策略用于商品表格：环境变量 → 缓存 → 按名字查找 → 创建"""
    global _cached_spreadsheet_id

    if settings.SPREADSHEET_ID:
        return settings.SPREADSHEET_ID
    if _cached_spreadsheet_id:
        return _cached_spreadsheet_id

    name = settings.SPREADSHEET_NAME
    existing_id = drive.find_file_id(
        f"name = '{escape_drive_query(name)}' and "
        f"mimeType = '{SPREADSHEET_MIME_TYPE}' and trashed = false"
    )
    if existing_id:
        logger.info(f"[GoogleSetup] Found existing spreadsheet: {name} ({existing_id})")
        _cached_spreadsheet_id = existing_id
        return existing_id

    data = (
        sheets_service.spreadsheets()
        .create(
            body={
                "properties": {"title": name},
                "sheets": [{"properties": {"title": settings.DEFAULT_SHEET_NAME}}],
            },
            fields="spreadsheetId",
        )
        .execute()
    )
    new_id = data["spreadsheetId"]
    logger.info(f"[GoogleSetup] Created spreadsheet: {name} ({new_id})")
    _cached_spreadsheet_id = new_id
    return new_id
