# pipeline/sheet_sync.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Any

from loguru import logger

from product_drive_uploader.config.settings import DEFAULT_SHEET_NAME
from product_drive_uploader.core.drive_client import DriveClient
from product_drive_uploader.core.product_schema import ProductUploadRequest, UploadedFile
from product_drive_uploader.core.sheets_client import SheetsClient, sheet_range

# 写进表格的商品属性（按这个顺序占列）
ATTRIBUTE_SHEET_KEYS = [
    "brand_code",
    "color_code_primary",
    "season_code",
    "size_group",
    "size_codes",
    "target_age_groups",
    "target_genders",
    "material_upper_material_clothing",
]

SHEET_HEADERS = [
    "Timestamp",
    "Product ID",
    "EAN",
    "Name",
    "Gender",
    "Category",
    "Description",
    "SKU",
    *ATTRIBUTE_SHEET_KEYS,
    "Drive Folder",
    "Image Count",
    "Image URLs",
]

# Product ID 在 B 列
PRODUCT_ID_COLUMN = 1


def build_sheet_row(
    product: ProductUploadRequest,
    folder_url: str,
    image_count: int,
    image_urls: List[str],
) -> List[Any]:
    attrs = product.attributes or {}
    return [
        datetime.now(timezone.utc).isoformat(),
        product.id,
        product.ean or "",
        product.name,
        product.gender,
        product.category,
        product.description or "",
        product.sku or "",
        *[attrs.get(key, "") for key in ATTRIBUTE_SHEET_KEYS],
        folder_url,
        str(image_count),
        "\n".join(image_urls),
    ]


def sync_to_sheet(
    sheets: SheetsClient,
    drive: DriveClient,
    product: ProductUploadRequest,
    folder_id: str,
    folder_url: str,
    folder_reused: bool,
    uploaded_files: List[UploadedFile],
    sheet_name: str = DEFAULT_SHEET_NAME,
) -> bool:
    """
    每个商品一行，按 Product ID 查找：有就更新，没有就追加。
    复用文件夹时统计文件夹里所有文件（旧的 + 新的）。
    失败只记日志，返回 False。
    """
    try:
        if folder_reused:
            all_files = drive.list_files(folder_id, page_size=1000, all_pages=True)
            image_urls = [f.get("webViewLink", "") for f in all_files]
        else:
            image_urls = [f.web_view_link for f in uploaded_files]

        row = build_sheet_row(product, folder_url, len(image_urls), image_urls)
        range_ = sheet_range(sheet_name, len(SHEET_HEADERS))

        existing = sheets.find_row_by_value(product.id, PRODUCT_ID_COLUMN, range_)
        if existing:
            row_index, _ = existing
            sheets.update_row(row_index, row, sheet_name)
            logger.info(f"📝 [DriveUpload] Updated sheet row {row_index}")
        else:
            sheets.append([row], range_)
            logger.info("📝 [DriveUpload] Appended new sheet row")
        return True
    except Exception as e:
        logger.error(f"[DriveUpload] Failed to update Google Sheets: {e}")
        return False


def initialize_product_sheet(sheets: SheetsClient, sheet_name: str = DEFAULT_SHEET_NAME) -> bool:
    """表格为空时写入表头，已有内容则不动"""
    existing = sheets.read(f"{sheet_name}!A1:A1")
    if existing:
        return False
    sheets.write([SHEET_HEADERS], f"{sheet_name}!A1")
    logger.info("Sheet headers initialized")
    return True
