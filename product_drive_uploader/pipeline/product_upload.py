# pipeline/product_upload.py

from __future__ import annotations

from typing import Optional

from loguru import logger

from product_drive_uploader.core.drive_client import DriveClient
from product_drive_uploader.core.errors import EmptyUploadError
from product_drive_uploader.core.image_fetcher import fetch_image
from product_drive_uploader.core.product_schema import ProductUploadRequest, UploadOutcome
from product_drive_uploader.core.sheets_client import SheetsClient
from product_drive_uploader.pipeline.folder_resolver import resolve_folder
from product_drive_uploader.pipeline.sheet_sync import sync_to_sheet
from product_drive_uploader.pipeline.uploader import Fetcher, upload_images


def upload_product_to_drive(
    product: ProductUploadRequest,
    drive: Optional[DriveClient] = None,
    sheets: Optional[SheetsClient] = None,
    sync_sheet: bool = False,
    fetch: Fetcher = fetch_image,
) -> UploadOutcome:
    """
    把一个商品的图片上传到 Google Drive。

    - 已有文件夹（existing_folder_ref 有效）就往里追加，不删除旧文件
    - 部分图片失败时正常返回，失败的图片在 failed_images 里
    - 有图片但一张都没传成功时抛 EmptyUploadError
    - 新建文件夹失败时 HttpError 直接抛出
    - sync_sheet=True 时再同步到 Google Sheets（失败不影响结果）
    """
    drive = drive or DriveClient()

    folder = resolve_folder(product, drive)
    report = upload_images(product, folder.folder_id, folder.starting_sequence, drive, fetch=fetch)

    total = len(product.images)
    if total > 0 and not report.uploaded:
        raise EmptyUploadError(
            total,
            report.failures,
            folder_id=folder.folder_id,
            folder_url=folder.folder_url,
        )

    if report.failures or report.skipped:
        logger.warning(
            f"[DriveUpload] {len(report.uploaded)} of {total} images uploaded "
            f"({len(report.failures)} failed, {len(report.skipped)} skipped)"
        )

    outcome = UploadOutcome(
        folder_id=folder.folder_id,
        folder_url=folder.folder_url,
        folder_reused=folder.reused,
        uploaded_files=report.uploaded,
        failed_images=report.failures,
    )

    if sync_sheet:
        sheets = sheets or SheetsClient(drive=drive)
        outcome.sheet_row_synced = sync_to_sheet(
            sheets,
            drive,
            product,
            folder.folder_id,
            folder.folder_url,
            folder.reused,
            report.uploaded,
        )

    return outcome
