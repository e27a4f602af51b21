# pipeline/folder_resolver.py

from __future__ import annotations

from loguru import logger

from product_drive_uploader.core.drive_client import DriveClient, try_make_public
from product_drive_uploader.core.drive_utils import folder_url, next_sequence_number, parse_folder_ref
from product_drive_uploader.core.mime import sanitize_folder_name
from product_drive_uploader.core.product_schema import FolderResolution, ProductUploadRequest


def resolve_folder(product: ProductUploadRequest, drive: DriveClient) -> FolderResolution:
    """
    复用已有文件夹，或者新建一个。

    复用条件：product.existing_folder_ref 能解析出 folder id，并且 Drive 上还能找到它。
    复用时起始序号 = 文件夹里已有文件最大序号 + 1。
    链接解析失败 / 文件夹被删 时直接新建，不报错。
    新建文件夹失败会抛出，整个上传中止。
    """
    ref = parse_folder_ref(product.existing_folder_ref)

    if ref is None and product.existing_folder_ref:
        logger.warning(
            f"[DriveUpload] Could not parse folder reference {product.existing_folder_ref!r}, creating new"
        )

    if ref is not None:
        existing = drive.get_file(ref.folder_id)
        if existing:
            files = drive.list_files(existing["id"], page_size=1000, all_pages=True)
            starting_sequence = next_sequence_number(f.get("name", "") for f in files)
            logger.info(
                f"♻️ [DriveUpload] Reusing existing folder {existing['id']} "
                f"({len(files)} files, next number {starting_sequence})"
            )
            return FolderResolution(
                folder_id=existing["id"],
                folder_url=existing.get("webViewLink") or folder_url(existing["id"]),
                reused=True,
                starting_sequence=starting_sequence,
            )
        logger.warning(f"[DriveUpload] Existing folder {ref.folder_id} not found, creating new")

    folder_name = sanitize_folder_name(product.name, product.id)
    logger.info(f"📁 [DriveUpload] Creating folder: {folder_name}")
    folder = drive.create_folder(folder_name)
    try_make_public(drive, folder["id"])

    return FolderResolution(
        folder_id=folder["id"],
        folder_url=folder["webViewLink"],
        reused=False,
        starting_sequence=1,
    )
