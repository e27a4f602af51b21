# pipeline/uploader.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from loguru import logger

from product_drive_uploader.core.drive_client import DriveClient, try_make_public
from product_drive_uploader.core.errors import DriveUploadError
from product_drive_uploader.core.image_fetcher import FetchedImage, fetch_image
from product_drive_uploader.core.mime import build_base_name, extension_from_mime_or_url
from product_drive_uploader.core.product_schema import (
    ImageDescriptor,
    ImageFailure,
    ProductUploadRequest,
    UploadedFile,
)
from product_drive_uploader.core.url_validation import validate_image_url

Fetcher = Callable[[str], FetchedImage]


@dataclass
class ImageUploadReport:
    uploaded: List[UploadedFile] = field(default_factory=list)
    failures: List[ImageFailure] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)  # 没有 URL 的图片 id


def _download(url: str, fetch: Fetcher) -> FetchedImage:
    validate_image_url(url)
    return fetch(url)


def _download_with_fallback(primary_url: str, fallback_url: Optional[str], fetch: Fetcher) -> FetchedImage:
    try:
        return _download(primary_url, fetch)
    except Exception as primary_err:
        if not fallback_url:
            raise
        logger.warning(f"[DriveUpload] Processed image failed, falling back to original: {primary_err}")
        try:
            return _download(fallback_url, fetch)
        except Exception as fallback_err:
            # 两个原因都保留在 ImageFailure.reason 里
            raise DriveUploadError(
                f"processed: {primary_err}; original: {fallback_err}"
            ) from fallback_err


def upload_images(
    product: ProductUploadRequest,
    folder_id: str,
    starting_sequence: int,
    drive: DriveClient,
    fetch: Fetcher = fetch_image,
) -> ImageUploadReport:
    """
    按 sort_order 顺序逐张上传，文件名为 {序号}_{SKU}.{扩展名}。
    单张失败只记录，继续下一张；失败的图片会在序号上留下空缺。
    """
    # sorted 是稳定排序，sort_order 相同时保持原顺序
    images: List[ImageDescriptor] = sorted(product.images, key=lambda img: img.sort_order)
    base_name = build_base_name(product.sku, product.name)
    report = ImageUploadReport()

    for i, image in enumerate(images):
        primary_url = image.primary_source_url or image.fallback_source_url
        fallback_url = image.fallback_source_url if image.primary_source_url else None

        if not primary_url:
            logger.error(f"[DriveUpload] No URL for image {image.id}, skipping")
            report.skipped.append(image.id)
            continue

        try:
            logger.info(f"📥 [DriveUpload] Downloading image {i + 1}/{len(images)}: {primary_url}")
            fetched = _download_with_fallback(primary_url, fallback_url, fetch)

            ext = extension_from_mime_or_url(fetched.mime_type, primary_url)
            file_name = f"{starting_sequence + i}_{base_name}.{ext}"

            logger.info(f"[DriveUpload] Uploading {file_name} ({len(fetched.content) / 1024:.0f} KB)")
            result = drive.upload_file(file_name, fetched.mime_type, fetched.content, folder_id)
            try_make_public(drive, result["id"])

            report.uploaded.append(UploadedFile.from_drive(result))
            logger.info(f"✅ [DriveUpload] Uploaded: {result['name']} ({result['id']})")
        except Exception as e:
            logger.error(f"❌ [DriveUpload] Failed to upload {image.filename or image.id}: {e}")
            report.failures.append(ImageFailure(image_id=image.id, filename=image.filename, reason=str(e)))

    return report
