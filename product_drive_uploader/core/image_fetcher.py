# core/image_fetcher.py

from __future__ import annotations

import time
from dataclasses import dataclass

import requests
from loguru import logger

from product_drive_uploader.config.settings import (
    IMAGE_DOWNLOAD_MAX_RETRIES,
    IMAGE_DOWNLOAD_RETRY_DELAY,
    IMAGE_DOWNLOAD_TIMEOUT,
)
from product_drive_uploader.core.errors import ImageDownloadError

DEFAULT_MIME_TYPE = "image/jpeg"


@dataclass
class FetchedImage:
    content: bytes
    mime_type: str


def fetch_image(
    url: str,
    max_retries: int = IMAGE_DOWNLOAD_MAX_RETRIES,
    retry_delay: float = IMAGE_DOWNLOAD_RETRY_DELAY,
    timeout: float = IMAGE_DOWNLOAD_TIMEOUT,
) -> FetchedImage:
    """
    下载一张图片，失败最多重试 max_retries 次，每次间隔固定 retry_delay 秒。
    非 2xx、0 字节、网络错误都会重试。
    """
    last_reason = "no attempt made"

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"[DriveUpload] Download attempt {attempt}/{max_retries}: {url}")
            resp = requests.get(url, timeout=timeout)
            if not resp.ok:
                raise ValueError(f"HTTP {resp.status_code} {resp.reason}")
            content = resp.content
            if not content:
                raise ValueError("Downloaded file is empty (0 bytes)")

            mime_type = resp.headers.get("Content-Type") or DEFAULT_MIME_TYPE
            # "image/png; charset=binary" -> "image/png"
            mime_type = mime_type.split(";", 1)[0].strip() or DEFAULT_MIME_TYPE
            return FetchedImage(content=content, mime_type=mime_type)
        except (requests.RequestException, ValueError) as e:
            last_reason = str(e)
            logger.warning(f"[DriveUpload] Download attempt {attempt} failed: {last_reason}")
            if attempt < max_retries:
                time.sleep(retry_delay)

    raise ImageDownloadError(url, max_retries, last_reason)
