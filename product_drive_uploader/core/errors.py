# core/errors.py

from __future__ import annotations

from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from product_drive_uploader.core.product_schema import ImageFailure


class DriveUploadError(RuntimeError):
    """上传流程自己产生的错误的基类（Google API 的 HttpError 不包装，直接抛出）"""


class ImageDownloadError(DriveUploadError):
    def __init__(self, url: str, attempts: int, reason: str):
        self.url = url
        self.attempts = attempts
        self.reason = reason
        super().__init__(f"Failed to download after {attempts} attempts: {url} ({reason})")


class UnsafeImageUrlError(DriveUploadError):
    pass


class EmptyUploadError(DriveUploadError):
    """有图片但一张都没传上去。文件夹已经建好，folder_url 留给下次重试复用"""

    def __init__(
        self,
        total: int,
        failures: List["ImageFailure"] | None = None,
        folder_id: str = "",
        folder_url: str = "",
    ):
        self.total = total
        self.failures = failures or []
        self.folder_id = folder_id
        self.folder_url = folder_url
        super().__init__(
            f"Drive upload failed: 0 of {total} images uploaded. Folder exists but is empty."
        )
