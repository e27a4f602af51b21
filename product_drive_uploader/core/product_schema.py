# core/product_schema.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional


@dataclass
class ImageDescriptor:
    """一张商品图片。两个 URL 都为空时跳过，不算错误。"""

    id: str
    filename: str = ""
    sort_order: int = 0
    primary_source_url: Optional[str] = None   # 处理后的图（例如 AI 修图结果）
    fallback_source_url: Optional[str] = None  # 原图


@dataclass
class ProductUploadRequest:
    """一次上传的商品快照，流程中只读"""

    id: str
    name: str
    sku: Optional[str] = None
    # 之前上传时记录下来的 Drive 文件夹链接
    existing_folder_ref: Optional[str] = None
    images: List[ImageDescriptor] = field(default_factory=list)

    # 以下只用于写表格
    ean: Optional[str] = None
    gender: str = ""
    category: str = ""
    description: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass
class UploadedFile:
    id: str
    name: str
    web_view_link: str
    web_content_link: str = ""

    @classmethod
    def from_drive(cls, data: Dict[str, Any]) -> "UploadedFile":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            web_view_link=data.get("webViewLink", ""),
            web_content_link=data.get("webContentLink", ""),
        )


@dataclass
class ImageFailure:
    image_id: str
    filename: str
    reason: str


@dataclass
class FolderResolution:
    folder_id: str
    folder_url: str
    reused: bool
    starting_sequence: int


@dataclass
class UploadOutcome:
    folder_id: str
    folder_url: str
    folder_reused: bool
    uploaded_files: List[UploadedFile] = field(default_factory=list)
    # 哪些图片失败了（uploaded_files 只包含成功的）
    failed_images: List[ImageFailure] = field(default_factory=list)
    sheet_row_synced: bool = False


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """兼容 camelCase / snake_case 两种写法"""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def image_from_dict(data: Dict[str, Any]) -> ImageDescriptor:
    return ImageDescriptor(
        id=str(_pick(data, "id", default="")),
        filename=_pick(data, "filename", default="") or "",
        sort_order=int(_pick(data, "sort_order", "sortOrder", default=0)),
        primary_source_url=_pick(data, "primary_source_url", "primarySourceUrl", "processed_path", "processedPath"),
        fallback_source_url=_pick(data, "fallback_source_url", "fallbackSourceUrl", "original_path", "originalPath"),
    )


def product_from_dict(data: Dict[str, Any]) -> ProductUploadRequest:
    """把 JSON 记录转换成 ProductUploadRequest"""
    return ProductUploadRequest(
        id=str(data["id"]),
        name=data.get("name") or "",
        sku=_pick(data, "sku"),
        existing_folder_ref=_pick(
            data, "existing_folder_ref", "existingRemoteFolderRef", "drive_url", "driveUrl"
        ),
        images=[image_from_dict(img) for img in data.get("images") or []],
        ean=_pick(data, "ean"),
        gender=_pick(data, "gender", default="") or "",
        category=_pick(data, "category", default="") or "",
        description=_pick(data, "description"),
        attributes=dict(_pick(data, "attributes", "zalando_attributes", "zalandoAttributes", default={}) or {}),
    )
