# core/mime.py

from __future__ import annotations

import re
from typing import Optional

MIME_TO_EXTENSION = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}

URL_EXTENSIONS = {"jpg", "jpeg", "png", "webp", "gif"}


def extension_from_mime_or_url(mime_type: Optional[str], url: Optional[str]) -> str:
    """
    上传到 Drive 时用的扩展名：
      1. 认识的 MIME 类型优先
      2. 否则看 URL 最后一个 '.' 后面的部分（去掉 query，转小写）
      3. 都不行就用 jpg
    不会抛异常。扩展名错了也没关系，Drive 按 mimeType 识别文件。
    """
    if mime_type in MIME_TO_EXTENSION:
        return MIME_TO_EXTENSION[mime_type]

    url_ext = (url or "").rsplit(".", 1)[-1].split("?", 1)[0].lower()
    if url_ext in URL_EXTENSIONS:
        return "jpg" if url_ext == "jpeg" else url_ext
    return "jpg"


def build_base_name(sku: Optional[str], name: str) -> str:
    """文件名主体：优先 SKU，没有就用商品名（只保留 A-Z a-z 0-9 _ -，最多 30 个字符）"""
    if sku:
        return sku
    return re.sub(r"[^A-Za-z0-9_-]", "", name or "")[:30]


def sanitize_folder_name(name: str, product_id: str) -> str:
    """Drive 文件夹名：保留字母（含德语变音）、数字、空白和 - _ .，为空则用 id 前 8 位"""
    cleaned = re.sub(r"[^a-zA-Z0-9äöüÄÖÜß\s\-_.]", "", name or "").strip()
    return cleaned or product_id[:8]
