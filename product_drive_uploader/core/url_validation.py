# core/url_validation.py

from __future__ import annotations

import ipaddress
from typing import List, Optional
from urllib.parse import urlparse

from product_drive_uploader.config import settings
from product_drive_uploader.core.errors import UnsafeImageUrlError


def _is_private_host(hostname: str) -> bool:
    if hostname == "localhost" or hostname.endswith(".localhost"):
        return True
    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_unspecified


def validate_image_url(url: str, allowed_domains: Optional[List[str]] = None) -> None:
    """
    下载前检查图片 URL，防止请求到内网地址。
    allowed_domains 为空时只做协议和内网检查。
    """
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise UnsafeImageUrlError(f"Invalid image URL format: {(url or '')[:100]}")

    hostname = parsed.hostname.lower()
    if _is_private_host(hostname):
        raise UnsafeImageUrlError(f"Image URL points to private/internal address: {hostname}")

    domains = settings.ALLOWED_IMAGE_DOMAINS if allowed_domains is None else allowed_domains
    if domains and not any(hostname == d or hostname.endswith(f".{d}") for d in domains):
        raise UnsafeImageUrlError(
            f"Image URL domain not in allowlist: {hostname}. Allowed: {', '.join(domains)}"
        )
