# pipeline/loader.py

import json
from pathlib import Path
from typing import List

from product_drive_uploader.core.product_schema import ProductUploadRequest, product_from_dict


def load_products(path: Path) -> List[ProductUploadRequest]:
    """
    读取商品快照 JSON，支持两种格式：
      [ {...}, {...} ]
      { "products": [ {...}, ... ] }
    也可以只有一个商品对象。
    """
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        records = data.get("products", [data])
    else:
        records = data

    return [product_from_dict(rec) for rec in records]
