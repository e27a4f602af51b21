# core/state_store.py

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, List

from loguru import logger


class StateStore:
    """
    用本地 JSON 文件记录每个商品的上传状态：
    {
        "products": {
            "product_id_1": {
                "name": "...",
                "status": "pending" / "uploading" / "uploaded" / "error",
                "folder_url": "...",
                "uploaded_count": 3,
                "failed_count": 0,
                "error": "",
                "updated_at": "..."
            },
            ...
        }
    }
    uploading 只表示正在处理；进程被中断后留下的 uploading 在下次运行时照常重试。
    """

    def __init__(self, filepath: Path):
        self.filepath = filepath
        self._state: Dict[str, Any] = {"products": {}}
        self._load()

    def _load(self) -> None:
        if not self.filepath.exists():
            self._state = {"products": {}}
            return
        try:
            with self.filepath.open("r", encoding="utf-8") as f:
                self._state = json.load(f)
        except (OSError, ValueError) as e:
            # 文件损坏就重新初始化
            logger.warning(f"[警告] 加载状态文件失败: {e}")
            self._state = {}
        self._state.setdefault("products", {})

    def _save(self) -> None:
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        with self.filepath.open("w", encoding="utf-8") as f:
            json.dump(self._state, f, ensure_ascii=False, indent=2)

    # --- 对外方法 ---

    def get_product_record(self, product_id: str) -> Dict[str, Any]:
        return self._state["products"].get(product_id, {})

    def mark_product_status(
        self,
        product_id: str,
        name: str,
        status: str,
        **fields: Any,
    ) -> None:
        """
        status: "pending" / "uploading" / "uploaded" / "error"
        fields: folder_url / uploaded_count / failed_count / error
        未传的字段保留上一次的值（比如出错时保留 folder_url）
        """
        record = dict(self._state["products"].get(product_id, {}))
        record.update(fields)
        record["name"] = name
        record["status"] = status
        record["updated_at"] = datetime.now(timezone.utc).isoformat()
        self._state["products"][product_id] = record
        self._save()

    def list_products(self, status_filter: List[str] | None = None) -> Dict[str, Any]:
        """默认找出还没成功的（pending / uploading / error），方便重试"""
        status_filter = status_filter or ["pending", "uploading", "error"]
        return {
            pid: rec
            for pid, rec in self._state["products"].items()
            if rec.get("status") in status_filter
        }
