# product_drive_uploader/run_once.py

from __future__ import annotations

import argparse
import dataclasses
from pathlib import Path
from typing import List, Optional

from loguru import logger

from product_drive_uploader.config.settings import DRIVE_ROOT_FOLDER_NAME, STATE_STORE_FILE
from product_drive_uploader.core.drive_client import DriveClient
from product_drive_uploader.core.logging_config import setup_logging
from product_drive_uploader.core.product_schema import ProductUploadRequest
from product_drive_uploader.core.sheets_client import SheetsClient
from product_drive_uploader.core.state_store import StateStore
from product_drive_uploader.pipeline.loader import load_products
from product_drive_uploader.pipeline.product_upload import upload_product_to_drive
from product_drive_uploader.pipeline.sheet_sync import initialize_product_sheet


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Upload product images to Google Drive")
    p.add_argument("snapshot", nargs="?", type=Path, help="商品快照 JSON 文件")
    p.add_argument("--state-file", type=Path, default=STATE_STORE_FILE)
    p.add_argument("--sync-sheet", action="store_true", help="上传后同步到 Google Sheets")
    p.add_argument("--init-sheet", action="store_true", help="表格为空时写入表头")
    p.add_argument("--check", action="store_true", help="只测试 Drive / Sheets 连接")
    p.add_argument("--force", action="store_true", help="已上传的商品也重新上传")
    p.add_argument("--retry", action="store_true", help="只处理状态文件里未完成的商品（pending / uploading / error）")
    return p.parse_args(argv)


def check_connection(drive: DriveClient, sheets: SheetsClient) -> None:
    files = drive.list_files(page_size=10)
    logger.info(f"✅ Drive OK: {len(files)} files in {DRIVE_ROOT_FOLDER_NAME}")
    info = sheets.get_info()
    logger.info(f"✅ Sheets OK: {info['title']} ({len(info['sheets'])} sheets)")


def upload_one(
    product: ProductUploadRequest,
    state: StateStore,
    drive: DriveClient,
    sheets: Optional[SheetsClient],
    force: bool = False,
) -> bool:
    record = state.get_product_record(product.id)
    # uploading 说明上一次运行被中断了，照常重试
    if record.get("status") == "uploaded" and not force:
        logger.info(f"⏭️ 跳过 {product.name} ({product.id})：已上传")
        return True

    # 上次上传留下的文件夹，继续往里追加
    if not product.existing_folder_ref and record.get("folder_url"):
        product = dataclasses.replace(product, existing_folder_ref=record["folder_url"])

    logger.info(f"🗂 开始上传 {product.name} ({product.id})，共 {len(product.images)} 张图片")
    state.mark_product_status(product.id, product.name, "uploading")

    try:
        outcome = upload_product_to_drive(
            product,
            drive=drive,
            sheets=sheets,
            sync_sheet=sheets is not None,
        )
    except Exception as e:
        logger.exception(f"❌ 上传 {product.name} ({product.id}) 失败: {e}")
        fields = {"error": str(e)}
        # 全部失败时文件夹已经建好，记下来下次复用
        if getattr(e, "folder_url", ""):
            fields["folder_url"] = e.folder_url
        state.mark_product_status(product.id, product.name, "error", **fields)
        return False
    except BaseException:
        state.mark_product_status(product.id, product.name, "error", error="interrupted")
        raise

    state.mark_product_status(
        product.id,
        product.name,
        "uploaded",
        folder_url=outcome.folder_url,
        uploaded_count=len(outcome.uploaded_files),
        failed_count=len(outcome.failed_images),
        error="",
    )
    logger.info(f"✅ 上传完成: {outcome.folder_url} ({len(outcome.uploaded_files)} 张)")
    return True


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging()

    drive = DriveClient()
    sheets = SheetsClient(drive=drive) if (args.sync_sheet or args.init_sheet or args.check) else None

    if args.check:
        check_connection(drive, sheets)
        return 0

    if args.init_sheet:
        initialize_product_sheet(sheets)

    if args.snapshot is None:
        return 0

    products = load_products(args.snapshot)
    state = StateStore(args.state_file)
    logger.info(f"🔍 读取到 {len(products)} 个商品")

    if args.retry:
        unfinished = state.list_products()
        products = [p for p in products if p.id in unfinished]
        logger.info(f"🔁 只重试未完成的商品: {len(products)} 个")

    ok = True
    for product in products:
        ok = upload_one(
            product,
            state,
            drive,
            sheets if args.sync_sheet else None,
            force=args.force,
        ) and ok

    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
