# config/settings.py

import os
from pathlib import Path

from dotenv import load_dotenv

# 项目根目录
BASE_DIR = Path(__file__).resolve().parent.parent

# 加载 .env（已经存在的环境变量优先）
load_dotenv()

# === Google 认证 ===
# OAuth 客户端 JSON 和保存的 token 放在 config/credentials 目录
GOOGLE_CREDENTIALS_FILE = BASE_DIR / "config" / "credentials" / "google_credentials.json"
GOOGLE_TOKEN_FILE = BASE_DIR / "config" / "credentials" / "google_token.json"

# 服务账号 key，没有 OAuth token 时使用
GOOGLE_SERVICE_ACCOUNT_FILE = Path(
    os.getenv(
        "GOOGLE_SERVICE_ACCOUNT_FILE",
        str(BASE_DIR / "config" / "credentials" / "google_service_account.json"),
    )
)

# 需要写 Drive 和 Sheets
GOOGLE_SCOPES = [
    "https://www.googleapis.com/auth/drive",
    "https://www.googleapis.com/auth/spreadsheets",
]

# === Google Drive ===
# 商品文件夹的根目录，留空则按名字查找或自动创建
# 比如：https://drive.google.com/drive/folders/XXXXXX 中的 XXXXXX
DRIVE_ROOT_FOLDER_ID = os.getenv("GOOGLE_DRIVE_FOLDER_ID", "").strip()
DRIVE_ROOT_FOLDER_NAME = "SPZ-Product-Integration"

# === Google Sheets ===
SPREADSHEET_ID = os.getenv("GOOGLE_SHEET_ID", "").strip()
SPREADSHEET_NAME = "SPZ-Product-Data"
DEFAULT_SHEET_NAME = os.getenv("GOOGLE_SHEET_NAME", "Produkte")

# === 图片下载 ===
IMAGE_DOWNLOAD_MAX_RETRIES = 3
IMAGE_DOWNLOAD_RETRY_DELAY = 1.0  # 秒，固定间隔
IMAGE_DOWNLOAD_TIMEOUT = 30

# 允许下载图片的域名（逗号分隔），留空表示不限制域名，内网地址始终拒绝
ALLOWED_IMAGE_DOMAINS = [
    d.strip().lower()
    for d in os.getenv("ALLOWED_IMAGE_DOMAINS", "").split(",")
    if d.strip()
]

# === 状态存储 ===
STATE_STORE_FILE = BASE_DIR / "data" / "state.json"

# === 日志 ===
LOG_DIR = BASE_DIR / "logs"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
