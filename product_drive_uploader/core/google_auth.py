# core/google_auth.py

from __future__ import annotations

from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from loguru import logger

from product_drive_uploader.config.settings import (
    GOOGLE_CREDENTIALS_FILE,
    GOOGLE_TOKEN_FILE,
    GOOGLE_SERVICE_ACCOUNT_FILE,
    GOOGLE_SCOPES,
)


def get_credentials():
    """
    优先用保存的 OAuth token（过期就刷新），
    其次用服务账号，
    都没有但有 OAuth 客户端文件时走浏览器授权并保存 token。
    """
    creds = None
    if GOOGLE_TOKEN_FILE.exists():
        creds = Credentials.from_authorized_user_file(str(GOOGLE_TOKEN_FILE), GOOGLE_SCOPES)
        if creds.valid:
            return creds
        if creds.expired and creds.refresh_token:
            logger.info("🔄 Refreshing Google OAuth token...")
            creds.refresh(Request())
            _save_token(creds)
            return creds

    if GOOGLE_SERVICE_ACCOUNT_FILE.exists():
        return service_account.Credentials.from_service_account_file(
            str(GOOGLE_SERVICE_ACCOUNT_FILE), scopes=GOOGLE_SCOPES
        )

    if GOOGLE_CREDENTIALS_FILE.exists():
        flow = InstalledAppFlow.from_client_secrets_file(str(GOOGLE_CREDENTIALS_FILE), GOOGLE_SCOPES)
        creds = flow.run_local_server(port=0)
        _save_token(creds)
        return creds

    raise RuntimeError(
        "No valid Google authentication configured. Please set up OAuth2 or a service account."
    )


def _save_token(creds: Credentials) -> None:
    GOOGLE_TOKEN_FILE.parent.mkdir(parents=True, exist_ok=True)
    with GOOGLE_TOKEN_FILE.open("w", encoding="utf-8") as token:
        token.write(creds.to_json())
