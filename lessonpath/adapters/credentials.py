"""Google API認証（カレンダー書き込み・Firestore 読み込み）

Cloud Run では Application Default Credentials (ADC)、ローカルでは
CREDENTIALS_DIR に置いた認証ファイルを使う。取得した認証情報はディレクトリ単位でキャッシュする。
"""

import logging
import os
import pickle
from dataclasses import dataclass
from functools import lru_cache

import google.auth
from google.auth.credentials import Credentials
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google_auth_oauthlib.flow import InstalledAppFlow

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/datastore",
]


@dataclass(frozen=True)
class CredentialFiles:
    """ローカル認証ファイルの置き場所"""

    token: str
    client_secrets: str
    service_account: str

    @classmethod
    def in_directory(cls, directory: str = ".") -> "CredentialFiles":
        return cls(
            token=os.path.join(directory, "token.pickle"),
            client_secrets=os.path.join(directory, "credentials.json"),
            service_account=os.path.join(directory, "service_account.json"),
        )

    def any_exists(self) -> bool:
        return any(
            os.path.exists(path)
            for path in (self.token, self.client_secrets, self.service_account)
        )


def _is_cloud_environment() -> bool:
    return bool(os.getenv("K_SERVICE") or os.getenv("CLOUD_RUN_JOB"))


def has_local_credentials(directory: str = ".") -> bool:
    """カレンダー書き出しに使える認証情報がありそうか"""
    return _is_cloud_environment() or CredentialFiles.in_directory(directory).any_exists()


def _load_token(path: str):
    if not os.path.exists(path):
        return None
    with open(path, "rb") as f:
        return pickle.load(f)


def _save_token(path: str, creds) -> None:
    with open(path, "wb") as f:
        pickle.dump(creds, f)


def _authorize(files: CredentialFiles):
    """保存済みトークンが使えないときに新しく認証する"""
    if os.path.exists(files.client_secrets):
        logger.info("Starting OAuth flow: %s", files.client_secrets)
        flow = InstalledAppFlow.from_client_secrets_file(files.client_secrets, SCOPES)
        creds = flow.run_local_server(port=0)
        _save_token(files.token, creds)
        return creds
    if os.path.exists(files.service_account):
        logger.info("Using service account: %s", files.service_account)
        return service_account.Credentials.from_service_account_file(
            files.service_account, scopes=SCOPES
        )
    raise FileNotFoundError(
        f"Credential file not found: {files.client_secrets} or {files.service_account}"
    )


@lru_cache(maxsize=4)
def get_google_credentials(directory: str = ".") -> Credentials:
    """
    Google API認証情報を取得。

    優先順位:
    1. Cloud Run環境: ADC
    2. token.pickle（期限切れならリフレッシュして保存し直す）
    3. credentials.json の OAuth フロー
    4. service_account.json

    Raises:
        FileNotFoundError: 認証ファイルが見つからない場合
    """
    if _is_cloud_environment():
        creds, _project = google.auth.default(scopes=SCOPES)
        return creds

    files = CredentialFiles.in_directory(directory)
    creds = _load_token(files.token)
    if creds and creds.valid:
        return creds
    if creds and creds.expired and creds.refresh_token:
        creds.refresh(Request())
        _save_token(files.token, creds)
        return creds
    return _authorize(files)
