"""設定管理 - 環境変数の型安全な読み込み"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from lessonpath.services.continuity import DEFAULT_TOLERANCE_DAYS
from lessonpath.services.series_expansion import MAX_SERIES_OCCURRENCES

_SOURCE_BACKENDS = ("json", "firestore")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


@dataclass(frozen=True)
class AppConfig:
    """アプリケーション設定"""

    source_backend: str = "json"  # "json" | "firestore"
    source_path: str = "transactions.json"
    project_id: str = ""
    firestore_uid: str = ""
    calendar_id: str = "primary"
    calendar_timezone: str = "Australia/Sydney"
    gap_tolerance_days: int = DEFAULT_TOLERANCE_DAYS
    max_series_occurrences: int = MAX_SERIES_OCCURRENCES
    series_cache_size: int = 0  # 0 = キャッシュなし
    credentials_dir: str = "."

    @classmethod
    def from_env(cls) -> "AppConfig":
        """環境変数から設定を読み込む"""
        load_dotenv()

        source_backend = os.getenv("SOURCE_BACKEND", "json").lower()
        if source_backend not in _SOURCE_BACKENDS:
            raise ValueError(
                f"SOURCE_BACKEND must be one of {_SOURCE_BACKENDS}, got {source_backend!r}"
            )

        project_id = os.getenv("PROJECT_ID", "")
        firestore_uid = os.getenv("FIRESTORE_UID", "")
        if source_backend == "firestore" and not firestore_uid:
            raise ValueError("FIRESTORE_UID is not set in environment")

        max_series = _int_env("MAX_SERIES_OCCURRENCES", MAX_SERIES_OCCURRENCES)
        if max_series == 0:
            raise ValueError("MAX_SERIES_OCCURRENCES must be positive")

        return cls(
            source_backend=source_backend,
            source_path=os.getenv("SOURCE_PATH", "transactions.json"),
            project_id=project_id,
            firestore_uid=firestore_uid,
            calendar_id=os.getenv("CALENDAR_ID", "primary"),
            calendar_timezone=os.getenv("CALENDAR_TIMEZONE", "Australia/Sydney"),
            gap_tolerance_days=_int_env("GAP_TOLERANCE_DAYS", DEFAULT_TOLERANCE_DAYS),
            max_series_occurrences=max_series,
            series_cache_size=_int_env("SERIES_CACHE_SIZE", 0),
            credentials_dir=os.getenv("CREDENTIALS_DIR", "."),
        )
