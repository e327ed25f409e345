"""ロギング設定モジュール

Cloud Run / Cloud Logging 環境ではJSON形式、ローカルではテキスト形式でログを出力する。

使い方:
    from lessonpath.logging_config import setup_logging
    setup_logging()

    logger.info("Series capped", extra={"item_id": item.id})

環境変数:
    LOG_LEVEL: ログレベル (DEBUG, INFO, WARNING, ERROR, CRITICAL) デフォルト: INFO
    LOG_FORMAT: "json" | "text" を明示すると環境判定より優先
    K_SERVICE / CLOUD_RUN_JOB: Cloud Run 環境判定（自動設定される）
"""

import json
import logging
import os

# 依存ライブラリの冗長なログ
_NOISY_LOGGERS = ("googleapiclient.discovery_cache", "urllib3")

# extra= で渡すとJSONのトップレベルに出す明細・チェーンの識別子
CONTEXT_FIELDS = ("item_id", "receipt_id", "chain_key")

_SEVERITIES = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
_SOURCE_LOCATION_KEY = "logging.googleapis.com/sourceLocation"


class CloudLoggingFormatter(logging.Formatter):
    """Cloud Logging互換のJSONフォーマッタ

    severity と sourceLocation は Cloud Logging の特殊フィールド。
    CONTEXT_FIELDS の値はレコードにあるものだけ出力する。
    """

    def format(self, record: logging.LogRecord) -> str:
        severity = record.levelname if record.levelname in _SEVERITIES else "DEFAULT"
        log_entry: dict = {
            "severity": severity,
            "message": record.getMessage(),
            "logger": record.name,
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            _SOURCE_LOCATION_KEY: {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value:
                log_entry[name] = value
        if record.exc_info and record.exc_info[0]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False, default=str)


def _use_json_format() -> bool:
    explicit = os.getenv("LOG_FORMAT", "").lower()
    if explicit in ("json", "text"):
        return explicit == "json"
    return bool(os.getenv("K_SERVICE") or os.getenv("CLOUD_RUN_JOB"))


def setup_logging() -> None:
    """ログ設定を初期化する（複数回呼んでもハンドラは1つ）"""
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()

    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    handler = logging.StreamHandler()
    if _use_json_format():
        handler.setFormatter(CloudLoggingFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root.handlers.clear()
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
