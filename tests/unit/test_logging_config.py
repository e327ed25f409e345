"""logging_config モジュールのテスト"""

import json
import logging
import sys

from lessonpath.logging_config import CloudLoggingFormatter, setup_logging


class TestCloudLoggingFormatter:
    """CloudLoggingFormatter の単体テスト"""

    def _make_record(
        self,
        message: str = "test message",
        level: int = logging.INFO,
        exc_info=None,
    ) -> logging.LogRecord:
        """テスト用の LogRecord を生成するヘルパー"""
        return logging.LogRecord(
            name="test.logger",
            level=level,
            pathname="",
            lineno=0,
            msg=message,
            args=(),
            exc_info=exc_info,
        )

    def test_format_returns_valid_json(self):
        """フォーマット結果が有効なJSONであること"""
        parsed = json.loads(CloudLoggingFormatter().format(self._make_record("hello")))

        assert parsed["message"] == "hello"
        assert parsed["logger"] == "test.logger"
        assert "timestamp" in parsed

    def test_severity_mapping(self):
        """ログレベルが severity にマッピングされること"""
        formatter = CloudLoggingFormatter()
        for level, severity in [
            (logging.DEBUG, "DEBUG"),
            (logging.WARNING, "WARNING"),
            (logging.ERROR, "ERROR"),
        ]:
            parsed = json.loads(formatter.format(self._make_record(level=level)))
            assert parsed["severity"] == severity

    def test_exception_is_included(self):
        """例外情報が exception フィールドに入ること"""
        try:
            raise ValueError("boom")
        except ValueError:
            record = self._make_record(level=logging.ERROR, exc_info=sys.exc_info())

        parsed = json.loads(CloudLoggingFormatter().format(record))

        assert "ValueError: boom" in parsed["exception"]

    def test_context_fields_are_top_level(self):
        """extra= で渡した明細ID・チェーンキーがトップレベルに出ること"""
        record = self._make_record()
        record.item_id = "i1"
        record.chain_key = "vivian|violin"

        parsed = json.loads(CloudLoggingFormatter().format(record))

        assert parsed["item_id"] == "i1"
        assert parsed["chain_key"] == "vivian|violin"
        assert "receipt_id" not in parsed

    def test_extra_via_logger(self, caplog):
        """logger.info(..., extra=...) の値がフォーマット結果に入ること"""
        with caplog.at_level(logging.INFO, logger="lessonpath.test"):
            logging.getLogger("lessonpath.test").info("capped", extra={"item_id": "i9"})

        parsed = json.loads(CloudLoggingFormatter().format(caplog.records[0]))

        assert parsed["item_id"] == "i9"
        assert parsed["logging.googleapis.com/sourceLocation"]["function"] == "test_extra_via_logger"


class TestSetupLogging:
    """setup_logging() の動作テスト"""

    def teardown_method(self):
        logging.getLogger().handlers.clear()

    def test_json_format_on_cloud_run(self, monkeypatch):
        """K_SERVICE が設定されていれば JSON フォーマッタ"""
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        monkeypatch.setenv("K_SERVICE", "lessonpath-api")

        setup_logging()

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, CloudLoggingFormatter)

    def test_text_format_locally(self, monkeypatch):
        """ローカルではテキストフォーマッタ"""
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        monkeypatch.delenv("K_SERVICE", raising=False)
        monkeypatch.delenv("CLOUD_RUN_JOB", raising=False)

        setup_logging()

        assert not isinstance(logging.getLogger().handlers[0].formatter, CloudLoggingFormatter)

    def test_log_format_override(self, monkeypatch):
        """LOG_FORMAT は環境判定より優先"""
        monkeypatch.setenv("K_SERVICE", "lessonpath-api")
        monkeypatch.setenv("LOG_FORMAT", "text")

        setup_logging()

        assert not isinstance(logging.getLogger().handlers[0].formatter, CloudLoggingFormatter)

    def test_log_level(self, monkeypatch):
        """LOG_LEVEL がルートロガーに反映されること"""
        monkeypatch.setenv("LOG_LEVEL", "warning")

        setup_logging()

        assert logging.getLogger().level == logging.WARNING

    def test_repeated_setup_keeps_single_handler(self):
        """複数回呼んでもハンドラは1つ"""
        setup_logging()
        setup_logging()

        assert len(logging.getLogger().handlers) == 1
