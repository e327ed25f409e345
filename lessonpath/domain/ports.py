"""Ports - 外部サービスのインターフェース定義（ABC）

各Port（抽象基底クラス）は外部サービスとの契約を定義します。
実装クラス（Adapter）はこれらのABCを継承し、全ての抽象メソッドを実装する必要があります。

このエンジンはストレージに書き込まない。取引データは読み取り専用で受け取り、
ユーザーによるスケジュール編集の保存は呼び出し側の責務とする。
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from lessonpath.domain.models import CalendarEventPayload, TransactionWithItems


class TransactionSource(ABC):
    """取引と明細の読み込み（JSONエクスポート、Firestore等）"""

    @abstractmethod
    def load_transactions(self) -> list[TransactionWithItems]:
        """全取引を明細つきで読み込む"""
        pass


class CalendarService(ABC):
    """端末・クラウドカレンダー（Google Calendar等）"""

    @abstractmethod
    def is_available(self) -> bool:
        """カレンダーが利用可能か（設定済み・権限あり）"""
        pass

    @abstractmethod
    def create_event(self, payload: CalendarEventPayload) -> str:
        """イベントを作成。event_id or URLを返す"""
        pass


class CalendarFeedRenderer(ABC):
    """iCalフィードのレンダリング"""

    @abstractmethod
    def render(self, events: list[CalendarEventPayload]) -> str:
        """CalendarEventPayloadのリストからiCal形式の文字列を生成"""
        pass
