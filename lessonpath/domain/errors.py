"""ドメイン固有の例外クラス"""


class LessonPathError(Exception):
    """LessonPath の基底例外"""

    pass


class SourceLoadError(LessonPathError):
    """取引データの読み込みエラー（JSONファイル、Firestore等）"""

    pass


class ItemNotFoundError(LessonPathError):
    """指定した明細が見つからない"""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"Line item not found: {item_id}")
        self.item_id = item_id


class CalendarUnavailableError(LessonPathError):
    """カレンダー機能が使えない（未設定・権限なし）"""

    pass


class CalendarWriteError(LessonPathError):
    """カレンダーへのイベント作成に失敗"""

    pass
