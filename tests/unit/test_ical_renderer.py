"""ICalRenderer のユニットテスト"""

from datetime import datetime

from lessonpath.adapters.ical_renderer import ICalRenderer
from lessonpath.domain.models import CalendarEventPayload


def _lesson(**overrides) -> CalendarEventPayload:
    fields = {
        "title": "Term 1 violin – Lesson 1",
        "start": datetime(2024, 1, 1, 16, 0),
        "end": datetime(2024, 1, 1, 16, 30),
        "location": "Allegro Music",
        "notes": "Lesson with Ms Lee. From LessonPath.",
        "url": "app://cal/event_i1_2024-01-01",
    }
    fields.update(overrides)
    return CalendarEventPayload(**fields)


class TestICalRenderer:
    """ICalRenderer の単体テスト"""

    def setup_method(self):
        self.renderer = ICalRenderer()

    def test_render_returns_string(self):
        """render() が文字列を返す"""
        assert isinstance(self.renderer.render([_lesson()]), str)

    def test_render_contains_ical_header(self):
        """iCal ヘッダーが含まれる"""
        result = self.renderer.render([])
        assert "BEGIN:VCALENDAR" in result
        assert "END:VCALENDAR" in result
        assert "VERSION:2.0" in result
        assert "LessonPath" in result
        assert "BEGIN:VEVENT" not in result

    def test_render_with_datetime_event(self):
        """時刻付きイベントが正しく出力される"""
        result = self.renderer.render([_lesson()])
        assert "BEGIN:VEVENT" in result
        assert "DTSTART:20240101T160000" in result
        assert "DTEND:20240101T163000" in result
        assert "Allegro Music" in result

    def test_render_with_allday_event(self):
        """終日イベントが DATE 型として出力される"""
        payload = _lesson(
            title="Violin bow rehair - Service Period",
            start=datetime(2024, 2, 5),
            end=datetime(2024, 2, 9),
            url="app://cal/event_s1_overall",
            all_day=True,
        )
        result = self.renderer.render([payload])
        assert "DTSTART;VALUE=DATE:20240205" in result
        assert "DTEND;VALUE=DATE:20240209" in result

    def test_uid_is_derived_from_canonical_link(self):
        """UID は正規リンクのIDから作る（再生成しても変わらない）"""
        result = self.renderer.render([_lesson()])
        assert "UID:event_i1_2024-01-01@lessonpath" in result

    def test_render_multiple_events(self):
        """複数イベントが出力される"""
        events = [_lesson(), _lesson(url="app://cal/event_i1_2024-01-08")]
        result = self.renderer.render(events)
        assert result.count("BEGIN:VEVENT") == 2

    def test_optional_fields_omitted(self):
        """会場・メモ・リンクが空なら出力しない"""
        result = self.renderer.render([_lesson(location="", notes="", url="")])
        assert "LOCATION" not in result
        assert "DESCRIPTION" not in result
