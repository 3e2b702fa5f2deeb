"""Tests for familydays.core.messages — reminder text and email HTML."""

from datetime import date

import pytest

from familydays.core.messages import compose_message, render_email_html
from familydays.data.models import Event, TimeSlot

EVENT = Event(id="e1", title="Mom's Birthday", reference_date=date(1960, 6, 15))


class TestComposeMessage:
    def test_three_days(self):
        assert compose_message(EVENT, 3, TimeSlot.MORNING) == (
            "📅 Heads up! Mom's Birthday is in 3 days. Start planning!"
        )

    def test_tomorrow(self):
        assert "Mom's Birthday is TOMORROW" in compose_message(EVENT, 1, TimeSlot.EVENING)

    @pytest.mark.parametrize(
        "slot, expected",
        [
            (TimeSlot.MORNING, "Good morning! Today is Mom's Birthday"),
            (TimeSlot.AFTERNOON, "Afternoon reminder: It's Mom's Birthday today"),
            (TimeSlot.EVENING, "Evening check-in: Mom's Birthday is today"),
        ],
    )
    def test_same_day_varies_by_slot(self, slot, expected):
        assert expected in compose_message(EVENT, 0, slot)

    def test_other_offsets(self):
        assert compose_message(EVENT, 7, TimeSlot.MORNING) == (
            "Reminder: Mom's Birthday is coming up in 7 days."
        )

    def test_deterministic(self):
        assert compose_message(EVENT, 3, TimeSlot.MORNING) == compose_message(EVENT, 3, TimeSlot.MORNING)


class TestRenderEmailHtml:
    def test_wraps_message(self):
        html = render_email_html("Party is TOMORROW!")
        assert "<h2" in html and "Family Days Reminder" in html
        assert "Party is TOMORROW!" in html

    def test_escapes_markup(self):
        html = render_email_html("<b>Dad</b> & Mom")
        assert "&lt;b&gt;Dad&lt;/b&gt; &amp; Mom" in html
