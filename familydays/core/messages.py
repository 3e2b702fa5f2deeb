"""Reminder message composition.

Deterministic text for a (title, days until, time slot) triple, plus the
HTML wrapper used for email bodies.
"""

from __future__ import annotations

import html

from familydays.data.models import Event, TimeSlot

_EMAIL_TEMPLATE = """\
<div style="font-family: sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h2 style="color: #333;">Family Days Reminder</h2>
  <p style="font-size: 16px; line-height: 1.6;">{message}</p>
  <hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">
  <p style="font-size: 12px; color: #666;">
    You're receiving this because you enabled email reminders in Family Days Reminder.
  </p>
</div>
"""


def compose_message(event: Event, days_until: int, time_slot: TimeSlot) -> str:
    """Reminder text for an occurrence ``days_until`` days away."""
    title = event.title
    if days_until == 3:
        return f"📅 Heads up! {title} is in 3 days. Start planning!"
    if days_until == 1:
        return f"⏰ Reminder: {title} is TOMORROW! Don't forget!"
    if days_until == 0:
        if time_slot == TimeSlot.MORNING:
            return f"🎉 Good morning! Today is {title}! Have a wonderful day!"
        if time_slot == TimeSlot.AFTERNOON:
            return f"☀️ Afternoon reminder: It's {title} today! Hope it's going great!"
        return f"🌙 Evening check-in: {title} is today! Hope you celebrated well!"
    return f"Reminder: {title} is coming up in {days_until} days."


def render_email_html(message: str) -> str:
    return _EMAIL_TEMPLATE.format(message=html.escape(message))
