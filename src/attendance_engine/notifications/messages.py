"""Reminder copy for scheduler notifications."""

from __future__ import annotations

import random
from typing import Optional

PRE_SHIFT = "pre_shift"
BREAK_START = "break_start"
BREAK_END = "break_end"
END_OF_SHIFT = "end_of_shift"
OVERTIME_CHECK = "overtime_check"
AUTO_CHECKOUT = "auto_checkout"

MESSAGES = {
    PRE_SHIFT: (
        "Office starts in 15 minutes. Grab a coffee and let's make today count!",
        "15 minutes to go. Ready to get things done?",
        "Heads up! Your shift starts in 15 minutes.",
        "Good morning! The day kicks off in 15 minutes.",
        "Almost time. Your shift begins in 15 minutes.",
    ),
    BREAK_START: (
        "Break time! Step away and recharge.",
        "Time for a pause. Stretch, breathe and refresh.",
        "You've earned this break. Enjoy it!",
    ),
    BREAK_END: (
        "Break's over. Let's pick up where we left off.",
        "Welcome back! Time to finish strong.",
        "Recharged? Back to it!",
    ),
    END_OF_SHIFT: (
        "That's a wrap! Don't forget to clock out.",
        "Your shift is over. Time to clock out and unwind.",
        "Great work today. Remember to clock out!",
    ),
    OVERTIME_CHECK: (
        "Your shift ended 30 minutes ago. Are you working overtime or did you forget to clock out?",
        "Still here? Confirm overtime or clock out.",
        "Overtime check! Are you still working?",
    ),
    AUTO_CHECKOUT: (
        "You were clocked out automatically because no overtime response was received.",
        "Shift closed automatically. Your hours have been recorded.",
    ),
}


def pick_message(occasion: str, rng: Optional[random.Random] = None) -> str:
    pool = MESSAGES.get(occasion) or MESSAGES[PRE_SHIFT]
    return (rng or random).choice(pool)
