from typing import Optional

MILESTONE_MESSAGES = {
    3: "3 days in a row! 🎯 A great start!",
    7: "One full week! 🌟 The habit is taking hold!",
    14: "Two weeks strong! 💪 Fantastic progress!",
    21: "Three weeks! 🚀 Almost a habit for life!",
    30: "One month! 🏆 This is part of your routine now!",
    50: "50 days straight! ✨ Remarkable persistence!",
    100: "100 days! 🎊 A legendary achievement!",
    365: "A whole year! 🌈 You are a true habit master!",
}

def milestone_message(streak: int) -> Optional[str]:
    """Celebration text for a milestone streak, None for any other value."""
    if streak in MILESTONE_MESSAGES:
        return MILESTONE_MESSAGES[streak]
    if streak > 0 and streak % 100 == 0:
        return f"{streak} days in a row! 🎉 An unbelievable record!"
    return None
