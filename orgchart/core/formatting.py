from __future__ import annotations

# IANA id -> (display label, standard-time offset)
TIMEZONES: dict[str, tuple[str, str]] = {
    "America/Chicago": ("Chicago", "UTC-6"),
    "America/Los_Angeles": ("Los Angeles", "UTC-8"),
    "America/New_York": ("New York", "UTC-5"),
    "America/Phoenix": ("Phoenix", "UTC-7"),
    "America/Sao_Paulo": ("São Paulo", "UTC-3"),
    "Asia/Singapore": ("Singapore", "UTC+8"),
    "Asia/Tokyo": ("Tokyo", "UTC+9"),
    "Australia/Sydney": ("Sydney", "UTC+10"),
    "Europe/Berlin": ("Berlin", "UTC+1"),
    "Europe/London": ("London", "UTC+0"),
    "UTC": ("UTC", "UTC+0"),
}


def initials(name: str) -> str:
    """Avatar initials: 'John Doe' -> 'JD', 'Maria' -> 'MA', blank -> '??'."""
    parts = name.split()
    if not parts:
        return "??"
    if len(parts) == 1:
        return parts[0][:2].upper()
    return (parts[0][0] + parts[-1][0]).upper()


def level_label(level: int) -> str:
    return f"Tier {level + 1}"


def format_timezone(timezone: str) -> str:
    info = TIMEZONES.get(timezone)
    if info is None:
        return timezone
    label, offset = info
    return f"{label} ({offset})"
