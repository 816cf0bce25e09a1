"""Time value parsing and formatting."""

from __future__ import annotations

from framebatch.exceptions import ConfigError


def parse_time_value(value: str) -> float:
    """Parse seconds from '90', '1.5s', '250ms', 'MM:SS' or 'HH:MM:SS[.mmm]'."""
    normalized = value.strip().replace(" ", "").replace(",", ".").lower()
    if not normalized:
        raise ConfigError("Empty time value")

    if ":" in normalized:
        parts = normalized.split(":")
        if len(parts) not in (2, 3):
            raise ConfigError(f"Invalid time format '{value}'. Expected HH:MM:SS.mmm")
        if len(parts) == 2:
            parts.insert(0, "0")
        hours_str, minutes_str, seconds_str = parts
        try:
            hours = int(hours_str)
            minutes = int(minutes_str)
            seconds = float(seconds_str)
        except ValueError as exc:
            raise ConfigError(f"Failed to parse time '{value}'") from exc
        if not 0 <= minutes < 60:
            raise ConfigError(f"Minutes out of range 0-59 in value '{value}'")
        if not 0 <= seconds < 60:
            raise ConfigError(f"Seconds out of range 0-59 in value '{value}'")
        total_seconds = hours * 3600 + minutes * 60 + seconds
    else:
        if normalized.endswith("ms"):
            scale, number_part = 0.001, normalized[:-2]
        elif normalized.endswith("s"):
            scale, number_part = 1.0, normalized[:-1]
        else:
            scale, number_part = 1.0, normalized
        try:
            total_seconds = float(number_part) * scale
        except ValueError as exc:
            raise ConfigError(f"Failed to parse number in '{value}'") from exc

    if total_seconds < 0:
        raise ConfigError(f"Time must be >= 0, got '{value}'")
    return total_seconds


def format_duration(seconds: float) -> str:
    """Format seconds as MM:SS, or HH:MM:SS past one hour."""
    seconds = max(0, int(seconds))
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def format_seconds_arg(seconds: float) -> str:
    """Render seconds for an ffmpeg time argument."""
    return f"{seconds:.3f}".rstrip("0").rstrip(".") or "0"
