"""Small numeric helpers shared by the evaluator, editing and playback code."""


def clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def _pad(n: int) -> str:
    return f"0{n}" if n < 10 else str(n)


def fmt_time(seconds: float) -> str:
    """Format seconds as ``mm:ss``, or ``hh:mm:ss`` past the hour."""
    seconds = max(0.0, seconds)
    h = int(seconds // 3600)
    m = int((seconds % 3600) // 60)
    s = int(seconds % 60)
    if h > 0:
        return f"{_pad(h)}:{_pad(m)}:{_pad(s)}"
    return f"{_pad(m)}:{_pad(s)}"
