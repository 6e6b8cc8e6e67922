"""Epoch-millisecond clock shared by timers, sessions and PIN lockout"""
import time


def now_ms() -> int:
    """Current time in epoch milliseconds"""
    return int(time.time() * 1000)


def seconds_from_now_ms(seconds: int) -> int:
    """Epoch milliseconds `seconds` in the future"""
    return now_ms() + seconds * 1000
