import random
import time
from datetime import date, datetime

__all__ = ["generate_id", "now", "now_iso", "today"]


def now() -> datetime:
    """Local, timezone-aware current time."""
    return datetime.now().astimezone()


def today() -> date:
    return now().date()


def now_iso() -> str:
    return now().isoformat(timespec="milliseconds")


def generate_id() -> float:
    """Epoch milliseconds plus a random fraction, so rapid creations don't collide."""
    return time.time() * 1000 + random.random()
