from __future__ import annotations

import random
import string
import time


def shift_id() -> str:
    return f"SH-{random.randint(1000, 9999)}"


def category_id() -> str:
    return f"SC-{random.randint(100, 999)}"


def assignment_id() -> str:
    return f"AS-{random.randint(0, 999999)}"


def timetable_id() -> str:
    return f"TT-{str(int(time.time() * 1000))[-6:]}"


def slot_id() -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "SLOT-" + "".join(random.choices(alphabet, k=9))
