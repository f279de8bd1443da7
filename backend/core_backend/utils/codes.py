import random
import time


def generate_code(prefix: str) -> str:
    """
    Build a human-readable reference such as ``ORD-123456789``.

    Five random digits followed by the last four digits of the current
    millisecond timestamp. Uniqueness is enforced by the database; callers
    surface a collision as a conflict the client can retry.
    """
    random_part = random.randint(10000, 99999)
    timestamp_part = str(int(time.time() * 1000))[-4:]
    return f"{prefix}-{random_part}{timestamp_part}"
