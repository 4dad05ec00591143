"""
Request identifiers — time prefix plus a random component.
"""

import random
import time


def random_id() -> str:
    """Opaque id for correlating a request with its reply. Unique in practice, not guaranteed."""
    unique = random.randrange(10**16)
    return f"{int(time.time() * 1000)}{unique}"
