"""Record ids.

Every repository names new documents with a CUID2, so the memory store and
Firestore hand out ids of the same shape.
"""

from cuid2 import cuid_wrapper

_next_cuid = cuid_wrapper()


def generate_cuid() -> str:
    return str(_next_cuid())
