"""Admin code generation"""

import hashlib
from datetime import datetime


def generate_admin_code(name: str, created_at: datetime, length: int = 12) -> str:
    """
    Derive the public admin code from a name and creation timestamp.

    The transform is deterministic and one-way: the same (name, timestamp)
    pair always yields the same code, and the code reveals neither input.

    Args:
        name: Admin display name
        created_at: Creation timestamp (its ISO-8601 form is hashed)
        length: Number of hex characters to keep (max 64)

    Returns:
        Upper-case hex prefix of sha256(name + isoformat(created_at))
    """
    if not 0 < length <= 64:
        raise ValueError("Admin code length must be between 1 and 64")

    digest = hashlib.sha256(f"{name}{created_at.isoformat()}".encode("utf-8")).hexdigest()
    return digest[:length].upper()
