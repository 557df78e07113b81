import hashlib
import json
from typing import Any


def payload_hash(payload: Any) -> str:
    """Stable SHA-256 of a dict or pydantic model."""
    if hasattr(payload, "model_dump"):
        payload = payload.model_dump(mode="json")
    s = json.dumps(payload, sort_keys=True, default=str)
    return hashlib.sha256(s.encode()).hexdigest()
