import hashlib
import json
from typing import Any, Optional


def stable_hash(text: str, length: Optional[int] = 16) -> str:
    """Generate a stable hash from text."""
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
    return digest[:length] if length else digest


def canonical_json(value: Any) -> str:
    """
    Serialize a value so that logically equal structures produce identical text.

    Mapping keys are sorted at every depth; values JSON cannot express are
    rendered with ``str``.
    """
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def digest(value: Any) -> str:
    """Full sha256 hex digest of a value's canonical JSON form."""
    return stable_hash(canonical_json(value), length=None)
