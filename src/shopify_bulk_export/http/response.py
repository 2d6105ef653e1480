from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class GraphQLResponse:
    """Decoded GraphQL response body plus HTTP metadata."""

    status_code: int
    data: Optional[Dict[str, Any]] = None
    errors: List[Dict[str, Any]] = field(default_factory=list)
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def error_messages(self) -> List[str]:
        return [str(e.get("message") or e) for e in self.errors]
