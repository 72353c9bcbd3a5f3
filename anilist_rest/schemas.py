from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# --- Enums as constrained string types ---------------------------------------

MediaKind = Literal["manga", "anime"]
Operation = Literal["search", "by_id", "top100", "trending", "top_manhwa"]

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 10


# --- Request parameters ------------------------------------------------------

class MediaQueryParams(BaseModel):
    """Normalized parameters of one request; also the source of its cache key."""
    model_config = ConfigDict(frozen=True)

    kind: MediaKind
    operation: Operation
    search: Optional[str] = None
    id: Optional[int] = None
    page: int = Field(DEFAULT_PAGE, ge=1)
    per_page: int = Field(DEFAULT_PER_PAGE, ge=1)

    @property
    def paginated(self) -> bool:
        return self.operation != "by_id"

    def cache_key(self) -> str:
        # page/perPage stay the trailing fields so a search containing ":"
        # can't produce the key of another request
        if self.operation == "by_id":
            return f"{self.kind}:id:{self.id}"
        if self.operation == "search":
            return f"{self.kind}:search:{self.search}:{self.page}:{self.per_page}"
        return f"{self.kind}:{self.operation}:{self.page}:{self.per_page}"

    def variables(self) -> Dict[str, Any]:
        """GraphQL variables for the upstream query."""
        if self.operation == "by_id":
            return {"id": self.id}
        out: Dict[str, Any] = {"page": self.page, "perPage": self.per_page}
        if self.operation == "search":
            out["search"] = self.search
        return out

