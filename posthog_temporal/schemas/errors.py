"""Normalized error schema."""

from typing import Dict, Optional

from pydantic import BaseModel


class NormalizedError(BaseModel):
    """Serializable shape of an arbitrary raised or caught value."""

    message: str
    name: Optional[str] = None
    stack: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        """Convert to a plain dict, omitting absent fields."""
        return self.model_dump(exclude_none=True)
