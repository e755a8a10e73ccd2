from typing import Any, Dict, List

from pydantic import BaseModel


class PageResponse(BaseModel):
    page: Dict[str, Any]
    filepath: str
    """Output path relative to the build directory, without extension."""


class EventStreamResponse(BaseModel):
    pages: List[PageResponse]
    count: int
