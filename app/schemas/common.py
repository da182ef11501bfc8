from typing import Optional, List, Generic, TypeVar, Dict, Any
from pydantic import BaseModel

T = TypeVar("T")


# Paginated response wrapper: used by all list endpoints
class PaginatedResponse(BaseModel, Generic[T]):
    data: List[T]
    total: int
    page: int
    limit: int
    total_pages: int


# Error responses: rendered for every domain error by app.main
class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[Dict[str, Any]] = None


class MessageResponse(BaseModel):
    message: str
