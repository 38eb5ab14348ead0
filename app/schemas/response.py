from pydantic import BaseModel
from typing import Literal, Generic, TypeVar

T = TypeVar("T")


class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    status: Literal["error"] = "error"
    message: str


class DataResponse(BaseModel, Generic[T]):
    """
    Standard success envelope.
    """
    status: Literal["success"] = "success"
    data: T


class CheckoutUrlResponse(BaseModel):
    status: Literal["success"] = "success"
    url: str
