from typing import Any
from pydantic import BaseModel

class Envelope(BaseModel):
    success: bool; message: str
    data: Any = None; count: int | None = None; error: str | None = None

class EndpointIndex(BaseModel):
    success: bool = True; message: str; version: str; endpoints: dict[str, str]
