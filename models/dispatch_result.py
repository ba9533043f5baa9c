from typing import Any, Optional

from pydantic import BaseModel


class DeliveryIds(BaseModel):
    business_email_id: str
    client_email_id: Optional[str] = None


class DispatchResult(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    detail: Optional[str] = None
    data: Optional[DeliveryIds] = None

    @classmethod
    def failure(cls, error: str, detail: Optional[str] = None) -> "DispatchResult":
        return cls(success=False, error=error, detail=detail)

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
