from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

REQUIRED_FIELDS = ("name", "email", "service", "message")


class InquiryPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    service: Optional[str] = None
    message: Optional[str] = None

    @field_validator("name", "email", "phone", "service", "message")
    @classmethod
    def _strip_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    def missing_fields(self) -> list[str]:
        return [field for field in REQUIRED_FIELDS if not getattr(self, field)]
