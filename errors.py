from typing import Optional


class InquiryError(Exception):
    """Base class for errors that end an inquiry request."""

    status_code = 500
    public_message = "Internal server error"


class ValidationError(InquiryError):
    status_code = 400
    public_message = "Missing required fields"

    def __init__(self, missing_fields: list[str]):
        self.missing_fields = list(missing_fields)
        super().__init__(f"Missing required fields: {', '.join(self.missing_fields)}")


class TransportError(InquiryError):
    status_code = 500
    public_message = "Error sending email"


class PolicyError(InquiryError):
    status_code = 403
    public_message = "Not allowed by CORS"

    def __init__(self, origin: Optional[str]):
        self.origin = origin
        super().__init__(f"Origin not allowed: {origin}")
