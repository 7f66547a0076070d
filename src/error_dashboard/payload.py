from pydantic import BaseModel, Field


class ErrorPayload(BaseModel):
    """JSON body posted to the collection endpoint."""

    client_id: str
    client_secret: str = Field(repr=False)
    message: str
    error_details: str

    @classmethod
    def from_error(
        cls,
        *,
        client_id: str,
        client_secret: str,
        error: object,
        message: str,
    ) -> "ErrorPayload":
        return cls(
            client_id=client_id,
            client_secret=client_secret,
            message=message,
            error_details=describe_error(error),
        )


def describe_error(error: object) -> str:
    """Render *error* for the dashboard.

    Exceptions with an empty message fall back to their class name so
    the report is never blank.
    """
    text = str(error)
    if not text and isinstance(error, BaseException):
        return type(error).__name__
    return text
