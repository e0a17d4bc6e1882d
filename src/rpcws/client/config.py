from pydantic import BaseModel, ConfigDict, Field

DEFAULT_RESPONSE_TIMEOUT = 10.0


class SessionConfig(BaseModel):
    """Tunable session behaviour. Reassigning a field re-validates it."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    response_timeout: float | None = Field(default=DEFAULT_RESPONSE_TIMEOUT, ge=0)
    """
    Seconds to wait for a response before failing a call.

    0 or None disables the guard, so calls wait until answered or the
    connection closes.
    """
