"""reCAPTCHA request and provider result schemas."""

from pydantic import BaseModel, ConfigDict, Field


class RecaptchaRequest(BaseModel):
    """Token submitted by the client for verification."""

    token: str = Field(default="", description="reCAPTCHA token to validate")


class RecaptchaVerification(BaseModel):
    """Google siteverify response, passed through to the caller unchanged.

    Fields absent from the provider body fall back to zero values, so a v2
    answer without ``score`` reads as 0.0.
    """

    success: bool = False
    score: float = Field(default=0.0, description="reCAPTCHA v3 score, 0.0 (bot) to 1.0 (human)")
    action: str = ""
    challenge_ts: str = Field(default="", description="Timestamp of the challenge load")
    hostname: str = Field(default="", description="Hostname of the site where it was solved")
    error_codes: list[str] | None = Field(default=None, alias="error-codes")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict:
        """Wire representation; ``error-codes`` only appears when the provider sent it."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
