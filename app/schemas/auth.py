from pydantic import Field

from app.schemas.common import CamelModel


class LoginRequest(CamelModel):
    """
    Request body for the login endpoint.
    """

    email: str = Field(
        ..., min_length=3, examples=["manager@example.com"], description="Account email"
    )
    password: str = Field(
        ..., min_length=1, examples=["StrongPassword123!"], description="User's password"
    )


class TokenResponse(CamelModel):
    """
    Response model containing the access token.
    """

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Type of token")
    expires_in: int = Field(..., description="Token lifetime in seconds")
