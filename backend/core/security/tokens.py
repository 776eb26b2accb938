"""
Signed password reset tokens.
"""

from datetime import UTC, datetime, timedelta

from jose import jwt

PASSWORD_RESET_TOKEN_TYPE = "password_reset"


class TokenService:
    """Issues password reset JWTs for accounts created at checkout.

    The tokens are redeemed by the student site's reset page, which shares
    ``SECRET_KEY`` and checks ``type == "password_reset"``.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        reset_token_expire_hours: int = 24,
    ):
        """
        Args:
            secret_key: Secret key for signing tokens
            algorithm: JWT algorithm (default: HS256)
            reset_token_expire_hours: Lifetime of reset tokens. Links sent
                with a payment confirmation may be opened hours later, so the
                default is a full day.
        """
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._reset_token_expire_hours = reset_token_expire_hours

    def create_password_reset_token(self, user_id: str, email: str | None = None) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": user_id,
            "exp": now + timedelta(hours=self._reset_token_expire_hours),
            "iat": now,
            "type": PASSWORD_RESET_TOKEN_TYPE,
        }
        if email:
            payload["email"] = email

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
