from __future__ import annotations

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..core.exceptions import AuthenticationError
from ..users.service import SessionUser


class TokenService:
    """Signed, time-limited bearer tokens carrying a SessionUser."""

    def __init__(self, secret_key: str, *, max_age_seconds: int, salt: str = "timetracker-api"):
        self._serializer = URLSafeTimedSerializer(secret_key, salt=salt)
        self._max_age = int(max_age_seconds)

    @property
    def max_age_seconds(self) -> int:
        return self._max_age

    def issue(self, actor: SessionUser) -> str:
        return self._serializer.dumps(actor.to_dict())

    def verify(self, token: str) -> SessionUser:
        try:
            data = self._serializer.loads(token, max_age=self._max_age)
        except SignatureExpired:
            raise AuthenticationError("Token expired")
        except BadSignature:
            raise AuthenticationError("Invalid token")
        return SessionUser.from_dict(data)
