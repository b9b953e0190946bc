import pytest

from timetracker.api.tokens import TokenService
from timetracker.core.exceptions import AuthenticationError


def test_token_round_trip(worker):
    tokens = TokenService("secret", max_age_seconds=60)

    assert tokens.verify(tokens.issue(worker)) == worker


def test_token_signed_with_other_key_is_rejected(worker):
    token = TokenService("secret", max_age_seconds=60).issue(worker)

    with pytest.raises(AuthenticationError, match="Invalid"):
        TokenService("other", max_age_seconds=60).verify(token)


def test_expired_token_is_rejected(worker):
    tokens = TokenService("secret", max_age_seconds=-1)

    with pytest.raises(AuthenticationError, match="expired"):
        tokens.verify(tokens.issue(worker))
