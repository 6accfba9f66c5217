import pytest

from storefront.constants import MSG_BACKEND, MSG_USERNAME_TAKEN
from storefront.errors import ApiError, NetworkOrServerError, Unauthenticated
from storefront.models import Session
from storefront.services import auth
from storefront.utils.validators import validate_credentials


class AuthApi:
    def __init__(self, response=None, error=None):
        self.response = response or {}
        self.error = error

    async def login(self, username, password):
        if self.error:
            raise self.error
        return self.response

    async def register(self, username, password):
        if self.error:
            raise self.error
        return self.response


@pytest.mark.asyncio
async def test_login_builds_session():
    api = AuthApi({"success": True, "token": "abc", "username": "crio.do", "balance": "5000"})
    session = await auth.login(api, "crio.do", "learnbydoing")
    assert session == Session(token="abc", username="crio.do", balance=5000.0)


@pytest.mark.asyncio
async def test_login_bad_password_message_is_verbatim():
    api = AuthApi(error=ApiError(400, "Password is incorrect"))
    with pytest.raises(Unauthenticated) as exc:
        await auth.login(api, "crio.do", "wrong-one")
    assert exc.value.message == "Password is incorrect"


@pytest.mark.asyncio
async def test_login_server_error_is_generic():
    api = AuthApi(error=ApiError(502))
    with pytest.raises(Unauthenticated) as exc:
        await auth.login(api, "crio.do", "learnbydoing")
    assert exc.value.message == MSG_BACKEND


@pytest.mark.asyncio
async def test_login_unsuccessful_body():
    api = AuthApi({"success": False, "message": "Username does not exist"})
    with pytest.raises(Unauthenticated) as exc:
        await auth.login(api, "nobody1", "learnbydoing")
    assert exc.value.message == "Username does not exist"


@pytest.mark.asyncio
async def test_register_ok_and_taken():
    await auth.register(AuthApi({"success": True}), "crio.do", "learnbydoing")

    with pytest.raises(NetworkOrServerError) as exc:
        await auth.register(AuthApi({"success": False}), "crio.do", "learnbydoing")
    assert exc.value.message == MSG_USERNAME_TAKEN


@pytest.mark.parametrize(
    "username, password, confirm, expected",
    [
        ("", "secret1", None, "Username is a required field"),
        ("abc", "secret1", None, "Username must be at least 6 characters"),
        ("crio.do", "", None, "Password is a required field"),
        ("crio.do", "12345", None, "Password must be at least 6 characters"),
        ("crio.do", "secret1", "secret2", "Passwords do not match"),
        ("crio.do", "secret1", "secret1", None),
        ("crio.do", "secret1", None, None),
    ],
)
def test_validate_credentials(username, password, confirm, expected):
    assert validate_credentials(username, password, confirm) == expected
