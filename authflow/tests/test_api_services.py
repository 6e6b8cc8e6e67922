import unittest
from unittest.mock import MagicMock, patch

import requests

from authflow.config.settings import AuthFlowSettings
from authflow.core.utils.error_types import ErrorCode
from authflow.core.utils.exceptions import ConfigurationException
from authflow.services.api import AuthApiService, UserApiService
from authflow.services.api.config import ApiConfig, ApiEndpoints
from authflow.services.security import MemoryStorage, SecurityStore


def mock_response(status_code=200, body=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = body if body is not None else {}
    return response


class TestApiConfig(unittest.TestCase):
    def test_url_and_headers(self):
        config = ApiConfig.from_settings(AuthFlowSettings(api_url="https://api.example.com/v1", client_api_key="key"))
        self.assertEqual(config.get_url("auth/login"), "https://api.example.com/v1/auth/login")
        self.assertEqual(config.get_headers()["x-client-api-key"], "key")

    def test_unknown_endpoint(self):
        with self.assertRaises(ConfigurationException):
            ApiEndpoints.get_path("auth", "logout")

    def test_auth_requirements(self):
        self.assertFalse(ApiEndpoints.requires_auth("auth", "send_otp"))
        self.assertTrue(ApiEndpoints.requires_auth("user", "get"))


@patch("authflow.services.api.base.requests.request")
class TestAuthApiService(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.settings = AuthFlowSettings(api_url="https://api.example.com/v1/", default_otp_channel="sms")
        self.service = AuthApiService(self.settings)

    async def test_send_otp(self, mock_request):
        mock_request.return_value = mock_response(body={"data": {"expiresAt": 1700000000000}})
        success, data = await self.service.send_otp("phone", "+15551234567")
        self.assertTrue(success)
        self.assertEqual(data, {"expires": 1700000000000})

        method, url = mock_request.call_args.args
        self.assertEqual(method, "POST")
        self.assertEqual(url, "https://api.example.com/v1/auth/otp/send")
        self.assertEqual(mock_request.call_args.kwargs["json"]["channel"], "sms")

    async def test_send_otp_invalid_email_not_sent(self, mock_request):
        success, data = await self.service.send_otp("email", "not-an-email")
        self.assertFalse(success)
        self.assertEqual(data["code"], ErrorCode.EMAIL_INVALID)
        mock_request.assert_not_called()

    async def test_send_otp_missing_value(self, mock_request):
        success, data = await self.service.send_otp("phone", "")
        self.assertEqual(data["code"], ErrorCode.OTP_MISSING_MEDIUM)

    async def test_server_error_code(self, mock_request):
        mock_request.return_value = mock_response(400, {"error": "locked", "errorCode": "OTP_LOCKED"})
        with self.assertLogs("authflow.services.api.base", level="ERROR"):
            success, data = await self.service.verify_otp("phone", "+15551234567", "123456")
        self.assertFalse(success)
        self.assertEqual(data["code"], ErrorCode.OTP_LOCKED)

    async def test_unrecognised_server_code(self, mock_request):
        mock_request.return_value = mock_response(500, {"error": "boom", "errorCode": "DB_DOWN"})
        with self.assertLogs("authflow.services.api.base", level="ERROR"):
            success, data = await self.service.verify_otp("phone", "+15551234567", "123456")
        self.assertEqual(data["code"], ErrorCode.UNKNOWN)

    async def test_verify_invalid(self, mock_request):
        mock_request.return_value = mock_response(body={"data": {"valid": False}})
        success, data = await self.service.verify_otp("phone", "+15551234567", "000000")
        self.assertEqual(data["code"], ErrorCode.OTP_INVALID)

    async def test_verify_requires_code(self, mock_request):
        success, data = await self.service.verify_otp("phone", "+15551234567", "")
        self.assertEqual(data["code"], ErrorCode.OTP_REQUIRED)

    async def test_network_error(self, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError("offline")
        with self.assertLogs("authflow.services.api.base", level="ERROR"):
            success, data = await self.service.send_otp("phone", "+15551234567")
        self.assertFalse(success)
        self.assertEqual(data["code"], ErrorCode.NETWORK_ERROR)

    async def test_availability(self, mock_request):
        mock_request.return_value = mock_response(body={"data": {"available": False}})
        success, data = await self.service.check_availability("email", "a@example.com")
        self.assertEqual(data["code"], ErrorCode.EMAIL_ALREADY_REGISTERED)
        self.assertEqual(mock_request.call_args.kwargs["params"], {"medium": "email", "value": "a@example.com"})

    async def test_login_requires_both_tokens(self, mock_request):
        mock_request.return_value = mock_response(body={"data": {"accessToken": "a"}})
        success, data = await self.service.acquire_auth_token("+15551234567", None, {})
        self.assertEqual(data["code"], ErrorCode.TOKEN_ACQUISITION_FAILED)

        mock_request.return_value = mock_response(body={"data": {"accessToken": "a", "refreshToken": "r"}})
        success, data = await self.service.acquire_auth_token("+15551234567", None, {"deviceId": "d"})
        self.assertTrue(success)
        self.assertEqual(data, {"accessToken": "a", "refreshToken": "r"})


@patch("authflow.services.api.base.requests.request")
class TestUserApiService(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.settings = AuthFlowSettings(api_url="https://api.example.com/v1/")
        self.store = SecurityStore(MemoryStorage(), self.settings)
        self.service = UserApiService(self.settings, self.store)

    async def test_requires_token(self, mock_request):
        with self.assertLogs("authflow.services.api.base", level="WARNING"):
            success, data = await self.service.get_user_profile()
        self.assertFalse(success)
        mock_request.assert_not_called()

    async def test_bearer_header(self, mock_request):
        await self.store.save_tokens("access-token")
        mock_request.return_value = mock_response(body={"data": {"user": {"firstName": "A"}}})
        success, data = await self.service.get_user_profile()
        self.assertTrue(success)
        self.assertEqual(data, {"user": {"firstName": "A"}})
        self.assertEqual(mock_request.call_args.kwargs["headers"]["Authorization"], "Bearer access-token")

    async def test_update_profile(self, mock_request):
        await self.store.save_tokens("access-token")
        mock_request.return_value = mock_response(body={"data": {}})
        success, data = await self.service.update_user_profile({"firstName": "A", "lastName": "B"})
        self.assertEqual(data, {"user": {"firstName": "A", "lastName": "B"}})
        self.assertEqual(mock_request.call_args.args[0], "PUT")

    async def test_create_wallet(self, mock_request):
        await self.store.save_tokens("access-token")
        mock_request.return_value = mock_response(body={"data": {"walletAddress": "0x1"}})
        success, data = await self.service.create_wallet()
        self.assertEqual(data, {"walletAddress": "0x1"})


if __name__ == '__main__':
    unittest.main()
