import unittest
from unittest.mock import AsyncMock, patch

from authflow.config.settings import AuthFlowSettings
from authflow.core.flow.constants import FlowType
from authflow.core.flow.types import FlowState
from authflow.core.utils import timing
from authflow.core.utils.error_types import ErrorCode
from authflow.core.utils.exceptions import ServiceException
from authflow.services.security import MemoryStorage, SecurityStore
from authflow.services.side_effects import SideEffectExecutor
from authflow.tests.fakes import FakeAuthService, FakeUserService

DEVICE = {"deviceId": "test-device", "platform": "test"}


class SideEffectTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.settings = AuthFlowSettings(otp_expiry_seconds=300)
        self.auth = FakeAuthService(registered={"+15550000000", "taken@example.com"})
        self.users = FakeUserService()
        self.store = SecurityStore(MemoryStorage(), self.settings)
        self.executor = SideEffectExecutor(self.auth, self.users, self.store, self.settings, DEVICE)


class TestOtpSideEffects(SideEffectTestCase):
    async def test_phone_entry_sends_otp(self):
        before = timing.now_ms()
        result = await self.executor.phone_entry(
            FlowState(flow_type=FlowType.SIGNUP), {"countryCode": "+1", "phoneNumber": "5551234567"}
        )
        self.assertTrue(result.success)
        self.assertGreaterEqual(result.data["phone_otp_expires"], before + 300 * 1000)
        self.assertEqual(self.auth.sent, [("phone", "+15551234567", "whatsapp")])

    async def test_server_expiry_wins(self):
        self.auth.send_otp = AsyncMock(return_value=(True, {"expires": 42}))
        result = await self.executor.phone_entry(FlowState(), {"countryCode": "+1", "phoneNumber": "5551234567"})
        self.assertEqual(result.data, {"phone_otp_expires": 42})

    async def test_resend_moves_expiry_forward(self):
        state = FlowState(flow_type=FlowType.SIGNIN)
        payload = {"countryCode": "+1", "phoneNumber": "5551234567"}
        with patch("authflow.core.utils.timing.now_ms", side_effect=[1_000_000, 1_000_500]):
            first = await self.executor.phone_entry(state, payload)
            second = await self.executor.phone_entry(state, payload)
        self.assertTrue(first.success)
        self.assertTrue(second.success)
        self.assertGreater(second.data["phone_otp_expires"], first.data["phone_otp_expires"])

    async def test_signup_rejects_registered_phone(self):
        result = await self.executor.phone_entry(
            FlowState(flow_type=FlowType.SIGNUP), {"countryCode": "+1", "phoneNumber": "5550000000"}
        )
        self.assertFalse(result.success)
        self.assertEqual(result.error_code, ErrorCode.PHONE_ALREADY_REGISTERED)
        self.assertEqual(self.auth.sent, [])

    async def test_signin_skips_availability(self):
        result = await self.executor.phone_entry(
            FlowState(flow_type=FlowType.SIGNIN), {"countryCode": "+1", "phoneNumber": "5550000000"}
        )
        self.assertTrue(result.success)

    async def test_missing_phone_fields(self):
        result = await self.executor.phone_entry(FlowState(), {"countryCode": "+1"})
        self.assertEqual(result.error_code, ErrorCode.VALIDATION_ERROR)

    async def test_unknown_send_code_maps_to_send_failed(self):
        self.auth.send_otp = AsyncMock(return_value=(False, {"error": "boom", "code": "SMTP_DOWN"}))
        result = await self.executor.email_entry_pending(FlowState(), {"email": "a@example.com"})
        self.assertEqual(result.error_code, ErrorCode.OTP_SEND_FAILED)

    async def test_signup_rejects_registered_email(self):
        result = await self.executor.email_entry_pending(
            FlowState(flow_type=FlowType.SIGNUP), {"email": "Taken@Example.com"}
        )
        self.assertEqual(result.error_code, ErrorCode.EMAIL_ALREADY_REGISTERED)

    async def test_verify_invalid_code(self):
        self.auth.codes[("phone", "+15551234567")] = "123456"
        state = FlowState(phone="+15551234567", phone_otp_expires=timing.seconds_from_now_ms(300))
        result = await self.executor.phone_otp_pending(state, {"otp": "000000"})
        self.assertEqual(result.error_code, ErrorCode.OTP_INVALID)

        result = await self.executor.phone_otp_pending(state, {"otp": "123456"})
        self.assertTrue(result.success)

    async def test_verify_expired_timer(self):
        self.auth.codes[("phone", "+15551234567")] = "123456"
        state = FlowState(phone="+15551234567", phone_otp_expires=timing.now_ms() - 1)
        result = await self.executor.phone_otp_pending(state, {"otp": "123456"})
        self.assertEqual(result.error_code, ErrorCode.OTP_EXPIRED)

    async def test_unknown_verify_code_maps_to_verify_failed(self):
        self.auth.verify_otp = AsyncMock(return_value=(False, {"error": "?", "code": ErrorCode.UNKNOWN}))
        state = FlowState(email="a@example.com", email_otp_expires=timing.seconds_from_now_ms(300))
        result = await self.executor.email_otp_pending(state, {"emailCode": "123456"})
        self.assertEqual(result.error_code, ErrorCode.OTP_VERIFY_FAILED)


class TestTokenAndProfileSideEffects(SideEffectTestCase):
    async def test_token_acquisition_stores_tokens(self):
        self.users.user = {"firstName": "A", "lastName": "B"}
        result = await self.executor.token_acquisition(FlowState(phone="+15551234567", email="a@example.com"), {})
        self.assertTrue(result.success)
        self.assertEqual(result.data["user"], {"firstName": "A", "lastName": "B"})
        self.assertTrue((await self.store.get_token_status()).is_valid)

    async def test_token_acquisition_user_fetch_failure_is_not_fatal(self):
        with self.assertLogs("authflow.services.side_effects", level="WARNING"):
            result = await self.executor.token_acquisition(FlowState(phone="+15551234567"), {})
        self.assertTrue(result.success)
        self.assertEqual(result.data, {})

    async def test_token_acquisition_failure(self):
        self.auth.fail_login = True
        result = await self.executor.token_acquisition(FlowState(phone="+15551234567"), {})
        self.assertEqual(result.error_code, ErrorCode.TOKEN_ACQUISITION_FAILED)
        self.assertFalse((await self.store.get_token_status()).exists)

    async def test_profile_update(self):
        result = await self.executor.user_profile_pending(
            FlowState(), {"firstName": "A", "lastName": "B", "gender": "f"}
        )
        self.assertEqual(result.data["user"], {"firstName": "A", "lastName": "B", "gender": "f"})

    async def test_profile_missing_names(self):
        result = await self.executor.user_profile_pending(FlowState(), {"firstName": "A"})
        self.assertEqual(result.error_code, ErrorCode.VALIDATION_ERROR)
        self.assertIsNone(self.users.user)

    async def test_profile_update_failure(self):
        self.users.update_user_profile = AsyncMock(return_value=(False, {"error": "x", "code": "SERVER"}))
        result = await self.executor.user_profile_pending(FlowState(), {"firstName": "A", "lastName": "B"})
        self.assertEqual(result.error_code, ErrorCode.USER_UPDATE_FAILED)

    async def test_wallet_creation(self):
        result = await self.executor.wallet_creation_pending(FlowState(), {})
        self.assertEqual(result.data, {"wallet_address": "0xabc123"})


class TestPinSideEffects(SideEffectTestCase):
    async def test_pin_setup_starts_session(self):
        result = await self.executor.pin_setup_pending(FlowState(), {"pin": "1234"})
        self.assertTrue(result.success)
        self.assertTrue(await self.store.is_pin_configured())
        session = await self.store.get_session()
        self.assertTrue(session.pin_verified)

    async def test_pin_setup_invalid_format(self):
        result = await self.executor.pin_setup_pending(FlowState(), {"pin": "12ab"})
        self.assertEqual(result.error_code, ErrorCode.VALIDATION_ERROR)
        self.assertIsNone(await self.store.get_session())

    async def test_pin_setup_storage_failure(self):
        self.store.set_pin = AsyncMock(side_effect=ServiceException("down", "STORAGE_WRITE_ERROR", "redis_storage", "set"))
        result = await self.executor.pin_setup_pending(FlowState(), {"pin": "1234"})
        self.assertEqual(result.error_code, ErrorCode.PIN_SETUP_FAILED)

    async def test_pin_required(self):
        result = await self.executor.pin_entry_pending(FlowState(), {})
        self.assertEqual(result.error_code, ErrorCode.PIN_REQUIRED)

    async def test_pin_entry_invalid_then_locked(self):
        await self.store.set_pin("1234")
        codes = []
        for _ in range(self.settings.max_pin_attempts):
            codes.append((await self.executor.pin_entry_pending(FlowState(), {"pin": "9999"})).error_code)
        self.assertEqual(codes[0], ErrorCode.PIN_INVALID)
        self.assertEqual(codes[-1], ErrorCode.PIN_LOCKED)

    async def test_pin_entry_valid(self):
        await self.store.set_pin("1234")
        result = await self.executor.pin_entry_pending(FlowState(), {"pin": "1234"})
        self.assertTrue(result.success)
        self.assertTrue((await self.store.get_session()).is_live())

    async def test_authenticated_does_not_recreate_session(self):
        result = await self.executor.authenticated(FlowState(pin_verified=True), {})
        self.assertFalse(result.success)
        self.assertEqual(result.error_code, ErrorCode.SESSION_EXPIRED)
        self.assertIsNone(await self.store.get_session())

    async def test_authenticated_rejects_unverified_session(self):
        await self.store.start_session(pin_verified=False)
        result = await self.executor.authenticated(FlowState(pin_verified=True), {})
        self.assertEqual(result.error_code, ErrorCode.SESSION_EXPIRED)

    async def test_authenticated_keeps_live_session(self):
        session = await self.store.start_session()
        result = await self.executor.authenticated(FlowState(), {})
        self.assertTrue(result.success)
        self.assertEqual(await self.store.get_session(), session)


if __name__ == '__main__':
    unittest.main()
