import random
import unittest

from authflow.core.flow import conditions
from authflow.core.flow.types import FlowState
from authflow.core.utils import timing


def random_state(rng: random.Random) -> FlowState:
    now = timing.now_ms()
    timer_choices = [None, now - 60_000, now + 60_000]
    user = rng.choice([None, {}, {"firstName": "A"}, {"firstName": "A", "lastName": "B"}])
    return FlowState(
        phone_validated=rng.random() < 0.5,
        email_verified=rng.random() < 0.5,
        pin_set=rng.random() < 0.5,
        pin_verified=rng.random() < 0.5,
        token_valid=rng.random() < 0.5,
        phone_otp_expires=rng.choice(timer_choices),
        email_otp_expires=rng.choice(timer_choices),
        user=user,
    )


class TestOtpConditions(unittest.TestCase):
    def test_entry_without_timer(self):
        state = FlowState()
        self.assertTrue(conditions.phone_entry(state))
        self.assertFalse(conditions.phone_otp_pending(state))

    def test_live_timer_means_otp_pending(self):
        state = FlowState(phone_otp_expires=timing.seconds_from_now_ms(300))
        self.assertFalse(conditions.phone_entry(state))
        self.assertTrue(conditions.phone_otp_pending(state))

    def test_expired_timer_returns_to_entry(self):
        state = FlowState(phone_otp_expires=timing.now_ms() - 1000)
        self.assertTrue(conditions.phone_entry(state))
        self.assertFalse(conditions.phone_otp_pending(state))

    def test_email_gated_on_phone(self):
        self.assertFalse(conditions.email_entry(FlowState()))
        self.assertTrue(conditions.email_entry(FlowState(phone_validated=True)))

    def test_valid_token_skips_verification(self):
        state = FlowState(token_valid=True)
        for condition in (conditions.phone_entry, conditions.phone_otp_pending,
                          conditions.email_entry, conditions.email_otp_pending,
                          conditions.token_acquisition):
            self.assertFalse(condition(state), condition.__name__)


class TestPostTokenConditions(unittest.TestCase):
    def test_profile_needs_required_fields(self):
        self.assertTrue(conditions.user_profile(FlowState(token_valid=True, user={"firstName": "A"})))
        self.assertFalse(conditions.user_profile(
            FlowState(token_valid=True, user={"firstName": "A", "lastName": "B"})
        ))

    def test_pin_steps(self):
        self.assertTrue(conditions.pin_setup(FlowState(token_valid=True)))
        self.assertTrue(conditions.pin_entry(FlowState(token_valid=True, pin_set=True)))
        self.assertTrue(conditions.authenticated(FlowState(token_valid=True, pin_set=True, pin_verified=True)))

    def test_pin_reset_ignores_configured_pin(self):
        self.assertTrue(conditions.pin_reset(FlowState(token_valid=True, pin_set=True)))
        self.assertFalse(conditions.pin_reset(FlowState(token_valid=True, pin_set=True, pin_verified=True)))


class TestConditionSoundness(unittest.TestCase):
    """Mutually exclusive steps never both apply"""

    EXCLUSIVE_PAIRS = [
        (conditions.phone_entry, conditions.phone_otp_pending),
        (conditions.email_entry, conditions.email_otp_pending),
        (conditions.pin_setup, conditions.pin_entry),
        (conditions.pin_entry, conditions.authenticated),
        (conditions.token_acquisition, conditions.authenticated),
    ]

    def test_random_states(self):
        rng = random.Random(1234)
        for _ in range(500):
            state = random_state(rng)
            for first, second in self.EXCLUSIVE_PAIRS:
                self.assertFalse(
                    first(state) and second(state),
                    f"{first.__name__} and {second.__name__} both hold for {state}"
                )


if __name__ == '__main__':
    unittest.main()
