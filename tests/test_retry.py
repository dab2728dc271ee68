import sys
import os
import unittest

# Add the source directory to sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from chatbridge import BackendAPIError, MaxRetriesError, RetryPolicy, MAX_RETRIES


def api_error(status, retry_after=None):
    return BackendAPIError("boom", status_code=status, retry_after=retry_after)


class TestRetryPolicy(unittest.TestCase):
    """
    Unit tests for retry classification and backoff.
    """

    def setUp(self):
        self.policy = RetryPolicy()

    def test_default_budget(self):
        self.assertEqual(MAX_RETRIES, 8)
        self.assertEqual(self.policy.max_retries, 8)

    def test_rate_limit_exponential_backoff(self):
        """Verify 429 without Retry-After backs off 1000 ms * 2^attempt."""
        decision = self.policy.decide(0, api_error(429))
        self.assertTrue(decision.retry)
        self.assertEqual(decision.delay_ms, 1000)
        self.assertIsNone(decision.fatal_error)

        decision = self.policy.decide(3, api_error(429))
        self.assertTrue(decision.retry)
        self.assertEqual(decision.delay_ms, 8000)

    def test_rate_limit_has_no_attempt_cap(self):
        decision = self.policy.decide(MAX_RETRIES + 2, api_error(429))
        self.assertTrue(decision.retry)
        self.assertIsNone(decision.fatal_error)

    def test_rate_limit_honours_retry_after(self):
        """Verify a numeric Retry-After is used verbatim, converted to ms."""
        decision = self.policy.decide(5, api_error(429, retry_after="2"))
        self.assertTrue(decision.retry)
        self.assertEqual(decision.delay_ms, 2000)

        decision = self.policy.decide(0, api_error(429, retry_after="0.5"))
        self.assertEqual(decision.delay_ms, 500)

    def test_unparseable_retry_after_falls_back_to_backoff(self):
        decision = self.policy.decide(
            1, api_error(429, retry_after="Wed, 21 Oct 2015 07:28:00 GMT")
        )
        self.assertTrue(decision.retry)
        self.assertEqual(decision.delay_ms, 2000)

        decision = self.policy.decide(1, api_error(429, retry_after="-3"))
        self.assertEqual(decision.delay_ms, 2000)

    def test_server_error_retries_within_budget(self):
        decision = self.policy.decide(0, api_error(503))
        self.assertTrue(decision.retry)
        self.assertEqual(decision.delay_ms, 1000)

        decision = self.policy.decide(MAX_RETRIES - 2, api_error(500))
        self.assertTrue(decision.retry)
        self.assertEqual(decision.delay_ms, 1000 * 2 ** (MAX_RETRIES - 2))

    def test_server_error_fatal_when_exhausted(self):
        """Verify a 500 on the last attempt yields a fatal max-retries error."""
        original = api_error(500)
        decision = self.policy.decide(MAX_RETRIES - 1, original)
        self.assertFalse(decision.retry)
        self.assertIsInstance(decision.fatal_error, MaxRetriesError)
        self.assertIn("max retries reached", str(decision.fatal_error))
        self.assertIs(decision.fatal_error.__cause__, original)

    def test_client_errors_are_not_retried(self):
        for status in (400, 401, 403, 404, 422):
            decision = self.policy.decide(0, api_error(status))
            self.assertFalse(decision.retry)
            self.assertIsNone(decision.fatal_error)

    def test_unrecognized_errors_are_not_retried(self):
        decision = self.policy.decide(0, ConnectionResetError("reset"))
        self.assertFalse(decision.retry)
        self.assertIsNone(decision.fatal_error)

    def test_invalid_budget(self):
        with self.assertRaises(ValueError):
            RetryPolicy(max_retries=0)


if __name__ == "__main__":
    unittest.main()
