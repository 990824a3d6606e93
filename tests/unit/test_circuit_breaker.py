"""Tests for the circuit breaker."""

import threading

from docuseal_cli.utils.http.circuit_breaker import (
    FAILURE_THRESHOLD,
    RESET_TIMEOUT,
    CircuitBreaker,
    CircuitBreakerState,
)


class TestCircuitBreaker:
    """Threshold, cooldown and reset behaviour."""

    def test_defaults(self):
        breaker = CircuitBreaker()
        assert breaker.failure_threshold == FAILURE_THRESHOLD == 5
        assert breaker.reset_timeout == RESET_TIMEOUT == 30.0
        assert breaker.state == CircuitBreakerState.CLOSED
        assert not breaker.is_open()

    def test_opens_at_threshold(self, fake_clock):
        breaker = CircuitBreaker(clock=fake_clock)
        for _ in range(4):
            breaker.record_failure()
            assert not breaker.is_open()
        breaker.record_failure()
        assert breaker.is_open()
        assert breaker.state == CircuitBreakerState.OPEN

    def test_stays_open_during_cooldown(self, fake_clock):
        breaker = CircuitBreaker(clock=fake_clock)
        for _ in range(5):
            breaker.record_failure()
        fake_clock.advance(29.9)
        assert breaker.is_open()
        assert breaker.failure_count == 5

    def test_full_reset_after_cooldown(self, fake_clock):
        breaker = CircuitBreaker(clock=fake_clock)
        for _ in range(5):
            breaker.record_failure()
        fake_clock.advance(30.1)
        assert not breaker.is_open()
        assert breaker.failure_count == 0
        # A single new failure does not reopen it
        breaker.record_failure()
        assert not breaker.is_open()

    def test_cooldown_measured_from_last_failure(self, fake_clock):
        breaker = CircuitBreaker(clock=fake_clock)
        for _ in range(5):
            breaker.record_failure()
        fake_clock.advance(20)
        breaker.record_failure()
        fake_clock.advance(20)
        assert breaker.is_open()

    def test_success_resets_counter(self, fake_clock):
        breaker = CircuitBreaker(clock=fake_clock)
        for _ in range(3):
            breaker.record_failure()
        breaker.record_success()
        assert breaker.failure_count == 0

    def test_success_resets_open_circuit(self, fake_clock):
        breaker = CircuitBreaker(clock=fake_clock)
        for _ in range(5):
            breaker.record_failure()
        breaker.record_success()
        assert not breaker.is_open()

    def test_state_does_not_reset(self, fake_clock):
        breaker = CircuitBreaker(clock=fake_clock)
        for _ in range(5):
            breaker.record_failure()
        fake_clock.advance(31)
        assert breaker.state == CircuitBreakerState.CLOSED
        assert breaker.failure_count == 5

    def test_independent_instances(self, fake_clock):
        first = CircuitBreaker(clock=fake_clock)
        second = CircuitBreaker(clock=fake_clock)
        for _ in range(5):
            first.record_failure()
        assert first.is_open()
        assert not second.is_open()

    def test_concurrent_failures_are_all_counted(self):
        breaker = CircuitBreaker(failure_threshold=10_000)

        def fail_many():
            for _ in range(500):
                breaker.record_failure()

        threads = [threading.Thread(target=fail_many) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert breaker.failure_count == 4000
