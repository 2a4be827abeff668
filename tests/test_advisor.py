"""Tests for the advisor session and background worker."""

import logging
import threading

import pytest

from equibot.advisor import ActionThrottle, Advisor, AdvisorConfig, EquityWorker, describe_hand
from equibot.errors import EstimateCancelled
from equibot.game.cards import parse_cards
from equibot.game.equity import EquityConfig
from equibot.strategy.models import ActionKind, AvailableAction, EquityReport, GameObservation


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def advisor(clock):
    config = AdvisorConfig(equity=EquityConfig(random_trials=400))
    return Advisor(config, seed=17, clock=clock)


def observation(hole="", board="", actions=(), pot=0):
    return GameObservation(
        hole_cards=[str(c) for c in parse_cards(hole)],
        board_cards=[str(c) for c in parse_cards(board)],
        pot_size=pot,
        total_pot=pot,
        available_actions=[
            AvailableAction(ActionKind.from_string(k), int(a or 0))
            for k, _, a in (s.partition(":") for s in actions)
        ],
    )


class TestDescribeHand:
    def test_preflop(self):
        assert describe_hand(parse_cards("AsKs"), []) == "AKs"

    def test_postflop(self):
        assert describe_hand(parse_cards("AsKs"), parse_cards("Ah 7c 2d")) == "Pair of Aces"

    def test_no_cards(self):
        assert describe_hand([], []) == "Waiting for hole cards"


class TestReport:
    def test_estimate(self, advisor):
        report = advisor.report(observation("AsAh", "Ad 7c 2s"))

        assert report.available
        assert report.equity > 0.8
        assert report.trials_run == 400
        assert report.hand_description == "Three of a Kind, Aces"

    def test_river_exact(self, advisor):
        config = AdvisorConfig(equity=EquityConfig(random_trials=1000))
        report = Advisor(config, seed=1).report(observation("AsAh", "Ad Ac Kh 7c 2d"))

        assert report.exact
        assert report.equity == 1.0

    def test_missing_hole_cards(self, advisor, caplog):
        with caplog.at_level(logging.INFO, logger="equibot.advisor.session"):
            report = advisor.report(observation("As", "Kd 7c 2s"))

        assert report.equity is None
        assert report.hand_description == "No estimate available"
        assert any(r.levelno == logging.INFO for r in caplog.records)

    def test_invalid_card_code(self, advisor, caplog):
        obs = GameObservation(hole_cards=["As", "Xx"])
        with caplog.at_level(logging.WARNING, logger="equibot.advisor.session"):
            report = advisor.report(obs)

        assert report.equity is None
        assert "Invalid observation" in caplog.text

    def test_board_too_long(self, advisor):
        report = advisor.report(observation("AsKs", "2c 3c 4c 5c 6c 7c"))
        assert report.equity is None

    def test_duplicate_card_is_contained(self, advisor, caplog):
        obs = GameObservation(hole_cards=["As", "Kd"], board_cards=["As", "7c", "2s"])
        with caplog.at_level(logging.ERROR, logger="equibot.advisor.session"):
            report = advisor.report(obs)

        assert report.equity is None
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert errors
        assert "hole=[As Kd]" in errors[0].getMessage()
        assert "board=[As 7c 2s]" in errors[0].getMessage()
        assert errors[0].exc_info is not None

    def test_disabled(self, clock):
        advisor = Advisor(AdvisorConfig(enabled=False), clock=clock)
        report = advisor.report(observation("AsKs"))
        assert report.equity is None
        assert "disabled" in report.hand_description

    def test_specific_opponent(self, clock):
        advisor = Advisor(opponent="KhKd", seed=3, clock=clock)
        report = advisor.report(observation("AsAh", "Ks 7d 2c 9h 3s"))
        assert report.equity == 0.0


class TestAdvise:
    def test_strong_hand_bets(self, advisor):
        report, decision = advisor.advise(
            observation("AsAh", "Ad 7c 2s", ["check", "bet", "fold"], pot=100)
        )
        assert report.available
        assert decision.kind == ActionKind.BET

    def test_cooldown_waits(self, advisor, clock):
        obs = observation("AsAh", "Ad 7c 2s", ["check", "bet", "fold"], pot=100)
        _, first = advisor.advise(obs)
        _, second = advisor.advise(obs)

        assert first.kind == ActionKind.BET
        assert second.kind == ActionKind.WAIT
        assert "Cooling down" in second.rationale

        clock.now += 2.5
        _, third = advisor.advise(obs)
        assert third.kind == ActionKind.BET

    def test_auto_play_disabled(self, clock):
        advisor = Advisor(AdvisorConfig(auto_play=False), clock=clock)
        report = EquityReport(equity=0.9)
        decision = advisor.decide(observation("AsAh", "", ["check", "bet"]), report)
        assert decision.kind == ActionKind.WAIT

    def test_no_actions_waits(self, advisor):
        decision = advisor.decide(observation("AsAh"), EquityReport(equity=0.9))
        assert decision.kind == ActionKind.WAIT
        assert advisor.throttle.ready()

    def test_no_estimate_checks(self, advisor):
        report, decision = advisor.advise(observation("As", "", ["check", "fold"]))
        assert report.equity is None
        assert decision.kind == ActionKind.CHECK

    def test_uses_total_pot_for_odds(self, advisor):
        obs = observation("AsAh", "", ["fold", "call:500"], pot=100)
        decision = advisor.decide(obs, EquityReport(equity=0.55))
        assert decision.kind == ActionKind.FOLD


class TestActionThrottle:
    def test_ready_initially(self, clock):
        throttle = ActionThrottle(2.0, clock)
        assert throttle.ready()
        assert throttle.remaining() == 0.0

    def test_cooldown(self, clock):
        throttle = ActionThrottle(2.0, clock)
        throttle.commit()
        clock.now += 0.5
        assert not throttle.ready()
        assert throttle.remaining() == pytest.approx(1.5)
        clock.now += 1.5
        assert throttle.ready()

    def test_reset(self, clock):
        throttle = ActionThrottle(2.0, clock)
        throttle.commit()
        throttle.reset()
        assert throttle.ready()


class TestEquityWorker:
    def test_stale_estimate_cancelled(self):
        started = threading.Event()
        stale = observation("AsKs")
        fresh = observation("AsKs", "Qs Js 2d")

        def compute(obs, cancel):
            if obs.key == stale.key:
                started.set()
                assert cancel.wait(5)
                raise EstimateCancelled("superseded")
            return EquityReport(equity=0.5, trials_run=1)

        with EquityWorker(compute) as worker:
            first = worker.submit(stale)
            assert started.wait(5)
            # Same cards while in flight: same computation
            assert worker.submit(stale) is first

            second = worker.submit(fresh)
            assert second.result(timeout=5).equity == 0.5
            with pytest.raises(EstimateCancelled):
                first.result(timeout=5)

            assert worker.latest(fresh.key).equity == 0.5
            assert worker.latest(stale.key) is None
            # Finished result is reused only for identical cards
            assert worker.submit(fresh) is second

    def test_failed_estimate_is_retried(self):
        calls = []

        def compute(obs, cancel):
            calls.append(obs.key)
            if len(calls) == 1:
                raise EstimateCancelled("first attempt")
            return EquityReport(equity=0.25)

        obs = observation("7c7d")
        with EquityWorker(compute) as worker:
            first = worker.submit(obs)
            with pytest.raises(EstimateCancelled):
                first.result(timeout=5)
            second = worker.submit(obs)
            assert second is not first
            assert second.result(timeout=5).equity == 0.25

    def test_advisor_submit(self, advisor):
        obs = observation("AsAh", "Ad 7c 2s")
        try:
            report = advisor.submit(obs).result(timeout=60)
            assert report.available
            assert advisor.latest(obs) == report
            assert advisor.latest(observation("AsAh", "Ad 7c 3s")) is None
        finally:
            advisor.close()


class TestSeededAdvisor:
    def test_background_estimate_keeps_report_reproducible(self):
        config = AdvisorConfig(equity=EquityConfig(random_trials=300))
        obs = observation("Jh Td", "9c 8s 2d")
        other = observation("7c 7d", "Ah Kc 4s")

        alone = Advisor(config, seed=5).report(obs)

        with Advisor(config, seed=5) as busy:
            pending = busy.submit(other)
            overlapped = busy.report(obs)
            assert pending.result(timeout=60).available

        assert overlapped == alone

    def test_background_stream_is_seeded(self):
        config = AdvisorConfig(equity=EquityConfig(random_trials=300))
        obs = observation("Jh Td", "9c 8s 2d")

        with Advisor(config, seed=5) as a, Advisor(config, seed=5) as b:
            assert a.submit(obs).result(timeout=60) == b.submit(obs).result(timeout=60)
