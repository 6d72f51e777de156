import math

import pytest

from Estimator import EstimatorState
from Odds import ConvergenceEngine, ConvergenceQuote


def _state(n=0, c=0, L=50.0, D=100.0):
    st = EstimatorState(needle_length=L, line_spacing=D)
    st.record_batch(n, c)
    return st


def test_erf_matches_reference_within_documented_error():
    for i in range(-400, 401):
        x = i / 100.0
        assert abs(ConvergenceEngine.erf(x) - math.erf(x)) < 2e-7


def test_erf_is_odd_and_zero_at_origin():
    assert ConvergenceEngine.erf(0) == 0.0
    assert ConvergenceEngine.erf(-0.7) == -ConvergenceEngine.erf(0.7)


def test_normal_cdf_basics():
    assert ConvergenceEngine.normal_cdf(0.0) == 0.5
    assert ConvergenceEngine.normal_cdf(1.96) == pytest.approx(0.975, abs=1e-4)
    assert ConvergenceEngine.normal_cdf(-math.inf) == 0.0
    assert ConvergenceEngine.normal_cdf(math.inf) == 1.0


def test_probability_to_odds_applies_house_edge():
    odds = ConvergenceEngine.probability_to_odds(0.5, 0.1)
    assert odds == pytest.approx(1.9)
    assert odds < 2.0
    assert ConvergenceEngine.probability_to_odds(0.5, 0.0) == pytest.approx(2.0)


def test_probability_to_odds_is_non_increasing():
    ps = [i / 1000.0 for i in range(0, 1001)]
    odds = [ConvergenceEngine.probability_to_odds(p, 0.1) for p in ps]
    assert all(a >= b for a, b in zip(odds, odds[1:]))


def test_probability_to_odds_bounds():
    assert ConvergenceEngine.probability_to_odds(0.0, 0.1) == 50.0
    assert ConvergenceEngine.probability_to_odds(1.0, 0.1) >= 1.0
    assert ConvergenceEngine.probability_to_odds(0.0, 0.1, cap=10.0) == 10.0
    assert ConvergenceEngine.probability_to_odds(math.nan, 0.1) == 1.01


def test_house_keeps_non_negative_edge():
    for i in range(1, 1000):
        p = i / 1000.0
        assert p * ConvergenceEngine.probability_to_odds(p, 0.1) <= 1.0 + 1e-12


def test_zero_future_trials_is_certain_no():
    st = _state(1000, 318)
    for future in (0, -5, math.nan):
        q = ConvergenceEngine.quote(st, future, 2, 0.1)
        assert q.probability_yes == 0.0
        assert q.probability_no == 1.0
        assert q.odds_yes == 50.0
        assert 1.0 <= q.odds_no < 1.01


@pytest.mark.parametrize("n, c, future, digits", [
    (0, 0, 1, 5),
    (0, 0, 1_000_000, 1),
    (1000, 300, 500, 2),
    (1000, 0, 1, 3),
    (10_000, 3183, 50_000, 4),
    (0, 0, 1e300, 2),
    (5, 5, 10, 0),
])
def test_quote_is_finite_and_complementary(n, c, future, digits):
    q = ConvergenceEngine.quote(_state(n, c), future, digits, 0.1)
    assert isinstance(q, ConvergenceQuote)
    for v in (q.probability_yes, q.probability_no, q.odds_yes, q.odds_no):
        assert math.isfinite(v)
    assert 0.0 <= q.probability_yes <= 1.0
    assert q.probability_yes + q.probability_no == pytest.approx(1.0, abs=1e-9)
    assert 1.0 <= q.odds_yes <= 50.0
    assert 1.0 <= q.odds_no <= 50.0


def test_long_horizon_from_fresh_state():
    st = _state()
    easy = ConvergenceEngine.quote(st, 1_000_000, 1, 0.1)
    hard = ConvergenceEngine.quote(st, 1_000_000, 5, 0.1)
    assert easy.probability_yes > 0.99
    assert hard.probability_yes < 0.01
    assert hard.odds_yes > easy.odds_yes


def test_biased_state_with_short_horizon_is_unlikely():
    q = ConvergenceEngine.quote(_state(1000, 300), 10, 2, 0.1)
    assert q.probability_yes < 1e-6


def test_quote_is_deterministic():
    st = _state(2500, 800)
    assert ConvergenceEngine.quote(st, 1000, 3, 0.1) == ConvergenceEngine.quote(st, 1000, 3, 0.1)
