import math

import pytest

from Wager import (
    AlreadyActive,
    Direction,
    ErrorKind,
    InsufficientBalance,
    InvalidInput,
    NoActiveWager,
    WagerState,
)


def test_place_rejects_invalid_input(manager):
    with pytest.raises(InvalidInput) as exc:
        manager.place(Direction.YES, 0, 500)
    assert exc.value.kind is ErrorKind.INVALID_INPUT
    for stake, target in [(-5, 500), (math.nan, 500), (10, 0), (10, -3), (10, 2.5), (10, math.inf)]:
        with pytest.raises(InvalidInput):
            manager.place(Direction.YES, stake, target)
    with pytest.raises(InvalidInput):
        manager.place("maybe", 10, 500)
    assert manager.balance.amount == 100.0
    assert manager.state is WagerState.NONE


def test_place_rejects_stake_above_balance(manager):
    with pytest.raises(InsufficientBalance) as exc:
        manager.place(Direction.YES, 150, 500)
    assert exc.value.kind is ErrorKind.INSUFFICIENT_BALANCE
    assert manager.balance.amount == 100.0


def test_place_debits_and_locks_quote(manager, estimator):
    estimator.record_batch(1000, 300)
    quote = manager.quote(500)
    wager = manager.place(Direction.YES, 10, 500)
    assert manager.balance.amount == 90.0
    assert manager.state is WagerState.ACTIVE
    assert wager.starting_trial_count == 1000
    assert wager.locked_odds == quote.odds_yes
    assert wager.locked_probability == quote.probability_yes
    assert wager.target_digits == 2


def test_second_wager_is_rejected_then_cancel_refunds(manager):
    manager.place(Direction.YES, 10, 500)
    with pytest.raises(AlreadyActive) as exc:
        manager.place(Direction.NO, 10, 500)
    assert exc.value.kind is ErrorKind.ALREADY_ACTIVE

    assert manager.cancel() == 10.0
    assert manager.balance.amount == 100.0
    assert manager.state is WagerState.NONE
    assert manager.games_won == 0


def test_cancel_and_resolve_without_wager(manager):
    with pytest.raises(NoActiveWager) as exc:
        manager.cancel()
    assert exc.value.kind is ErrorKind.NO_ACTIVE_WAGER
    with pytest.raises(NoActiveWager):
        manager.resolve()


def test_no_bet_wins_when_estimate_stays_off(manager, estimator):
    estimator.record_batch(1000, 300)
    wager = manager.place(Direction.NO, 10, 500)

    estimator.record_batch(499, 150)
    assert manager.tick(499).is_resolved is False

    estimator.record_batch(1, 0)
    status = manager.tick(1)
    assert status.is_resolved
    assert status.progress_percent == 100.0

    result = manager.last_result
    assert result.won
    assert result.payout == pytest.approx(10 * wager.locked_odds)
    assert result.final_accuracy_rank == 0
    assert result.final_trials == 1500
    assert manager.balance.amount == pytest.approx(90 + 10 * wager.locked_odds)
    assert manager.games_won == 1


def test_yes_bet_loses_without_convergence(manager, estimator):
    estimator.record_batch(1000, 300)
    manager.place(Direction.YES, 10, 100)
    estimator.record_batch(100, 30)
    manager.tick(100)
    assert manager.last_result.won is False
    assert manager.last_result.payout == 0.0
    assert manager.balance.amount == 90.0
    assert manager.games_won == 0


def test_convergence_is_sticky(manager, estimator):
    # 100000 / 31800 = 3.14465 -> похибка 0.003, тобто 2 знаки
    estimator.record_batch(1000, 318)
    wager = manager.place(Direction.YES, 10, 100)
    manager.tick(0)
    assert wager.has_converged

    # Оцінка погіршується, але збіжність лишається зарахованою
    estimator.record_batch(100, 0)
    manager.tick(100)
    assert wager.has_converged
    assert manager.last_result.won
    assert manager.balance.amount == pytest.approx(90 + 10 * wager.locked_odds)


def test_progress_percent(manager, estimator):
    manager.place(Direction.NO, 10, 200)
    estimator.record_batch(50, 16)
    status = manager.tick(50)
    assert status.progress_percent == pytest.approx(25.0)
    assert status.trials_elapsed == 50
    assert not status.is_resolved


def test_resolve_is_settled_once(manager, estimator):
    estimator.record_batch(1000, 300)
    manager.place(Direction.NO, 10, 10)
    first = manager.resolve()
    balance = manager.balance.amount
    assert manager.resolve() is first
    assert manager.balance.amount == balance


def test_result_display_clears_after_delay(manager, estimator, scheduler):
    estimator.record_batch(1000, 300)
    manager.place(Direction.NO, 10, 10)
    estimator.record_batch(10, 3)
    manager.tick(10)
    balance = manager.balance.amount
    assert manager.state is WagerState.RESOLVED
    assert scheduler.pending == 1

    scheduler.advance(4.9)
    assert manager.state is WagerState.RESOLVED
    scheduler.advance(0.2)
    assert manager.state is WagerState.NONE
    assert manager.last_result is None
    assert manager.balance.amount == balance


def test_new_wager_cancels_pending_clear(manager, estimator, scheduler):
    estimator.record_batch(1000, 300)
    manager.place(Direction.NO, 10, 10)
    manager.resolve()

    # Новий цикл під час показу результату
    wager = manager.place(Direction.NO, 5, 1000)
    assert scheduler.pending == 0
    scheduler.advance(60)
    assert manager.wager is wager
    assert manager.state is WagerState.ACTIVE


def test_tick_rejects_negative(manager):
    with pytest.raises(ValueError):
        manager.tick(-1)


def test_status_without_wager_is_none(manager):
    assert manager.status() is None
    assert manager.tick(5) is None
