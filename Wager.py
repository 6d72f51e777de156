"""
Міні-гра: ставка на те, чи досягне оцінка π потрібної точності
за задану кількість кидків.

Стан однієї ставки: NONE -> ACTIVE -> RESOLVED -> NONE.
Скасування переводить ACTIVE -> NONE з поверненням ставки.
"""
import enum
import math
import numbers
import logging
from dataclasses import dataclass
from typing import Optional

from Accuracy import Accuracy
from Odds import ConvergenceEngine

log = logging.getLogger(__name__)


class Direction(enum.Enum):
    YES = "yes"   # оцінка зійдеться
    NO = "no"     # не зійдеться


class WagerState(enum.Enum):
    NONE = "none"
    ACTIVE = "active"
    RESOLVED = "resolved"


class ErrorKind(enum.Enum):
    INVALID_INPUT = "invalid_input"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    ALREADY_ACTIVE = "already_active"
    NO_ACTIVE_WAGER = "no_active_wager"


class WagerError(Exception):
    kind = None


class InvalidInput(WagerError):
    kind = ErrorKind.INVALID_INPUT


class InsufficientBalance(WagerError):
    kind = ErrorKind.INSUFFICIENT_BALANCE


class AlreadyActive(WagerError):
    kind = ErrorKind.ALREADY_ACTIVE


class NoActiveWager(WagerError):
    kind = ErrorKind.NO_ACTIVE_WAGER


class Balance:
    def __init__(self, amount=0.0):
        if not math.isfinite(amount) or amount < 0:
            raise ValueError(f"Баланс має бути невід'ємним: {amount}")
        self.amount = float(amount)

    def debit(self, value):
        if value > self.amount:
            raise InsufficientBalance(f"Недостатньо коштів: {value:.2f} > {self.amount:.2f}")
        self.amount -= value

    def credit(self, value):
        self.amount += value


@dataclass
class Wager:
    stake: float
    target_trials: int
    direction: Direction
    target_digits: int
    locked_odds: float
    locked_probability: float
    starting_trial_count: int
    has_converged: bool = False
    is_resolved: bool = False

    @property
    def potential_payout(self):
        return self.stake * self.locked_odds


@dataclass(frozen=True)
class WagerStatus:
    progress_percent: float
    trials_elapsed: int
    has_converged: bool
    is_resolved: bool


@dataclass(frozen=True)
class WagerResult:
    won: bool
    payout: float
    stake: float
    final_estimate: float
    final_accuracy_rank: int
    final_trials: int
    win_probability: Optional[float] = None


def _whole_positive(value):
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value) and value > 0 and float(value).is_integer()


class WagerManager:
    """
    Власник єдиної ставки, балансу і лічильника перемог.

    Не потокобезпечний: виклики мають іти з одного потоку
    (у додатку з циклу подій Tk).
    """

    def __init__(self, estimator, config, scheduler):
        self.estimator = estimator
        self.config = config
        self.scheduler = scheduler
        self.balance = Balance(config.starting_balance)
        self.games_won = 0
        self.wager = None
        self.last_result = None
        self._clear_handle = None

    @property
    def state(self):
        if self.wager is None:
            return WagerState.NONE
        return WagerState.RESOLVED if self.wager.is_resolved else WagerState.ACTIVE

    def quote(self, future_trials, target_digits=None):
        digits = self.config.convergence_target_digits if target_digits is None else target_digits
        return ConvergenceEngine.quote(
            self.estimator, future_trials, digits,
            self.config.house_edge, self.config.odds_cap,
        )

    def place(self, direction, stake, target_trials):
        try:
            direction = Direction(direction)
        except ValueError:
            raise InvalidInput(f"Невідомий напрямок ставки: {direction!r}") from None
        if not isinstance(stake, numbers.Real) or isinstance(stake, bool) \
                or not math.isfinite(stake) or stake <= 0:
            log.warning("Ставку відхилено: некоректна сума %r", stake)
            raise InvalidInput(f"Некоректна сума ставки: {stake!r}")
        if not _whole_positive(target_trials):
            log.warning("Ставку відхилено: некоректна кількість кидків %r", target_trials)
            raise InvalidInput(f"Некоректна кількість кидків: {target_trials!r}")
        if stake > self.balance.amount:
            log.warning("Ставку відхилено: %.2f > балансу %.2f", stake, self.balance.amount)
            raise InsufficientBalance(f"Недостатньо коштів: {stake:.2f} > {self.balance.amount:.2f}")
        if self.state is WagerState.ACTIVE:
            log.warning("Ставку відхилено: вже є активна ставка")
            raise AlreadyActive("Вже є активна ставка")

        # Попередня ставка ще показує результат: прибираємо її до нового циклу
        if self.state is WagerState.RESOLVED:
            self._cancel_pending_clear()
            self._clear()

        target_trials = int(target_trials)
        digits = self.config.convergence_target_digits
        q = self.quote(target_trials, digits)
        yes = direction is Direction.YES

        self.balance.debit(float(stake))
        self.wager = Wager(
            stake=float(stake),
            target_trials=target_trials,
            direction=direction,
            target_digits=digits,
            locked_odds=q.odds_yes if yes else q.odds_no,
            locked_probability=q.probability_yes if yes else q.probability_no,
            starting_trial_count=self.estimator.total_trials,
        )
        log.info("Ставка %s: %.2f на %d кидків, коеф. 1:%.2f, шанс %.1f%%",
                 direction.name, stake, target_trials,
                 self.wager.locked_odds, self.wager.locked_probability * 100)
        return self.wager

    def status(self):
        w = self.wager
        if w is None:
            return None
        elapsed = max(0, self.estimator.total_trials - w.starting_trial_count)
        progress = min(100.0, elapsed / w.target_trials * 100.0)
        return WagerStatus(
            progress_percent=progress,
            trials_elapsed=elapsed,
            has_converged=w.has_converged,
            is_resolved=w.is_resolved,
        )

    def check_status(self):
        w = self.wager
        if w is None or w.is_resolved:
            return

        if self.estimator.has_estimate and not w.has_converged:
            accuracy = Accuracy.rank(self.estimator.estimate().pi_estimate)
            if accuracy >= w.target_digits:
                w.has_converged = True
                log.info("Збіжність досягнута: %d знаків", accuracy)

        if self.estimator.total_trials - w.starting_trial_count >= w.target_trials:
            self.resolve()

    def tick(self, trials_advanced):
        if trials_advanced < 0:
            raise ValueError(f"Від'ємна кількість кидків: {trials_advanced}")
        self.check_status()
        return self.status()

    def resolve(self):
        w = self.wager
        if w is None:
            raise NoActiveWager("Немає активної ставки")
        if w.is_resolved:
            return self.last_result

        w.is_resolved = True
        won = (w.direction is Direction.YES) == w.has_converged
        payout = w.potential_payout if won else 0.0
        if won:
            self.balance.credit(payout)
            self.games_won += 1

        est = self.estimator.estimate().pi_estimate
        rank = Accuracy.rank(est) if self.estimator.has_estimate else 0
        self.last_result = WagerResult(
            won=won,
            payout=payout,
            stake=w.stake,
            final_estimate=est,
            final_accuracy_rank=rank,
            final_trials=self.estimator.total_trials,
            win_probability=w.locked_probability,
        )
        log.info("Ставка завершена: %s, виплата %.2f, баланс %.2f",
                 "виграш" if won else "програш", payout, self.balance.amount)

        self._cancel_pending_clear()
        self._clear_handle = self.scheduler.call_later(self.config.result_display_seconds, self._clear)
        return self.last_result

    def cancel(self):
        if self.state is not WagerState.ACTIVE:
            raise NoActiveWager("Немає активної ставки для скасування")
        stake = self.wager.stake
        self.balance.credit(stake)
        self.wager = None
        log.info("Ставку скасовано, повернуто %.2f", stake)
        return stake

    def _cancel_pending_clear(self):
        if self._clear_handle is not None:
            self.scheduler.cancel(self._clear_handle)
            self._clear_handle = None

    def _clear(self):
        # Баланс уже розраховано в resolve(), тут лише прибираємо стан
        self._clear_handle = None
        self.wager = None
        self.last_result = None
