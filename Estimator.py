import math
import logging
from dataclasses import dataclass

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Estimate:
    pi_estimate: float
    error_percent: float


@dataclass
class EstimatorState:
    """
    Лічильники експерименту: кількість кидків N і перетинів C.
    Оцінка π = 2·L·N / (D·C) обчислюється на льоту і ніде не зберігається.
    """
    needle_length: float
    line_spacing: float
    total_trials: int = 0
    crossings: int = 0

    def record(self, trial):
        self.total_trials += 1
        if trial.crossed:
            self.crossings += 1

    def record_batch(self, count, crossings):
        """Додає пакет із count кидків, з яких crossings перетнули лінію."""
        if count < 0 or crossings < 0:
            raise ValueError(f"Від'ємний пакет: count={count}, crossings={crossings}")
        if crossings > count:
            raise ValueError(f"Перетинів більше, ніж кидків: {crossings} > {count}")
        self.total_trials += int(count)
        self.crossings += int(crossings)

    @property
    def has_estimate(self):
        return self.crossings > 0

    def estimate(self):
        # Без жодного перетину оцінки немає: повертаємо нулі, як і на екрані
        if not self.has_estimate:
            return Estimate(pi_estimate=0.0, error_percent=0.0)

        pi_est = (2.0 * self.needle_length * self.total_trials) / (self.line_spacing * self.crossings)
        error = abs(pi_est - math.pi) / math.pi * 100.0
        return Estimate(pi_estimate=pi_est, error_percent=error)

    def reset(self):
        log.debug("Скидання лічильників: N=%d, C=%d", self.total_trials, self.crossings)
        self.total_trials = 0
        self.crossings = 0
