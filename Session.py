"""
Сесія експерименту: зв'язує генератор голок, лічильники, модель
коефіцієнтів і ставку в одному об'єкті без глобального стану.

Порядок одного такту для зовнішнього циклу:
    advance(k)  ->  (перевірка ставки всередині)  ->  малювання

Сесія не має захисту від повторного входу: усі виклики мають
надходити з одного потоку. Якщо вбудовувати її в багатопотоковий
код, усі зміни треба проводити через один спільний lock.
"""
import logging

import numpy as np

from Accuracy import Accuracy
from Estimator import EstimatorState
from Needle import NeedleEngine
from Odds import ConvergenceEngine
from Scheduler import ManualScheduler
from Wager import WagerManager, WagerState

log = logging.getLogger(__name__)


class BuffonSession:
    def __init__(self, config, rng=None, scheduler=None):
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)
        self.scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.estimator = EstimatorState(config.needle_length, config.line_spacing)
        self.wagers = WagerManager(self.estimator, config, self.scheduler)
        # (кількість кидків, оцінка) після кожного пакету, для графіка збіжності
        self.history = []

    # --- Голки і оцінка ---

    def generate_trial(self):
        return NeedleEngine.generate(
            self.config.needle_length, self.config.line_spacing,
            rng=self.rng, field_width=self.config.field_width,
        )

    def record_trial(self, trial):
        self.estimator.record(trial)

    def get_estimate(self):
        return self.estimator.estimate()

    def get_accuracy_rank(self, pi_estimate=None):
        if pi_estimate is None:
            if not self.estimator.has_estimate:
                return 0
            pi_estimate = self.estimator.estimate().pi_estimate
        return Accuracy.rank(pi_estimate)

    def advance(self, k=None):
        """Кидає k голок (за замовчуванням розмір пакету), записує їх і перевіряє ставку."""
        k = self.config.animation_batch_size if k is None else int(k)
        batch = NeedleEngine.kernel(
            k, self.config.needle_length, self.config.line_spacing, rng=self.rng,
            field_width=self.config.field_width, field_height=self.config.field_height,
            vis_limit=self.config.max_visible_needles,
        )
        self.estimator.record_batch(batch.count, batch.crossings)
        if self.estimator.has_estimate:
            self.history.append((self.estimator.total_trials, self.estimator.estimate().pi_estimate))
        log.debug("Пакет %d: перетинів %d, всього N=%d C=%d",
                  batch.count, batch.crossings, self.estimator.total_trials, self.estimator.crossings)

        self.wagers.tick(batch.count)
        return batch

    def reset_estimator(self):
        # Активна ставка прив'язана до старого лічильника кидків
        if self.wagers.state is WagerState.ACTIVE:
            self.wagers.cancel()
        self.estimator.reset()
        self.history = []
        log.info("Оцінку скинуто")

    def configure(self, config):
        """Нова конфігурація; зміна геометрії голки обнуляє оцінку."""
        geometry_changed = (config.needle_length != self.config.needle_length
                            or config.line_spacing != self.config.line_spacing)
        self.config = config
        self.wagers.config = config
        if geometry_changed:
            self.reset_estimator()
            self.estimator.needle_length = config.needle_length
            self.estimator.line_spacing = config.line_spacing

    # --- Ставки ---

    def get_convergence_quote(self, future_trials, target_digits=None, house_edge=None):
        digits = self.config.convergence_target_digits if target_digits is None else target_digits
        edge = self.config.house_edge if house_edge is None else house_edge
        return ConvergenceEngine.quote(self.estimator, future_trials, digits, edge, self.config.odds_cap)

    def place_wager(self, direction, stake, target_trials):
        return self.wagers.place(direction, stake, target_trials)

    def tick_wager(self, trials_advanced):
        return self.wagers.tick(trials_advanced)

    def get_wager_status(self):
        return self.wagers.status()

    def cancel_wager(self):
        return self.wagers.cancel()

    def resolve_wager(self):
        return self.wagers.resolve()

    @property
    def balance(self):
        return self.wagers.balance.amount

    @property
    def games_won(self):
        return self.wagers.games_won
