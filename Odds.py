import math
from dataclasses import dataclass

from Accuracy import Accuracy


@dataclass(frozen=True)
class ConvergenceQuote:
    probability_yes: float
    probability_no: float
    odds_yes: float
    odds_no: float


class ConvergenceEngine:
    # Мінімальна кількість перетинів / дисперсія, щоб не ділити на нуль
    MIN_CROSSINGS = 1e-6
    MIN_SIGMA_PI = 1e-6

    # Межі ймовірності при перерахунку в коефіцієнт
    MIN_PROBABILITY = 0.001
    MAX_PROBABILITY = 0.999
    DEFAULT_ODDS_CAP = 50.0
    # Коефіцієнт для нескінченної/NaN ймовірності
    FALLBACK_ODDS = 1.01

    @staticmethod
    def erf(x):
        """
        Наближення функції помилок (Абрамовіц і Стіган, 7.1.26).
        Максимальна похибка ~1.5e-7. Саме ця формула, а не math.erf:
        коефіцієнти ставок мають рахуватись однаково скрізь.
        """
        if x == 0:
            return 0.0

        sign = -1.0 if x < 0 else 1.0
        ax = abs(x)
        a1 = 0.254829592
        a2 = -0.284496736
        a3 = 1.421413741
        a4 = -1.453152027
        a5 = 1.061405429
        p = 0.3275911

        t = 1.0 / (1.0 + p * ax)
        y = 1.0 - (((((a5 * t + a4) * t) + a3) * t + a2) * t + a1) * t * math.exp(-ax * ax)
        return sign * y

    @staticmethod
    def normal_cdf(x):
        return 0.5 * (1.0 + ConvergenceEngine.erf(x / math.sqrt(2.0)))

    @staticmethod
    def probability_to_odds(probability, house_edge, cap=DEFAULT_ODDS_CAP):
        """
        Перерахунок ймовірності у коефіцієнт виплати з урахуванням переваги казино.
        Справедливий коефіцієнт 1/p; казино забирає частку house_edge від виграшу понад ставку.
        """
        if not math.isfinite(probability):
            return ConvergenceEngine.FALLBACK_ODDS

        bounded = min(ConvergenceEngine.MAX_PROBABILITY, max(ConvergenceEngine.MIN_PROBABILITY, probability))
        inverse_minus_one = (1.0 / bounded) - 1.0
        adjusted = 1.0 + (1.0 - house_edge) * inverse_minus_one
        return min(cap, max(1.0, adjusted))

    @staticmethod
    def _quote_from(probability_yes, house_edge, cap):
        probability_no = max(0.0, min(1.0, 1.0 - probability_yes))
        return ConvergenceQuote(
            probability_yes=probability_yes,
            probability_no=probability_no,
            odds_yes=ConvergenceEngine.probability_to_odds(probability_yes, house_edge, cap),
            odds_no=ConvergenceEngine.probability_to_odds(probability_no, house_edge, cap),
        )

    @staticmethod
    def quote(state, future_trials, target_digits, house_edge, odds_cap=DEFAULT_ODDS_CAP):
        """
        Ймовірність того, що після ще future_trials кидків оцінка π
        матиме щонайменше target_digits правильних знаків.

        Майбутні перетини ~ Binomial(n, q) з q = 2L/(πD), замінюємо нормальним
        розподілом і переносимо похибку на оцінку π через похідну.
        """
        # Нуль кидків: з незбіжного стану зійтись неможливо (свідоме правило)
        if not math.isfinite(future_trials) or future_trials <= 0:
            return ConvergenceEngine._quote_from(0.0, house_edge, odds_cap)

        L = state.needle_length
        D = state.line_spacing
        tol = Accuracy.tolerance(target_digits)
        eps = ConvergenceEngine.MIN_CROSSINGS

        final_trials = state.total_trials + future_trials

        # 1. Теоретична ймовірність перетину для одного кидка
        raw_q = (2.0 * L) / (math.pi * D)
        q = min(1.0 - 1e-6, max(1e-6, raw_q))

        # 2. Біноміальний розподіл майбутніх перетинів -> нормальне наближення
        mean_future = future_trials * q
        var_future = future_trials * q * (1.0 - q)

        # 3. Очікувана кількість перетинів наприкінці горизонту
        mean_crossings = max(state.crossings + mean_future, eps)
        sigma_crossings = math.sqrt(max(var_future, eps))

        # 4. Оцінка π та її розкид: d(pi)/dC = -2·L·N / (D·C²)
        mean_pi = (2.0 * L * final_trials) / (D * mean_crossings)
        derivative = -(2.0 * L * final_trials) / (D * mean_crossings * mean_crossings)
        sigma_pi = max(abs(derivative) * sigma_crossings, ConvergenceEngine.MIN_SIGMA_PI)

        # 5. P(|pi_final - π| < tol) для N(mean_pi, sigma_pi²)
        lower_z = (math.pi - tol - mean_pi) / sigma_pi
        upper_z = (math.pi + tol - mean_pi) / sigma_pi
        p_yes = ConvergenceEngine.normal_cdf(upper_z) - ConvergenceEngine.normal_cdf(lower_z)
        if not math.isfinite(p_yes):
            p_yes = 0.0
        p_yes = max(0.0, min(1.0, p_yes))

        # 6. Коефіцієнти для обох сторін
        return ConvergenceEngine._quote_from(p_yes, house_edge, odds_cap)
