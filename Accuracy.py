import math


class Accuracy:
    MAX_DIGITS = 5

    # (цифри, поріг похибки) від найточнішого до найгрубішого
    THRESHOLDS = (
        (5, 0.000005),
        (4, 0.00005),
        (3, 0.0005),
        (2, 0.005),
        (1, 0.05),
    )

    @staticmethod
    def rank(pi_estimate):
        """
        Кількість правильних знаків після коми (0..5) за величиною похибки |оцінка - π|.
        """
        error = abs(pi_estimate - math.pi)
        if not math.isfinite(error):
            return 0
        for digits, threshold in Accuracy.THRESHOLDS:
            if error < threshold:
                return digits
        return 0

    @staticmethod
    def tolerance(digits):
        """Допустима похибка для d знаків: 5·10^-(d+1); для d <= 0 завжди виконано."""
        if digits <= 0:
            return 1.0
        return 5 * math.pow(10, -(digits + 1))
