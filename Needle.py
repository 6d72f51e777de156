import math
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Trial:
    """Один кидок голки: кут орієнтації в [0, π) і чи перетнула вона лінію."""
    orientation_angle: float
    crossed: bool


@dataclass(frozen=True)
class NeedleBatch:
    """
    Результат пакетного кидання.
    count / crossings йдуть у статистику, масиви лише для малювання
    (не більше vis_limit голок).
    """
    count: int
    crossings: int
    x: np.ndarray
    y: np.ndarray
    angle: np.ndarray
    crossed: np.ndarray


class NeedleEngine:
    @staticmethod
    def crosses(x, angle, needle_length, line_spacing):
        """
        Перевірка перетину для вертикальних ліній з кроком D.
        Працює і для скалярів, і для масивів numpy.
        """
        # Відстань від центру голки до найближчої лінії
        mod = np.mod(x, line_spacing)
        distance = np.minimum(mod, line_spacing - mod)

        # Проєкція половини голки на вісь, перпендикулярну до ліній
        projection = (needle_length / 2.0) * np.abs(np.sin(angle))
        return projection >= distance

    @staticmethod
    def generate(needle_length, line_spacing, rng=None, field_width=None):
        """Кидає одну голку і повертає Trial."""
        rng = rng if rng is not None else np.random.default_rng()
        width = field_width if field_width is not None else line_spacing

        x = rng.uniform(0.0, width)
        angle = rng.uniform(0.0, math.pi)
        crossed = bool(NeedleEngine.crosses(x, angle, needle_length, line_spacing))
        return Trial(orientation_angle=float(angle), crossed=crossed)

    @staticmethod
    def kernel(n, needle_length, line_spacing, rng=None,
               field_width=None, field_height=None, vis_limit=400):
        """
        Ядро обчислень для голки Бюффона.
        Генерує n центрів і кутів, рахує, скільки голок перетнули лінії.
        """
        rng = rng if rng is not None else np.random.default_rng()
        width = field_width if field_width is not None else line_spacing
        height = field_height if field_height is not None else line_spacing

        # Генеруємо n випадкових голок
        x = rng.uniform(0.0, width, n)
        y = rng.uniform(0.0, height, n)
        angle = rng.uniform(0.0, math.pi, n)

        crossed = NeedleEngine.crosses(x, angle, needle_length, line_spacing)
        count = int(np.count_nonzero(crossed))

        # Для візуалізації беремо лише останні голки пакету
        limit = max(0, min(n, vis_limit))
        start = n - limit
        return NeedleBatch(
            count=int(n),
            crossings=count,
            x=x[start:],
            y=y[start:],
            angle=angle[start:],
            crossed=crossed[start:],
        )

    @staticmethod
    def endpoints(batch, needle_length):
        """Кінці відрізків (x1, y1, x2, y2) для малювання пакету."""
        half = needle_length / 2.0
        dx = half * np.cos(batch.angle)
        dy = half * np.sin(batch.angle)
        return batch.x - dx, batch.y - dy, batch.x + dx, batch.y + dy
