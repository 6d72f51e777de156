import math
from dataclasses import dataclass, fields, replace as _replace
from typing import Optional


class ConfigError(ValueError):
    """Некоректне значення параметра симуляції."""


def _finite(name, value, minimum=None, strict=False, maximum=None):
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ConfigError(f"{name}: очікується скінченне число, отримано {value!r}")
    if minimum is not None:
        if strict and value <= minimum:
            raise ConfigError(f"{name} має бути > {minimum}, отримано {value}")
        if not strict and value < minimum:
            raise ConfigError(f"{name} має бути >= {minimum}, отримано {value}")
    if maximum is not None and value >= maximum:
        raise ConfigError(f"{name} має бути < {maximum}, отримано {value}")


def _whole(name, value, minimum, maximum=None):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name}: очікується ціле число, отримано {value!r}")
    if value < minimum or (maximum is not None and value > maximum):
        raise ConfigError(f"{name} поза діапазоном [{minimum}, {maximum}]: {value}")


@dataclass(frozen=True)
class SimulationConfig:
    """
    Параметри експерименту Бюффона і гри на ставки.
    Перевіряються один раз при створенні, далі ядро їм довіряє.
    """
    needle_length: float = 50.0
    line_spacing: float = 100.0
    animation_batch_size: int = 5
    house_edge: float = 0.1
    convergence_target_digits: int = 5
    starting_balance: float = 100.0
    result_display_seconds: float = 5.0
    odds_cap: float = 50.0
    max_visible_needles: int = 400
    field_width: float = 800.0
    field_height: float = 600.0
    seed: Optional[int] = None

    def __post_init__(self):
        _finite("needle_length", self.needle_length, 0, strict=True)
        _finite("line_spacing", self.line_spacing, 0, strict=True)
        _whole("animation_batch_size", self.animation_batch_size, 1)
        _finite("house_edge", self.house_edge, 0, maximum=1)
        _whole("convergence_target_digits", self.convergence_target_digits, 0, 5)
        _finite("starting_balance", self.starting_balance, 0)
        _finite("result_display_seconds", self.result_display_seconds, 0)
        _finite("odds_cap", self.odds_cap, 1)
        _whole("max_visible_needles", self.max_visible_needles, 0)
        _finite("field_width", self.field_width, 0, strict=True)
        _finite("field_height", self.field_height, 0, strict=True)
        if self.seed is not None:
            _whole("seed", self.seed, 0)

    def replace(self, **changes):
        # dataclasses.replace викликає __post_init__, тож копія теж перевірена
        return _replace(self, **changes)

    @classmethod
    def from_strings(cls, values):
        """
        Побудова конфігурації з текстових полів інтерфейсу.
        Порожні рядки пропускаються (лишається значення за замовчуванням).
        """
        known = {f.name for f in fields(cls)}
        parsed = {}
        for name, raw in values.items():
            if name not in known:
                raise ConfigError(f"Невідомий параметр: {name}")
            text = str(raw).strip()
            if not text:
                continue
            try:
                if name in ("animation_batch_size", "convergence_target_digits",
                            "max_visible_needles", "seed"):
                    parsed[name] = int(text)
                else:
                    parsed[name] = float(text)
            except ValueError:
                raise ConfigError(f"{name}: не вдалося розібрати {text!r}") from None
        return cls(**parsed)
