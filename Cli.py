"""Консольний запуск експерименту Бюффона без графічного інтерфейсу.

Приклад
-------
python -m Cli --trials 100000 --seed 7
python -m Cli --trials 5000 --bet no --stake 10 --target 2000 --digits 2
"""
import argparse
import logging
import sys

from Config import ConfigError, SimulationConfig
from Session import BuffonSession
from Wager import WagerError

log = logging.getLogger(__name__)


def _build_parser():
    parser = argparse.ArgumentParser(prog="buffon", description="Голка Бюффона: оцінка π і ставки на збіжність")
    parser.add_argument("--trials", type=int, default=10_000, help="Кількість кидків до ставки (default: 10000)")
    parser.add_argument("--batch-size", type=int, default=1000, help="Розмір пакету (default: 1000)")
    parser.add_argument("--needle-length", type=float, default=50.0, help="Довжина голки L (default: 50)")
    parser.add_argument("--line-spacing", type=float, default=100.0, help="Відстань між лініями D (default: 100)")
    parser.add_argument("--house-edge", type=float, default=0.1, help="Перевага казино (default: 0.1)")
    parser.add_argument("--digits", type=int, default=5, help="Цільова кількість знаків для ставки (default: 5)")
    parser.add_argument("--balance", type=float, default=100.0, help="Початковий баланс (default: 100)")
    parser.add_argument("--seed", type=int, default=None, help="Зерно генератора (optional)")
    parser.add_argument("--bet", choices=["yes", "no"], default=None, help="Зробити ставку після кидків")
    parser.add_argument("--stake", type=float, default=10.0, help="Сума ставки (default: 10)")
    parser.add_argument("--target", type=int, default=1000, help="Кидків до завершення ставки (default: 1000)")
    parser.add_argument("--verbose", action="store_true", help="Детальний лог")
    return parser


def _run(session, n, batch):
    remaining = n
    while remaining > 0:
        size = min(batch, remaining)
        session.advance(size)
        remaining -= size


def _print_estimate(session):
    est = session.get_estimate()
    print(f"Кидків: {session.estimator.total_trials:,}  Перетинів: {session.estimator.crossings:,}")
    print(f"π ≈ {est.pi_estimate:.6f}  похибка {est.error_percent:.2f}%  точність {session.get_accuracy_rank()} зн.")


def main(argv=None):
    args = _build_parser().parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = SimulationConfig(
            needle_length=args.needle_length,
            line_spacing=args.line_spacing,
            animation_batch_size=args.batch_size,
            house_edge=args.house_edge,
            convergence_target_digits=args.digits,
            starting_balance=args.balance,
            seed=args.seed,
        )
    except ConfigError as e:
        print(f"Помилка параметрів: {e}", file=sys.stderr)
        return 2

    session = BuffonSession(config)
    _run(session, max(0, args.trials), config.animation_batch_size)
    _print_estimate(session)

    q = session.get_convergence_quote(args.target)
    print(f"Шанс {config.convergence_target_digits} зн. за {args.target} кидків: "
          f"ТАК {q.probability_yes:.1%} (1:{q.odds_yes:.2f})  НІ {q.probability_no:.1%} (1:{q.odds_no:.2f})")

    if args.bet is None:
        return 0

    try:
        wager = session.place_wager(args.bet, args.stake, args.target)
    except WagerError as e:
        print(f"Ставку відхилено ({e.kind.value}): {e}", file=sys.stderr)
        return 2

    print(f"Ставка {wager.direction.name}: {wager.stake:.2f} за коефіцієнтом 1:{wager.locked_odds:.2f}")
    _run(session, wager.target_trials, config.animation_batch_size)

    result = session.wagers.last_result
    _print_estimate(session)
    verdict = "ВИГРАШ" if result.won else "ПРОГРАШ"
    print(f"{verdict}: виплата {result.payout:.2f}, баланс {session.balance:.2f}, "
          f"шанс був {result.win_probability:.1%}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
