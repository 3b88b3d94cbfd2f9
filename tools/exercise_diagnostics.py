"""Price a Bermudan schedule with both methods and report where paths exercise.

Prints the primal (regression) lower bound, the dual upper bound with its
calibrated lambda, and the distribution of realized exercise dates. With --plot
a histogram of exercise dates and the exercise region (spot at exercise) is saved.

Example:
  python tools/exercise_diagnostics.py --model heston --dates "0.25,0.5,0.75,1.0" --K 100 --put --plot
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

import numpy as np

_REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

from bermudan_options import BermudanConfig, BermudanOption, ExerciseMethod
from bermudan_options.models import BlackScholesMonteCarloModel, HestonMonteCarloModel


def parse_dates(s: str) -> list[float]:
    return [float(p) for p in s.split(",") if p.strip()]


def make_model(name: str, args: argparse.Namespace, dates: list[float]):
    n = name.strip().lower()
    if n in ("gbm", "bs", "black-scholes"):
        return BlackScholesMonteCarloModel(
            args.S0, args.r, args.vol, times=dates, n_paths=args.paths, seed=args.seed, antithetic=args.paths % 2 == 0
        )
    if n == "heston":
        v0 = args.vol * args.vol
        return HestonMonteCarloModel(
            args.S0, v0, args.r, args.kappa, v0, args.xi, args.rho, times=dates, n_paths=args.paths, seed=args.seed
        )
    raise SystemExit(f"Unknown model: {name}")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--model", type=str, default="gbm")
    parser.add_argument("--dates", type=str, default="0.25,0.5,0.75,1.0")
    parser.add_argument("--K", type=float, default=100.0)
    parser.add_argument("--put", action="store_true", help="use notional -1 (pays K - S)")
    parser.add_argument("--S0", type=float, default=100.0)
    parser.add_argument("--r", type=float, default=0.05)
    parser.add_argument("--vol", type=float, default=0.25)
    parser.add_argument("--kappa", type=float, default=2.0)
    parser.add_argument("--xi", type=float, default=0.4)
    parser.add_argument("--rho", type=float, default=-0.6)
    parser.add_argument("--paths", type=int, default=20_000)
    parser.add_argument("--seed", type=int, default=2025)
    parser.add_argument("--order", type=int, default=4)
    parser.add_argument("--basis", type=str, default="polynomial")
    parser.add_argument("--intrinsic", action="store_true")
    parser.add_argument("--plot", action="store_true")
    parser.add_argument("--out", type=str, default="figs/exercise_diagnostics.png")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    dates = parse_dates(args.dates)
    model = make_model(args.model, args, dates)
    config = BermudanConfig(regression_order=args.order, basis=args.basis, intrinsic_value_as_basis=args.intrinsic)
    notional = -1.0 if args.put else 1.0
    notionals = [notional] * len(dates)
    strikes = [args.K] * len(dates)

    primal = BermudanOption(dates, notionals, strikes, config=config)
    dual = BermudanOption(dates, notionals, strikes, ExerciseMethod.UPPER_BOUND_METHOD, config=config)

    lower = primal.valuation(0.0, model)
    upper = dual.valuation(0.0, model)
    print(f"lower bound (regression): {lower.average:.6f} +/- {lower.value.standard_error():.6f}")
    print(f"upper bound (dual):       {upper.average:.6f}  lambda*={upper.lam:.6f}")
    print(f"duality gap:              {upper.average - lower.average:.6f}")

    sentinel = primal.schedule.never_exercised_time
    ex = lower.exercise_time.realizations()
    edges = np.append(np.asarray(dates), [sentinel, sentinel + 1.0]) - 1e-9
    counts, _ = lower.exercise_time.histogram(bins=edges)
    for t, c in zip(list(dates) + ["never"], counts):
        print(f"  exercised at {t}: {int(c)} paths ({c / ex.size:.2%})")

    if not args.plot:
        return

    try:
        import matplotlib.pyplot as plt
    except ImportError as e:
        raise SystemExit(f"--plot requires matplotlib: {e}")

    fig, axes = plt.subplots(1, 2, figsize=(12, 4.5))
    labels = [f"{t:g}" for t in dates] + ["never"]
    axes[0].bar(labels, counts)
    axes[0].set_xlabel("exercise date")
    axes[0].set_ylabel("paths")
    axes[0].grid(True, ls="--", lw=0.5, alpha=0.7)

    for t in dates:
        spot = model.get_asset_value(t).realizations()
        hit = ex == t
        axes[1].scatter(np.full(int(hit.sum()), t), spot[hit], s=2, alpha=0.3)
    axes[1].axhline(args.K, color="k", lw=0.8, alpha=0.5)
    axes[1].set_xlabel("t")
    axes[1].set_ylabel("spot at exercise")
    axes[1].grid(True, ls="--", lw=0.5, alpha=0.7)

    fig.suptitle(f"{args.model} Bermudan {'put' if args.put else 'call'} K={args.K:g}: "
                 f"[{lower.average:.4f}, {upper.average:.4f}]")
    plt.tight_layout()
    os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
    plt.savefig(args.out, dpi=160)
    plt.close(fig)
    print(f"Wrote {args.out}")


if __name__ == "__main__":
    main()
