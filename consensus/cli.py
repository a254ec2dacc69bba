"""consensus.cli

Command line interface entry point for consensus-core.

Design constraints:
- argparse-based.
- Lazy imports: do not import numpy or pydantic at parse time.
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CliContext:
    repo_root: Path


def _repo_root_from_cwd() -> Path:
    return Path.cwd()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="consensus",
        description="Ensemble BIG/SMALL predictor with adaptive weights and a defensive regime.",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit.",
    )

    sub = parser.add_subparsers(dest="command")

    p_replay = sub.add_parser("replay", help="Replay a draw file and print metrics")
    p_replay.add_argument("path", type=Path, help="CSV with issue_number and number columns")
    p_replay.add_argument("--json", action="store_true", help="Also print one JSON line per step.")
    p_replay.add_argument("--seed", type=int, default=None, help="RNG seed for fallbacks and sentiment.")

    p_predict = sub.add_parser("predict", help="Replay a draw file and print the next prediction")
    p_predict.add_argument("path", type=Path, help="CSV with issue_number and number columns")
    p_predict.add_argument("--seed", type=int, default=None, help="RNG seed for fallbacks and sentiment.")

    sub.add_parser("status", help="Print the effective configuration")

    return parser


def _print_version() -> None:
    from consensus import LOGIC_LABEL, __version__

    print(f"consensus-core v{__version__} ({LOGIC_LABEL})")


def _load_config(ctx: CliContext, args: argparse.Namespace):
    from consensus.core.config import Config
    from consensus.core.logging import configure_logging

    cfg = Config.discover(ctx.repo_root)
    seed = getattr(args, "seed", None)
    if seed is not None:
        cfg = cfg.model_copy(update={"seed": int(seed)})
    configure_logging(cfg.logging)
    return cfg


def _replay(ctx: CliContext, args: argparse.Namespace):
    from consensus.backtest.io import load_draws_csv
    from consensus.backtest.replay import run_replay

    cfg = _load_config(ctx, args)
    draws = load_draws_csv(args.path)
    return run_replay(draws, cfg)


def _cmd_replay(ctx: CliContext, args: argparse.Namespace) -> int:
    from consensus.core.exceptions import ConsensusError

    try:
        result = _replay(ctx, args)
    except ConsensusError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.json:
        for step in result.steps:
            print(json.dumps(step.as_dict(), sort_keys=True))

    m = result.metrics
    print("consensus replay")
    print(f"- steps: {m.steps}")
    print(f"- resolved: {m.wins + m.losses} ({m.wins} win / {m.losses} loss)")
    print(f"- accuracy: {m.accuracy:.3f}")
    print(f"- high-confidence: {m.high_confidence} (accuracy {m.high_confidence_accuracy:.3f}, coverage {m.coverage:.3f})")
    print(f"- fallbacks: {m.fallbacks}")
    print(f"- defensive steps: {m.defensive_steps}")
    print(f"- longest losing streak: {m.longest_losing_streak}")
    return 0


def _cmd_predict(ctx: CliContext, args: argparse.Namespace) -> int:
    from consensus.core.exceptions import ConsensusError

    try:
        result = _replay(ctx, args)
    except ConsensusError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if result.pending is None:
        print("error: draw file is empty", file=sys.stderr)
        return 1

    print(json.dumps(result.pending.as_dict(), sort_keys=True))
    return 0


def _cmd_status(ctx: CliContext, args: argparse.Namespace) -> int:
    import yaml

    from consensus import __version__
    from consensus.core.config import Config
    from consensus.core.exceptions import ConfigError

    try:
        cfg = Config.discover(ctx.repo_root)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(f"# consensus-core v{__version__}")
    print(yaml.safe_dump(cfg.model_dump(mode="json"), sort_keys=False), end="")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        _print_version()
        return 0

    if not args.command:
        parser.print_help()
        return 2

    ctx = CliContext(repo_root=_repo_root_from_cwd())

    dispatch: dict[str, Callable[[CliContext, argparse.Namespace], int]] = {
        "replay": _cmd_replay,
        "predict": _cmd_predict,
        "status": _cmd_status,
    }

    fn = dispatch.get(str(args.command))
    if fn is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 2

    return int(fn(ctx, args))


if __name__ == "__main__":
    raise SystemExit(main())
