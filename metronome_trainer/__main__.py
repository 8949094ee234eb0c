"""CLI entrypoint for the Metronome Timing Trainer."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from metronome_trainer.aggregator import format_ta
from metronome_trainer.config import (
    ConfigError,
    TrainingSettings,
    default_db_path,
    keyboard_overrides,
    load_config,
    settings_from_mapping,
)
from metronome_trainer.input_mapping import InputMapper
from metronome_trainer.logging_setup import configure_logging
from metronome_trainer.patterns import describe_pattern
from metronome_trainer.persistence import record_session
from metronome_trainer.profile import ProfileError, UserProfile, build_profile
from metronome_trainer.results import session_record_from
from metronome_trainer.simulation import PerformerProfile, SimulatedPerformer, run_simulated_session

LOGGER = logging.getLogger("metronome_trainer")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="metronome-trainer")
    parser.add_argument("--config", help="Path to TOML/JSON config.")
    parser.add_argument("--log-level", default="INFO", help="Logging level.")
    parser.add_argument(
        "--json-logs", action="store_true", help="Emit logs in JSON format."
    )
    parser.add_argument("--db", help="Path to the SQLite history file.")
    parser.add_argument("--age", type=int, help="User age in years (norm tables).")
    parser.add_argument("--name", help="User name for assessment reports.")
    parser.add_argument("--birth-date", help="YYYY-MM-DD; overrides --age.")
    parser.add_argument("--gender", default="other", help="male | female | other")

    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the pygame trainer (default)")

    demo = subparsers.add_parser("demo", help="Run a simulated session headlessly")
    demo.add_argument("--seed", type=int, default=1, help="Performer RNG seed.")
    demo.add_argument("--jitter-ms", type=float, default=25.0, help="Timing noise std-dev.")
    demo.add_argument("--bias-ms", type=float, default=0.0, help="Constant timing offset.")
    demo.add_argument("--miss-rate", type=float, default=0.05, help="Chance to skip a beat.")
    demo.add_argument(
        "--wrong-rate", type=float, default=0.03, help="Chance to press a wrong channel."
    )
    demo.add_argument("--save", action="store_true", help="Record the session in --db.")

    return parser


def _resolve_profile(args: argparse.Namespace) -> UserProfile | None:
    if not args.birth_date:
        return None
    return build_profile(args.name or "Trainee", args.birth_date, args.gender)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(level=args.log_level, json_format=args.json_logs)

    settings = TrainingSettings()
    mapper = InputMapper()
    if args.config:
        try:
            data = load_config(args.config)
            settings = settings_from_mapping(data)
            mapper = InputMapper.with_overrides(keyboard_overrides(data))
        except ConfigError as exc:
            LOGGER.warning("Rejected config %s", args.config)
            parser.error(str(exc))

    try:
        profile = _resolve_profile(args)
    except ProfileError as exc:
        parser.error(str(exc))

    age = profile.age if profile is not None else args.age
    db_path = Path(args.db).expanduser() if args.db else default_db_path()

    if args.command == "demo":
        try:
            performer_profile = PerformerProfile(
                jitter_ms=args.jitter_ms,
                bias_ms=args.bias_ms,
                miss_rate=args.miss_rate,
                wrong_channel_rate=args.wrong_rate,
            )
        except ValueError as exc:
            parser.error(str(exc))
        session = run_simulated_session(
            settings=settings,
            user_age=age if age is not None else 14,
            performer=SimulatedPerformer(seed=args.seed, profile=performer_profile),
        )
        record = session_record_from(session)
        r = record.result
        print(f"{describe_pattern(session.pattern)} @ {settings.bpm} BPM, seed {args.seed}")
        print(f"Task Average: {format_ta(r.task_average)}  Class {r.class_level}")
        print(
            f"Responded {r.responded_beats}/{r.total_beats}  "
            f"Early {r.early_hit_percent:.0f}%  Late {r.late_hit_percent:.0f}%  "
            f"Points {r.average_points:.1f}"
        )
        if args.save:
            record_session(db_path=db_path, record=record, app_version="demo")
        return 0

    if args.command in (None, "run"):
        # pygame is only needed for the interactive shell.
        from metronome_trainer.app import run

        return run(settings=settings, profile=profile, user_age=age, mapper=mapper, db_path=db_path)

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
