#!/usr/bin/env python3
"""
Cymatics - Chladni plate and wave interference visualizer

Sand particles settle on the nodal lines of a vibrating plate while a tone
follows the plate frequencies.
"""

import argparse
import cProfile
import sys
from pathlib import Path

from config import Config, FieldMode, clamp_value
from config_persistence import load_config, save_config
from logging_utils import log_event, set_log_level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the Cymatics visualizer")
    parser.add_argument("--config", type=Path, default=None,
                        help="Path to a config.json (default: ~/.cymatics/config.json)")
    parser.add_argument("--log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Override the configured log level")
    parser.add_argument("--mode", choices=[m.value for m in FieldMode], default=None,
                        help="Initial field mode")
    parser.add_argument("--particles", type=int, default=None,
                        help="Initial particle count (1000-30000)")
    parser.add_argument("--no-audio", action="store_true", help="Start with sound off")
    parser.add_argument("--no-auto", action="store_true", help="Start with auto mode off")
    parser.add_argument("--show-field", action="store_true", help="Start with the force overlay on")
    parser.add_argument("--write-default-config", action="store_true",
                        help="Write a default config file to --config (or the default path) and exit")
    parser.add_argument(
        "--profile",
        action="store_true",
        help="Enable cProfile and save stats to --profile-out",
    )
    parser.add_argument(
        "--profile-out",
        default="profile.prof",
        help="Path to save cProfile stats (default: profile.prof)",
    )
    return parser


def apply_cli_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Fold command line flags into the startup config (never persisted)."""
    if args.log_level:
        config.log_level = args.log_level
    if args.mode:
        config.params.mode = FieldMode(args.mode)
    if args.particles is not None:
        config.params.particle_count = clamp_value('particle_count', args.particles)
    if args.no_audio:
        config.flags.audio_enabled = False
    if args.no_auto:
        config.flags.auto_mode = False
    if args.show_field:
        config.flags.show_field = True
    return config


def run_app(config: Config, app_argv: list[str]) -> int:
    # Import Qt only when a window is actually needed
    from PyQt6.QtWidgets import QApplication

    app = QApplication(app_argv)
    app.setStyle("Fusion")

    from main import CymaticsWindow

    window = CymaticsWindow(config)
    window.show()
    log_event("INFO", "Startup", "Initialization complete, starting GUI")
    return app.exec()


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if args.write_default_config:
        ok = save_config(Config(), args.config)
        sys.exit(0 if ok else 1)

    config = apply_cli_overrides(load_config(args.config), args)
    set_log_level(config.log_level)

    # Keep Qt argument list clean; avoid passing our flags downstream
    app_argv = [sys.argv[0]]

    if args.profile:
        profiler = cProfile.Profile()
        profiler.enable()
        exit_code = run_app(config, app_argv)
        profiler.disable()
        profiler.dump_stats(args.profile_out)
    else:
        exit_code = run_app(config, app_argv)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
