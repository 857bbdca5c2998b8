"""
Entry point for the falling-blocks game.

Supports two modes:
  - play: Play with keyboard controls in a pygame window.
  - demo: Headless games driven by random commands (no window needed).

Usage:
    python main.py --mode play
    python main.py --mode play --config config/settings.yaml --seed 7
    python main.py --mode demo --games 5
"""

from __future__ import annotations

import argparse
import pathlib
import sys

import yaml

from fallingblocks.game.errors import ConfigurationError


def load_config(config_path: str | pathlib.Path) -> dict:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML config file.

    Returns:
        Dict of configuration key-value pairs (empty for an empty file).

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigurationError: If the file is not valid YAML or does not hold
            a mapping.
    """
    config_path = pathlib.Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with open(config_path, "r") as f:
        try:
            config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Config file is not valid YAML: {config_path}") from e
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {config_path}")
    return config


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Namespace with mode, config, seed, and games attributes.
    """
    parser = argparse.ArgumentParser(
        description="Falling blocks: play in a pygame window or run headless demo games.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--mode",
        type=str,
        choices=["play", "demo"],
        default="play",
        help="Run mode: 'play' (keyboard play), 'demo' (random commands, no window).",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/settings.yaml",
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the piece sequence (default: config 'seed', else random).",
    )
    parser.add_argument(
        "--games",
        type=int,
        default=1,
        help="Number of games to play in 'demo' mode (default: 1).",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point: parse args, load config, and dispatch to the selected mode."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)

        if args.mode == "play":
            from fallingblocks.play import play_manual
            play_manual(config, seed=args.seed)

        elif args.mode == "demo":
            from fallingblocks.play import play_demo
            play_demo(config, games=args.games, seed=args.seed)

        else:
            print(f"Unknown mode: {args.mode}", file=sys.stderr)
            sys.exit(1)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
