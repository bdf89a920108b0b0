"""
Command-line interface for snapfit.

Provides an interactive text mode for playing levels plus level management
commands: listing built-in levels, writing a level file, validating one and
rendering a level's start state.
"""

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from snapfit.core.base import Action, GamePhase
from snapfit.core.config import (
    Config, LevelConfig, create_default_level, load_config, load_level, save_level, validate_level,
)
from snapfit.environment.snapfit_env import SnapFitConfig, SnapFitEnvironment
from snapfit.game.levels import get_builtin_level, list_builtin_levels
from snapfit.game.models import build_model
from snapfit.snapping.extraction import extract_sockets
from snapfit.utils.display import StatusDisplay, LiveLogger, stars_text

MOVE_STEP = 0.05
FINE_MOVE_STEP = 0.01
VERTICAL_STEP = 0.02
COARSE_ROTATE_DEGREES = 90.0

MOVE_DIRECTIONS = {
    "left": (-1.0, 0.0, 0.0),
    "right": (1.0, 0.0, 0.0),
    "forward": (0.0, 0.0, -1.0),
    "back": (0.0, 0.0, 1.0),
    "up": (0.0, 1.0, 0.0),
    "down": (0.0, -1.0, 0.0),
}

REPL_HELP = """
Available commands:
  help                       - Show this help
  state                      - Show parts, stats and feedback
  next / prev                - Cycle the selected part
  select <id|number>         - Select a part by id or by 1-based number
  grab / release             - Grab or release the selected part
  left|right|forward|back [fine]
                             - Move horizontally by 0.05 (0.01 with 'fine')
  up|down                    - Move vertically by 0.02
  move <dx> <dy> <dz>        - Move by an arbitrary delta
  rotate <x|y|z> [deg|coarse]
                             - Rotate by the part's step, a given angle, or 90
  snap                       - Try to snap the selected part
  hint                       - Show where the selected part belongs
  reset                      - Put the selected part back at its start
  restart                    - Restart the level
  wait <seconds>             - Let time pass
  quit/exit                  - Leave the game
"""


def parse_command(line: str) -> Optional[Action]:
    """
    Translate a REPL line into an environment action.

    Returns:
        The action, or None for an empty line

    Raises:
        ValueError: If the command is unknown or malformed
    """
    words = line.strip().split()
    if not words:
        return None
    command, args = words[0].lower(), words[1:]

    if command in ("state", "grab", "release", "snap", "hint"):
        return Action(command)
    if command == "reset":
        return Action("reset_part")
    if command == "restart":
        return Action("reset_level")
    if command in ("next", "prev"):
        return Action("select", {"direction": command})
    if command == "select":
        if len(args) != 1:
            raise ValueError("Usage: select <id|number>")
        if args[0].isdigit():
            return Action("select", {"index": int(args[0]) - 1})
        return Action("select", {"part_id": args[0]})
    if command in MOVE_DIRECTIONS:
        if command in ("up", "down"):
            step = VERTICAL_STEP
        else:
            step = FINE_MOVE_STEP if args[:1] == ["fine"] else MOVE_STEP
        delta = [c * step for c in MOVE_DIRECTIONS[command]]
        return Action("move", {"delta": delta})
    if command == "move":
        if len(args) != 3:
            raise ValueError("Usage: move <dx> <dy> <dz>")
        return Action("move", {"delta": [float(a) for a in args]})
    if command == "rotate":
        if not args or args[0].lower() not in ("x", "y", "z"):
            raise ValueError("Usage: rotate <x|y|z> [deg|coarse]")
        params = {"axis": args[0].lower()}
        if len(args) > 1:
            params["degrees"] = COARSE_ROTATE_DEGREES if args[1] == "coarse" else float(args[1])
        return Action("rotate", params)
    if command == "wait":
        if len(args) != 1:
            raise ValueError("Usage: wait <seconds>")
        return Action("wait", {"seconds": float(args[0])})
    raise ValueError(f"Unknown command: {command}")


def resolve_level(level_ref: str) -> LevelConfig:
    """A built-in level id or a path to a level YAML file."""
    if level_ref in list_builtin_levels():
        return get_builtin_level(level_ref)
    return load_level(level_ref)


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        description="snapfit: spatial assembly puzzle with snap-fit matching",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  # Play the tutorial level
  snapfit play --level level_01

  # Play a custom level and keep a session log
  snapfit play --level my_level.yaml --log-dir logs/

  # Write the tutorial level as a starting point for a new one
  snapfit create-level --output my_level.yaml

  # Check a level file
  snapfit validate-level my_level.yaml

Built-in levels: {', '.join(list_builtin_levels())}
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    play_parser = subparsers.add_parser("play", help="Play a level in the terminal")
    play_parser.add_argument("--level", "-l", default="level_01", help="Built-in level id or level file")
    play_parser.add_argument("--config", "-c", help="Runtime configuration file")
    play_parser.add_argument("--log-dir", help="Write a session log to this directory")
    play_parser.add_argument("--save-frames", action="store_true", help="Save a rendered frame per command (needs --log-dir)")
    play_parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")

    list_parser = subparsers.add_parser("list-levels", help="List built-in levels")
    list_parser.add_argument("--format", choices=["table", "json"], default="table", help="Output format")

    create_parser_ = subparsers.add_parser("create-level", help="Write a level file to start from")
    create_parser_.add_argument("--output", "-o", default="level.yaml", help="Output level file")
    create_parser_.add_argument("--from-level", help="Built-in level to copy (default: the tutorial)")
    create_parser_.add_argument("--force", action="store_true", help="Overwrite an existing file")

    validate_parser = subparsers.add_parser("validate-level", help="Validate a level file")
    validate_parser.add_argument("level", help="Level file or built-in level id")
    validate_parser.add_argument("--strict", action="store_true", help="Treat warnings as errors")

    render_parser = subparsers.add_parser("render", help="Render a level's start state to PNG")
    render_parser.add_argument("--level", "-l", default="level_01", help="Built-in level id or level file")
    render_parser.add_argument("--output", "-o", default="level.png", help="Output image")
    render_parser.add_argument("--width", type=int, default=800, help="Image width in pixels")
    render_parser.add_argument("--height", type=int, default=600, help="Image height in pixels")

    return parser


def _load_runtime_config(path: Optional[str], logger: LiveLogger) -> Optional[Config]:
    if not path:
        return Config()
    try:
        config = load_config(path)
        logger.log_result(f"Configuration loaded from {path}")
        return config
    except (FileNotFoundError, yaml.YAMLError, ValueError) as e:
        logger.log_error("Failed to load configuration", str(e))
        return None


def play_command(args) -> int:
    """Execute play command."""
    logger = LiveLogger(verbose=True)
    config = _load_runtime_config(args.config, logger)
    if config is None:
        return 1
    try:
        level = resolve_level(args.level)
    except (FileNotFoundError, yaml.YAMLError, ValueError) as e:
        logger.log_error(f"Failed to load level '{args.level}'", str(e))
        return 1

    env_config = SnapFitConfig.from_config(
        config,
        verbose=args.verbose or config.display.verbose,
        render_observations=bool(args.save_frames and args.log_dir),
    )
    env = SnapFitEnvironment(env_config, level=level)
    session_logger = None
    if args.log_dir:
        from snapfit.utils.logger import SessionLogger

        session_logger = SessionLogger(args.log_dir, level.id)

    StatusDisplay.print_header(f"snapfit - {level.name}")
    print("Type 'help' for commands")
    observation = env.reset()
    if session_logger:
        session_logger.log_step(0, {"step_type": "initial", "state": observation.state,
                                    "image": observation.image})
    StatusDisplay.print_session(observation.state)

    last_tick = time.monotonic()
    try:
        while env.session.phase not in (GamePhase.SUCCESS, GamePhase.FAIL):
            try:
                line = input("\n> ").strip()
            except EOFError:
                break
            now = time.monotonic()
            env.session.tick(now - last_tick)
            last_tick = now
            if env.session.phase == GamePhase.FAIL:
                break
            if line.lower() in ("quit", "exit"):
                break
            if line.lower() == "help":
                print(REPL_HELP)
                continue
            try:
                action = parse_command(line)
            except ValueError as e:
                print(e)
                continue
            if action is None:
                continue

            observation = env.step(action)
            result = observation.state.get("tool_result") or {}
            StatusDisplay.print_status(result.get("message", ""),
                                       "success" if result.get("status") == "success" else "error")
            if action.action_type == "state":
                StatusDisplay.print_session(observation.state)
            if session_logger:
                session_logger.log_step(env.step_count, {
                    "step_type": "action",
                    "action": action.to_dict(),
                    "tool_result": result,
                    "image": observation.image,
                }, verbose=args.verbose)
    except KeyboardInterrupt:
        print("\n⚠️  Interrupted by user")

    final_state = env.session.to_dict()
    _print_outcome(env.session.phase, final_state)
    if session_logger:
        session_logger.set_final_state(final_state)
        session_logger.save_logs()
    env.close()
    return 0


def _print_outcome(phase: GamePhase, state: Dict) -> None:
    stats = state["stats"]
    if phase == GamePhase.SUCCESS:
        StatusDisplay.print_header("Level Complete!")
        results = {
            "Time": f"{stats['elapsed']:.1f}s",
            "Stars": stars_text(stats["stars"]),
            "Hints Used": stats["hints_used"],
            "Mistakes": stats["mistakes"],
        }
    else:
        StatusDisplay.print_header("Time's up" if phase == GamePhase.FAIL else "Session ended")
        results = {
            "Parts Snapped": f"{state['snapped']}/{state['total_parts']}",
            "Time": f"{stats['elapsed']:.1f}s",
        }
    StatusDisplay.print_results(results, "Summary")


def list_levels_command(args) -> int:
    """Execute list-levels command."""
    levels = [get_builtin_level(level_id) for level_id in list_builtin_levels()]
    if args.format == "json":
        print(json.dumps([level.to_dict() for level in levels], indent=2, ensure_ascii=False))
        return 0
    StatusDisplay.print_header("Built-in Levels")
    for level in levels:
        time_limit = f"{level.time_limit_sec:g}s" if level.time_limit_sec else "none"
        print(f"  {level.id:<10} {level.name:<32} parts={len(level.parts)} "
              f"tolerance={level.tolerance.position_epsilon:g}/{level.tolerance.angle_epsilon_degrees:g}deg "
              f"time={time_limit} hints={level.hints}")
    return 0


def create_level_command(args) -> int:
    """Execute create-level command."""
    logger = LiveLogger(verbose=True)
    if Path(args.output).exists() and not args.force:
        logger.log_error(f"Level file already exists: {args.output} (use --force to overwrite)")
        return 1
    try:
        if args.from_level:
            level = get_builtin_level(args.from_level)
            save_level(level, args.output)
        else:
            level = create_default_level(args.output)
    except (KeyError, OSError) as e:
        logger.log_error("Failed to create level", str(e))
        return 1

    logger.log_result(f"Level written: {args.output}")
    StatusDisplay.print_results({
        "Output File": args.output,
        "Level": level.id,
        "Parts": len(level.parts),
    }, "Level Summary")
    logger.log_info("Next: snapfit validate-level " + args.output)
    return 0


def validate_level_command(args) -> int:
    """Execute validate-level command."""
    logger = LiveLogger(verbose=True)
    StatusDisplay.print_header("Level Validation")
    try:
        level = resolve_level(args.level)
    except FileNotFoundError:
        logger.log_error(f"Level file not found: {args.level}")
        return 1
    except (yaml.YAMLError, ValueError) as e:
        logger.log_error("Failed to load level", str(e))
        return 1
    logger.log_result(f"Level '{level.id}' loaded")

    target = build_model(level.target, level)
    socket_names = [s.name for s in extract_sockets(target)] if target is not None else None
    issues = validate_level(level, socket_names)

    errors = [issue for issue in issues if issue.startswith("ERROR")]
    warnings_ = [issue for issue in issues if not issue.startswith("ERROR")]
    if args.strict and warnings_:
        errors.extend(warnings_)
        warnings_ = []

    for i, error in enumerate(errors, 1):
        logger.log_error(f"{i}. {error.replace('ERROR: ', '')}")
    for i, warning in enumerate(warnings_, 1):
        logger.log_warning(f"{i}. {warning.replace('WARNING: ', '')}")

    StatusDisplay.print_results({
        "Status": "FAILED" if errors else "VALID",
        "Errors Found": len(errors),
        "Warnings Found": len(warnings_),
        "Sockets": ", ".join(socket_names) if socket_names else "unknown",
    }, "Validation Summary")
    return 1 if errors else 0


def render_command(args) -> int:
    """Execute render command."""
    logger = LiveLogger(verbose=True)
    try:
        level = resolve_level(args.level)
    except (FileNotFoundError, yaml.YAMLError, ValueError) as e:
        logger.log_error(f"Failed to load level '{args.level}'", str(e))
        return 1

    env = SnapFitEnvironment(SnapFitConfig(render_width=args.width, render_height=args.height), level=level)
    env.reset()
    image = env.render()
    image.save(args.output)
    env.close()
    logger.log_result(f"Rendered '{level.id}' to {args.output}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        parser.print_help()
        return 1
    args = parser.parse_args(argv)

    command_handlers = {
        "play": play_command,
        "list-levels": list_levels_command,
        "create-level": create_level_command,
        "validate-level": validate_level_command,
        "render": render_command,
    }
    handler = command_handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1
    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
