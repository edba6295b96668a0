"""
Tumble CLI - Command-line interface for the emulator.

Usage:
    tumble run [--demo NAME | --url CODE | --text-file PATH]   Crank a lever and run
    tumble show [--demo NAME | --url CODE | --text-file PATH]  Print a board and its code
    tumble serve [--host HOST] [--port PORT]                    Start the REST API
"""

import argparse
import asyncio
import logging
import sys

from .config import load_settings


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Tumble - Marble Computer Emulator",
        prog="tumble",
    )
    parser.add_argument(
        "--log-level", type=str.upper, choices=LOG_LEVELS, help="Override TUMBLE_LOG_LEVEL"
    )
    parser.add_argument("--log-file", help="Also write logs to this file")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Crank a lever and run until the marble stops")
    _add_board_arguments(run_parser)
    run_parser.add_argument(
        "--color", choices=["blue", "red"], default="blue", help="Lever to crank"
    )
    run_parser.add_argument("--max-steps", type=int, default=10_000, help="Step limit")
    run_parser.add_argument(
        "--live", action="store_true", help="Step on the timer and print every move"
    )

    # Show command
    show_parser = subparsers.add_parser("show", help="Print a board and its codes")
    _add_board_arguments(show_parser)

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start the REST API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    args = parser.parse_args(argv)

    settings = load_settings()
    _setup_logging(args.log_level or settings.log_level, args.log_file)

    if args.command == "run":
        cmd_run(args, settings)
    elif args.command == "show":
        cmd_show(args, settings)
    elif args.command == "serve":
        cmd_serve(args, settings)
    else:
        parser.print_help()
        sys.exit(1)


def _setup_logging(level_name, log_file=None):
    """
    Send the package's log records to stderr, and to log_file if given.

    stdout is left to the command output. An unknown level name (from
    TUMBLE_LOG_LEVEL) falls back to INFO.
    """
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        print(f"Warning: unknown log level {level_name!r}, using INFO", file=sys.stderr)
        level = logging.INFO

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
    )
    logger = logging.getLogger("tumble")
    logger.setLevel(level)
    logger.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)


def _add_board_arguments(subparser):
    source = subparser.add_mutually_exclusive_group()
    source.add_argument("--demo", help="demo1, demo2, addition or nim")
    source.add_argument("--url", help="Compact board code")
    source.add_argument("--text-file", help="Path to a text board")
    subparser.add_argument("--width", type=int, help="Board width")
    subparser.add_argument("--height", type=int, help="Board height")
    subparser.add_argument("--marbles", type=int, help="Marbles per color")


def _load_session(args, settings):
    """Create a session from the board arguments, exiting on bad input."""
    from .session import SessionManager

    text = None
    if args.text_file:
        try:
            with open(args.text_file, "r", encoding="utf-8") as f:
                text = f.read()
        except FileNotFoundError:
            print(f"Error: File not found: {args.text_file}")
            sys.exit(1)

    manager = SessionManager(speed=settings.speed)
    try:
        return manager.create_session(
            width=args.width if args.width is not None else settings.width,
            height=args.height if args.height is not None else settings.height,
            marbles=args.marbles if args.marbles is not None else settings.marbles,
            url_code=args.url,
            text=text,
            demo=args.demo,
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)


def cmd_run(args, settings):
    """Crank a lever and run until the marble stops."""
    from .codecs import encode_text
    from .engine_core import stepper
    from .engine_core.state import MarbleColor

    session = _load_session(args, settings)
    simulation = session.simulation
    color = MarbleColor(args.color)

    if args.live:
        result = asyncio.run(_run_live(session, color))
        if not result.success:
            print(f"Error: {result.error}")
            sys.exit(1)
    else:
        result = stepper.launch(simulation, color)
        if not result.success:
            print(f"Error: {result.error}")
            sys.exit(1)
        results = stepper.run_until_stopped(simulation, args.max_steps)
        print(f"Steps: {len(results)}")

    exits = "".join(c.value[0] for c in simulation.exit_colors)
    print(f"Status: {simulation.status.value}")
    print(f"Exit sequence: {exits or '(none)'}")
    print(f"Marbles left: blue {simulation.reservoir.blue_available}, "
          f"red {simulation.reservoir.red_available}")
    print()
    print(encode_text(simulation.board), end="")


async def _run_live(session, color):
    """Drive the marble with the tick loop, printing each move."""
    loop = session.loop

    def report(result):
        ball = session.simulation.ball
        print(f"  {ball.color.value:<4} at ({ball.x}, {ball.y})  {' '.join(result.events)}")

    loop.on_step = report
    result = loop.crank(color)
    if result.success:
        await loop.wait_stopped()
    return result


def cmd_show(args, settings):
    """Print a board and its codes."""
    from .codecs import encode_text, encode_url, share_query

    session = _load_session(args, settings)
    simulation = session.simulation
    counts = simulation.board.counts()

    print(encode_text(simulation.board), end="")
    print()
    print(f"Code:  {encode_url(simulation.board, simulation.reservoir)}")
    print(f"Share: ?{share_query(simulation.board, simulation.reservoir)}")
    print(f"Parts: {counts.total} (ramps {counts.ramps}, bits {counts.bits}, "
          f"gear bits {counts.gear_bits}, gears {counts.gears}, "
          f"crossovers {counts.crossovers}, interceptors {counts.interceptors})")


def cmd_serve(args, settings):
    """Start the REST API with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        sys.exit(1)

    print(f"Serving on http://{args.host}:{args.port}/api/docs")
    uvicorn.run(
        "tumble.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
