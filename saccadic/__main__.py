"""saccadic — Score how closely a built UI matches its design.

Usage: saccadic <command> [options]

Commands are auto-discovered from saccadic/commands/.
Each command module's docstring is its documentation.
Run `saccadic help <command>` for full module docs.

Environment variables / .env loading:
  OS environment variables are always used first.
  If a variable is not set, saccadic looks for a .env file starting from
  the current directory and walking up, stopping at the nearest .git boundary.
  Use --env-file to override the .env location explicitly.
"""

import argparse
import logging
import sys

from saccadic import registry
from saccadic.core.env import load_env
from saccadic.core.errors import SaccadicError


def _short_help(name: str, fallback: str) -> str:
    doc = (registry.module_for(name).__doc__ or '').strip()
    return doc.splitlines()[0] if doc else fallback


def _build_parser() -> argparse.ArgumentParser:
    commands = registry.all_commands()

    epilog = (
        'Examples:\n'
        '  saccadic frames app.pen\n'
        '  saccadic tree app.pen --frame Home\n'
        '  saccadic ids app.pen --json\n'
        '  saccadic plan app.pen --frame Home\n'
        '  saccadic compare app.pen elements.json\n'
        '  saccadic compare app.pen elements.json --reference design.png --actual build.png\n'
        '  saccadic compare app.pen elements.json --json --fail-under 85\n'
        '  saccadic help compare\n'
        '\n'
        'Env vars (set in .env or environment):\n'
        '  SACCADIC_THEME             default --theme\n'
        '  SACCADIC_PIXEL_THRESHOLD   default --threshold (0..1)\n'
    )
    parser = argparse.ArgumentParser(
        prog='saccadic',
        description='Score how closely a built UI matches its design.',
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    # Global options before subcommand
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        default=None,
        help='Path to .env file (default: walk up from cwd to .git boundary)',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging to stderr')
    sub = parser.add_subparsers(dest='command', help='Command to run')

    # Auto-register each command as a subcommand using module docstring
    for name, cmd in sorted(commands.items()):
        p = sub.add_parser(name, help=_short_help(name, cmd.help))
        cmd.configure(p)

    # `help` subcommand: prints full module docstring for a command
    help_parser = sub.add_parser('help', help='Print full docs for a command')
    help_parser.add_argument('topic', nargs='?', help='Command name')

    return parser


def _print_help(topic: str | None) -> int:
    """Print full module docstring for a command."""
    commands = registry.all_commands()

    if topic is None:
        print('Available commands:\n')
        for name, cmd in sorted(commands.items()):
            print(f'  {name:<10} {_short_help(name, cmd.help)}')
        print('\nRun: saccadic help <command> for full docs.')
        return 0

    if topic not in commands:
        print(f'Unknown command: {topic}', file=sys.stderr)
        print(f'Available: {", ".join(sorted(commands))}', file=sys.stderr)
        return 1

    doc = (registry.module_for(topic).__doc__ or '').strip()
    if not doc:
        print(f'(No module docs for {topic!r})')
        return 0
    print(doc)
    return 0


def run(argv: list[str] | None = None) -> int:
    """Parse arguments and dispatch; returns the exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')

    # Load .env before anything else; OS env vars always win
    env_path = load_env(env_file=args.env_file)
    if env_path:
        print(f'saccadic: loaded {env_path}', file=sys.stderr)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == 'help':
        return _print_help(args.topic)

    try:
        return registry.get(args.command).execute(args)
    except (SaccadicError, OSError) as exc:
        print(f'Error: {exc}', file=sys.stderr)
        return 1


def main() -> None:
    sys.exit(run())


if __name__ == '__main__':
    main()
