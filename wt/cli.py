"""
CLI interface for wt.
"""

import json
import logging
import sys
import argparse
from typing import Optional, List

from . import __version__
from .config import resolve_config_path
from .exceptions import WTError
from .utils.chdir import SHELL_WRAPPER
from .commands.add import add_worktree
from .commands.clear import clear_worktrees
from .commands.config import list_hosts, set_account, set_clone_method
from .commands.rm import remove_worktree
from .commands.setup import setup_repo
from .commands.switch import switch_worktree


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='wt',
        description='Manage Git worktrees around a bare repository'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    parser.add_argument(
        '--config', '-c',
        help='Config file path (default: $WORKTREE_CONFIG or ~/.config/worktree/settings.toml)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    setup_parser = subparsers.add_parser('setup', help='Set up a new worktree repository')
    setup_parser.add_argument('repository', help='Repository as [domain/]org/repo')
    setup_parser.add_argument('--base', '-b', default='main', help='Base branch to use for the repository')

    add_parser = subparsers.add_parser('add', help='Add a new worktree')
    add_parser.add_argument('name', help='Name of the worktree and its branch')
    add_parser.add_argument('--base', '-b', default='main', help='Base branch to create the new worktree from')

    rm_parser = subparsers.add_parser(
        'rm',
        aliases=['remove', 'delete', 'del', 'd'],
        help='Remove a worktree'
    )
    rm_parser.add_argument('name', nargs='?', help='Worktree to remove (interactive when omitted)')

    subparsers.add_parser('clear', help='Remove all worktrees except main, master and review')

    switch_parser = subparsers.add_parser('switch', aliases=['sw'], help='Switch to a different worktree')
    switch_parser.add_argument('name', nargs='?', help='Worktree to switch to (interactive when omitted)')

    config_parser = subparsers.add_parser('config', help='Manage worktree configuration')
    config_subparsers = config_parser.add_subparsers(dest='config_command')

    account_parser = config_subparsers.add_parser('set-account', help='Set account name for a domain')
    account_parser.add_argument('domain', help='Host domain, e.g. github.com')
    account_parser.add_argument('account', help='Account name on that host')

    method_parser = config_subparsers.add_parser('set-clone-method', help='Set clone method for a domain')
    method_parser.add_argument('domain', help='Host domain, e.g. github.com')
    method_parser.add_argument('method', help='http or ssh')

    config_subparsers.add_parser('list', help='List all configured hosts')

    version_parser = subparsers.add_parser('version', help='Show version information')
    version_parser.add_argument('--json', '-j', action='store_true', help='Output version information as JSON')

    subparsers.add_parser('shell-init', help='Print the shell function that follows directory changes')

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    if args is None:
        args = sys.argv[1:]

    parser = create_parser()
    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.WARNING,
        format='%(levelname)s: %(message)s'
    )

    if not parsed_args.command:
        parser.print_help()
        return 1

    config_path = resolve_config_path(parsed_args.config)

    try:
        return dispatch(parsed_args, config_path)

    except WTError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        if parsed_args.verbose:
            import traceback
            traceback.print_exc()
        else:
            print(f"Unexpected error: {e}", file=sys.stderr)
        return 1


def dispatch(args, config_path) -> int:
    """Route parsed arguments to a command."""
    command = args.command
    if command == 'setup':
        return setup_repo(args.repository, config_path, branch=args.base)
    elif command == 'add':
        return add_worktree(args.name, args.base)
    elif command in ('rm', 'remove', 'delete', 'del', 'd'):
        return remove_worktree(args.name)
    elif command == 'clear':
        return clear_worktrees()
    elif command in ('switch', 'sw'):
        return switch_worktree(args.name)
    elif command == 'config':
        return handle_config_command(args, config_path)
    elif command == 'version':
        return handle_version(args)
    elif command == 'shell-init':
        print(SHELL_WRAPPER, end='')
        return 0
    else:
        print(f"Command '{command}' not yet implemented")
        return 1


def handle_config_command(args, config_path) -> int:
    """Handle config subcommands."""
    if args.config_command == 'set-account':
        return set_account(config_path, args.domain, args.account)
    elif args.config_command == 'set-clone-method':
        return set_clone_method(config_path, args.domain, args.method)
    elif args.config_command == 'list':
        return list_hosts(config_path)
    else:
        print("Usage: wt config {set-account,set-clone-method,list}")
        return 1


def handle_version(args) -> int:
    """Print the installed version."""
    info = {
        'version': __version__,
        'python': sys.version.split()[0],
    }
    if args.json:
        print(json.dumps(info, indent=2))
    else:
        print(f"wt {info['version']} (python {info['python']})")
    return 0


if __name__ == '__main__':
    sys.exit(main())
