#!/usr/bin/env python3
"""
norg-task-sync - Neorg todo ↔ Google Tasks synchronization.
"""

import argparse
import logging
import sys
from pathlib import Path

from norg_task_sync import __version__
from norg_task_sync.core.config import get_default_config_path, load_config
from norg_task_sync.core.models import SyncOptions
from norg_task_sync.commands import (
    ConfigCommand,
    ParseCommand,
    SyncCommand,
    TasksCommand,
)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def log_level(verbosity: int) -> int:
    """Map the number of -v flags to a logging level."""
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(verbosity: int) -> None:
    logging.basicConfig(level=log_level(verbosity), format=LOG_FORMAT)
    # Request logs of the HTTP client only show up at -vvv
    http_level = logging.DEBUG if verbosity >= 3 else logging.WARNING
    for name in ('httpx', 'httpcore'):
        logging.getLogger(name).setLevel(http_level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='norg-task-sync',
        description="Sync todos in Neorg files with Google Tasks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  norg-task-sync config tasklist list     # Show available task lists
  norg-task-sync config tasklist set ID   # Choose the task list to sync
  norg-task-sync sync ~/notes/journal     # Sync all .norg files in a folder
  norg-task-sync sync -f today.norg a.norg  # Pull new tasks into today.norg
  norg-task-sync tasks --json             # Dump remote tasks
        """
    )

    default_config = get_default_config_path()

    parser.add_argument(
        '--config',
        help=f'Path to configuration file (default: {default_config})',
        default=None
    )
    parser.add_argument(
        '--verbose', '-v',
        action='count',
        default=0,
        help='Make output more verbose (repeat for more detail)'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Sync command
    sync_parser = subparsers.add_parser('sync', help='Sync tasks between local files and Google Tasks')
    sync_parser.add_argument(
        'files_or_folders',
        nargs='+',
        type=Path,
        help='Files or folders to sync. New remote tasks go into the last file (after sorting)'
    )
    sync_parser.add_argument(
        '--fix-missing',
        action='store_true',
        help='Clear ids of todos whose remote task was deleted so they get re-created'
    )
    sync_parser.add_argument(
        '-f', '--pull-to-first',
        action='store_true',
        help='Pull new remote tasks into the first file instead'
    )
    sync_parser.add_argument(
        '-s', '--without-sort',
        action='store_true',
        help='Do not sort file names before syncing'
    )
    sync_parser.add_argument(
        '-L', '--without-local',
        action='store_true',
        help='Do not change local todos (neither create nor update status)'
    )
    sync_parser.add_argument(
        '-R', '--without-remote',
        action='store_true',
        help='Do not change remote tasks (neither create nor update status)'
    )
    sync_parser.add_argument(
        '-r', '--without-push',
        action='store_true',
        help='Do not create remote tasks for new local todos'
    )
    sync_parser.add_argument(
        '-l', '--without-pull',
        action='store_true',
        help='Do not insert new remote tasks into the todo section'
    )

    # Tasks command
    tasks_parser = subparsers.add_parser('tasks', help='List remote tasks (mainly for debugging)')
    tasks_parser.add_argument(
        '-j', '--json',
        action='store_true',
        help='Output as JSON'
    )

    # Parse command
    parse_parser = subparsers.add_parser('parse', help='Show parsed todos of a file (mainly for debugging)')
    parse_parser.add_argument('target', type=Path, help='Norg file to parse')
    parse_parser.add_argument(
        '--force-norg',
        action='store_true',
        help='Parse even if the extension is not .norg'
    )

    # Config command
    config_parser = subparsers.add_parser('config', help='Show or change configuration')
    config_sub = config_parser.add_subparsers(dest='config_command')
    config_sub.add_parser('show', help='Show the effective configuration')
    tasklist_parser = config_sub.add_parser('tasklist', help='Get, set or list the task list')
    tasklist_parser.add_argument('operation', choices=['get', 'set', 'list'])
    tasklist_parser.add_argument('value', nargs='?', help='Task list id (for set)')

    return parser


def main(argv=None):
    """Main entry point for norg-task-sync."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    # Show help if no command specified
    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args.config)

        if args.command == 'sync':
            options = SyncOptions(
                files_or_folders=args.files_or_folders,
                fix_missing=args.fix_missing,
                pull_to_first=args.pull_to_first,
                without_sort=args.without_sort,
                without_local=args.without_local,
                without_remote=args.without_remote,
                without_push=args.without_push,
                without_pull=args.without_pull,
            )
            success = SyncCommand(config, verbose=args.verbose > 0).run(options)

        elif args.command == 'tasks':
            success = TasksCommand(config).run(as_json=args.json)

        elif args.command == 'parse':
            success = ParseCommand(config).run(args.target, force_norg=args.force_norg)

        elif args.command == 'config':
            cmd = ConfigCommand(config, config_path=args.config)
            if args.config_command == 'tasklist':
                success = cmd.tasklist(args.operation, args.value)
            else:
                success = cmd.show()

        else:
            print(f"Unknown command '{args.command}'.")
            return 1

        return 0 if success else 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 130
    except Exception as e:
        print(f"Error: {e}")
        if args.verbose >= 2:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
