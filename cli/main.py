"""CLI entry point."""

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from common.logging_config import setup_logging
from cli.config import Config
from cli.utils import parse_tag_args
from cli.vault_client import VaultClient

DEFAULT_CONFIG_PATH = Path.home() / '.vault' / 'config.json'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='vault-cli', description='Chunked object storage client')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--config', type=Path, default=DEFAULT_CONFIG_PATH, help='Path to config file')

    commands = parser.add_subparsers(dest='command', required=True)

    set_caller = commands.add_parser('set-caller', help='Store the caller identity sent with requests')
    set_caller.add_argument('caller_id')

    upload = commands.add_parser('upload', help='Upload a local file in chunks')
    upload.add_argument('path')
    upload.add_argument('--public', action='store_true', help='Make the object readable by anyone')
    upload.add_argument('--content-type', default=None)
    upload.add_argument('--tag', action='append', default=[], metavar='KEY=VALUE')

    resume = commands.add_parser('resume', help='Upload the chunks an object is still missing')
    resume.add_argument('object_id')
    resume.add_argument('path')

    download = commands.add_parser('download', help='Download an object to a local file')
    download.add_argument('object_id')
    download.add_argument('output')

    info = commands.add_parser('info', help='Show object metadata')
    info.add_argument('object_id')

    list_cmd = commands.add_parser('list', help='List public objects or one owner\'s objects')
    list_cmd.add_argument('--owner', default=None)
    list_cmd.add_argument('--content-type', default=None)

    delete = commands.add_parser('delete', help='Delete an object and its chunks')
    delete.add_argument('object_id')

    usage = commands.add_parser('usage', help='Show bytes stored in total or by one owner')
    usage.add_argument('--owner', default=None)

    return parser


def run_command(args: argparse.Namespace, config: Config, client: VaultClient) -> str:
    """
    Dispatch a parsed command and return the message to print.
    """
    if args.command == 'set-caller':
        config.set_caller_id(args.caller_id)
        return f"Caller id set to {args.caller_id}"
    if args.command == 'upload':
        return client.upload_file(
            args.path,
            is_public=args.public,
            content_type=args.content_type,
            tags=parse_tag_args(args.tag),
        )
    if args.command == 'resume':
        return client.resume_upload(args.object_id, args.path)
    if args.command == 'download':
        return client.download(args.object_id, args.output)
    if args.command == 'info':
        return client.info(args.object_id)
    if args.command == 'list':
        return client.list_objects(owner_id=args.owner, content_type=args.content_type)
    if args.command == 'delete':
        return client.delete(args.object_id)
    if args.command == 'usage':
        return client.usage(owner_id=args.owner)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for CLI."""
    args = build_parser().parse_args(argv)

    log_level = 'DEBUG' if args.debug else os.getenv('LOG_LEVEL', 'WARNING')
    logger = setup_logging('cli', log_level=log_level)

    config = Config(args.config)
    client = VaultClient(config)
    try:
        print(run_command(args, config, client))
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        client.close()


if __name__ == "__main__":
    main()
