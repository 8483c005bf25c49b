# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Command-line interface for relnote.

Subcommands::

    relnote action                      GitHub Actions entry point
    relnote add TITLE --ref N           Record a change in a local changelog
    relnote release VERSION             Cut a release in a local changelog
    relnote normalize [--check]         Canonicalize a local changelog
    relnote classify TITLE [--json]     Show category, breaking flag and bump

Global flags (``--verbose``, ``--quiet``, ``--json-log``) go before the
subcommand. Logs go to stderr; machine output goes to stdout.

Exit codes: 0 on success, 1 on a :class:`~relnote.errors.RelnoteError`
(or a failed ``normalize --check``), 2 on usage errors.
"""

from __future__ import annotations

import argparse
import asyncio
import datetime as dt
import json
import os
import sys
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

from rich.console import Console
from rich.table import Table

from relnote import __version__
from relnote.bump import suggest_bump
from relnote.changelog import normalize
from relnote.classify import categorize, resolve_scope
from relnote.commit_parsing import BumpType
from relnote.config import DEFAULT_CONFIG_PATH, RelnoteConfig, load_config
from relnote.errors import AuthMissingError, ErrorCode, RelnoteError
from relnote.events import ChangeMergedEvent, ReleasePublishedEvent, parse_event
from relnote.github import DEFAULT_API_URL, github_client
from relnote.logging import configure_logging, get_logger
from relnote.monorepo import LocalRepository, ScopeResolver
from relnote.pipeline import (
    handle_change_merged,
    handle_release_published,
    infer_change_scope,
    resolve_branch,
)
from relnote.store import LocalFileStore

log = get_logger('relnote.cli')

TOKEN_ENV_VARS: tuple[str, ...] = ('GITHUB_TOKEN', 'GH_TOKEN')
CONFIG_PATH_ENV_VARS: tuple[str, ...] = ('INPUT_CONFIG-PATH', 'INPUT_CONFIG_PATH')


def _env_first(names: Sequence[str]) -> str:
    for name in names:
        value = os.environ.get(name, '').strip()
        if value:
            return value
    return ''


def _config_path(args: argparse.Namespace) -> str:
    return args.config or _env_first(CONFIG_PATH_ENV_VARS) or DEFAULT_CONFIG_PATH


def _load(args: argparse.Namespace) -> RelnoteConfig:
    config = load_config(_config_path(args))
    changelog = getattr(args, 'changelog', None)
    if changelog:
        config = RelnoteConfig(
            changelog_path=changelog,
            categories=config.categories,
            breaking_labels=config.breaking_labels,
            monorepo=config.monorepo,
            exclude_paths=config.exclude_paths,
        )
    return config


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        msg = f'must be a positive integer, got {value}'
        raise argparse.ArgumentTypeError(msg)
    return number


def _context_error(message: str) -> RelnoteError:
    return RelnoteError(
        ErrorCode.EVENT_INVALID,
        message,
        hint='relnote action must run inside a GitHub Actions workflow.',
    )


def write_output(name: str, value: str) -> None:
    """Emit a step output via ``$GITHUB_OUTPUT``, else print it."""
    output_file = os.environ.get('GITHUB_OUTPUT', '')
    line = f'{name}={value}'
    if output_file:
        with Path(output_file).open('a', encoding='utf-8') as fh:
            fh.write(f'{line}\n')
    else:
        print(line)  # noqa: T201
    log.info('step_output', name=name, value=value)


async def _cmd_action(args: argparse.Namespace) -> int:
    token = _env_first(TOKEN_ENV_VARS)
    if not token:
        raise AuthMissingError()

    event_name = os.environ.get('GITHUB_EVENT_NAME', '')
    event_path = os.environ.get('GITHUB_EVENT_PATH', '')
    repository = os.environ.get('GITHUB_REPOSITORY', '')
    if not event_name or not event_path or not repository:
        raise _context_error('GITHUB_EVENT_NAME, GITHUB_EVENT_PATH and GITHUB_REPOSITORY must be set')
    try:
        payload = json.loads(Path(event_path).read_text(encoding='utf-8'))
    except (OSError, ValueError) as exc:
        raise _context_error(f'cannot read event payload {event_path}: {exc}') from exc

    event = parse_event(event_name, payload)
    if event is None:
        action = payload.get('action') if isinstance(payload, dict) else None
        log.info('event_ignored', event=event_name, action=action)
        return 0

    config = _load(args)
    api_url = os.environ.get('GITHUB_API_URL', '') or DEFAULT_API_URL
    async with github_client(repository, token, api_url=api_url) as client:
        ref = await resolve_branch(event, client)
        if isinstance(event, ChangeMergedEvent):
            scope = await infer_change_scope(event, client, config, ref)
            bump = await handle_change_merged(event, store=client, config=config, ref=ref, inferred_scope=scope)
            write_output('bump', bump.value)
        else:
            await handle_release_published(event, store=client, config=config, ref=ref, sink=client)
    return 0


async def _cmd_add(args: argparse.Namespace) -> int:
    config = _load(args)
    root = Path(args.root)
    scope = args.scope or ''
    if not scope and args.changed and config.monorepo.enabled:
        scope = await ScopeResolver(LocalRepository(root), config, '').resolve(args.changed)
    event = ChangeMergedEvent(reference_id=args.ref, title=args.title, labels=args.label)
    bump = await handle_change_merged(
        event,
        store=LocalFileStore(root),
        config=config,
        ref='',
        inferred_scope=scope,
    )
    print(bump.value)  # noqa: T201
    return 0


async def _cmd_release(args: argparse.Namespace) -> int:
    config = _load(args)
    event = ReleasePublishedEvent(version_tag=args.version, release_id=0)
    notes = await handle_release_published(
        event,
        store=LocalFileStore(Path(args.root)),
        config=config,
        ref='',
        today=args.date,
    )
    if notes is None:
        log.warning('nothing_to_release', path=config.changelog_path)
        return 0
    print(notes)  # noqa: T201
    return 0


async def _cmd_normalize(args: argparse.Namespace) -> int:
    config = _load(args)
    store = LocalFileStore(Path(args.root))
    existing = await store.read(config.changelog_path)
    current = existing.content if existing else ''
    canonical = normalize(current)
    if canonical == current:
        log.info('changelog_normalized', path=config.changelog_path, changed=False)
        return 0
    if args.check:
        log.error('changelog_not_normalized', path=config.changelog_path, hint='Run relnote normalize.')
        return 1
    await store.write(
        config.changelog_path,
        '',
        canonical,
        'chore(relnote): normalize changelog',
        token=existing.token if existing else None,
    )
    log.info('changelog_normalized', path=config.changelog_path, changed=True)
    return 0


def print_classification_table(
    title: str,
    rows: dict[str, str],
    console: Console | None = None,
) -> None:
    """Print a classification as a two-column Rich table."""
    if console is None:
        console = Console()
    table = Table(title=title, show_header=True, header_style='bold', show_edge=False, pad_edge=False)
    table.add_column('Field', style='bold')
    table.add_column('Value')
    for key, value in rows.items():
        table.add_row(key, value)
    console.print(table)


async def _cmd_classify(args: argparse.Namespace) -> int:
    config = _load(args)
    classification = resolve_scope(categorize(args.title, args.label, config), args.scope or '')
    bump: BumpType = suggest_bump(classification)
    rows = {
        'category': classification.category,
        'breaking': str(classification.breaking).lower(),
        'scope': classification.scope,
        'bump': bump.value,
    }
    if args.json:
        print(json.dumps({**rows, 'breaking': classification.breaking}, indent=2))  # noqa: T201
    else:
        print_classification_table(args.title, rows)
    return 0


_COMMANDS: dict[str, Callable[[argparse.Namespace], Awaitable[int]]] = {
    'action': _cmd_action,
    'add': _cmd_add,
    'release': _cmd_release,
    'normalize': _cmd_normalize,
    'classify': _cmd_classify,
}


def _add_config_args(parser: argparse.ArgumentParser, *, changelog: bool = True, root: bool = True) -> None:
    parser.add_argument('--config', default='', help=f'Config file (default: {DEFAULT_CONFIG_PATH}).')
    if changelog:
        parser.add_argument('--changelog', default='', help='Changelog path, overriding the config.')
    if root:
        parser.add_argument('--root', default='.', help='Repository root (default: current directory).')


def build_parser() -> argparse.ArgumentParser:
    """Build the ``relnote`` argument parser."""
    parser = argparse.ArgumentParser(
        prog='relnote',
        description='Keep a changelog up to date from merged pull requests and releases.',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging.')
    parser.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors.')
    parser.add_argument('--json-log', action='store_true', help='Log one JSON object per line.')
    sub = parser.add_subparsers(dest='command', required=True)

    action = sub.add_parser('action', help='Handle the current GitHub Actions event.')
    _add_config_args(action, root=False)

    add = sub.add_parser('add', help='Add a change to the Unreleased section.')
    add.add_argument('title', help='Change title, e.g. "fix(api): clamp page size".')
    add.add_argument('--ref', type=_positive_int, required=True, help='Pull request number.')
    add.add_argument('--label', action='append', default=[], help='Label (repeatable).')
    add.add_argument('--scope', default='', help='Explicit scope.')
    add.add_argument('--changed', action='append', default=[], help='Changed file, for scope inference (repeatable).')
    _add_config_args(add)

    release = sub.add_parser('release', help='Move Unreleased into a version section.')
    release.add_argument('version', help='Version or tag, e.g. v1.2.0.')
    release.add_argument(
        '--date',
        type=dt.date.fromisoformat,
        default=None,
        help='Release date, YYYY-MM-DD (default: today, UTC).',
    )
    _add_config_args(release)

    norm = sub.add_parser('normalize', help='Rewrite the changelog into canonical form.')
    norm.add_argument('--check', action='store_true', help='Exit 1 instead of rewriting.')
    _add_config_args(norm)

    classify = sub.add_parser('classify', help='Classify a change without editing anything.')
    classify.add_argument('title', help='Change title.')
    classify.add_argument('--label', action='append', default=[], help='Label (repeatable).')
    classify.add_argument('--scope', default='', help='Inferred scope, used when the title has none.')
    classify.add_argument('--json', action='store_true', help='Print JSON instead of a table.')
    _add_config_args(classify, changelog=False, root=False)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return its exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)
    try:
        return asyncio.run(_COMMANDS[args.command](args))
    except RelnoteError as exc:
        log.error('relnote_failed', code=exc.code.value, error=exc.message, hint=exc.hint)
        return 1


if __name__ == '__main__':
    sys.exit(main())
