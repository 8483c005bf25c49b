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

"""Configuration for relnote.

Every option and its default is enumerated exactly once, on
:class:`RelnoteConfig`.  The resolved value is passed explicitly to
each component; nothing looks configuration up from ambient state.

Example ``.github/relnote.yml``::

    changelog_path: CHANGELOG.md
    categories:
      Features: [feature, feat, enhancement]
      Fixes: [fix, bug, bugfix, hotfix]
      Docs: [docs, documentation]
    breaking_labels: [breaking, breaking-change, major]
    monorepo:
      enabled: true
      detect: true
      packages: ['packages/*']
    exclude_paths: ['**/*.lock']

The camelCase spellings ``changelogPath``, ``breakingLabels`` and
``excludePaths`` are accepted as aliases.

Loading never fails: :func:`load_config` falls back to full defaults
(and logs ``config_malformed``) when the file is missing, unreadable,
not valid YAML, or fails validation.  :func:`parse_config` is the strict
layer underneath and raises :class:`~relnote.errors.RelnoteError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from relnote.errors import ErrorCode, RelnoteError
from relnote.logging import get_logger

log = get_logger('relnote.config')

DEFAULT_CONFIG_PATH = '.github/relnote.yml'
DEFAULT_CHANGELOG_PATH = 'CHANGELOG.md'

_DEFAULT_CATEGORIES: dict[str, list[str]] = {
    'Features': ['feature', 'feat', 'enhancement'],
    'Fixes': ['fix', 'bug', 'bugfix', 'hotfix'],
    'Docs': ['docs', 'documentation'],
    'Performance': ['perf', 'performance'],
    'Refactor': ['refactor', 'refactoring'],
    'Tests': ['test', 'tests'],
    'Chores': ['chore', 'maintenance'],
}

_DEFAULT_BREAKING_LABELS: list[str] = ['breaking', 'breaking-change', 'major']


@dataclass(frozen=True)
class MonorepoConfig:
    """Scope inference for multi-package repositories.

    Attributes:
        enabled: Infer an entry scope from the files a change touches.
        detect: Discover workspace globs from ``package.json``,
            ``pnpm-workspace.yaml`` or ``pyproject.toml`` when
            ``packages`` is empty.
        packages: Explicit workspace globs (e.g. ``["packages/*"]``).
            Take precedence over detection.
    """

    enabled: bool = False
    detect: bool = True
    packages: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RelnoteConfig:
    """Resolved relnote configuration.

    Attributes:
        changelog_path: Repository-relative path of the changelog.
        categories: Ordered mapping of category name to label/type
            aliases. Order is priority order for label matching.
        breaking_labels: Labels that mark a change as breaking.
        monorepo: Scope inference settings.
        exclude_paths: Globs for changed files that never contribute to
            scope inference.
    """

    changelog_path: str = DEFAULT_CHANGELOG_PATH
    categories: dict[str, list[str]] = field(
        default_factory=lambda: {name: list(aliases) for name, aliases in _DEFAULT_CATEGORIES.items()},
    )
    breaking_labels: list[str] = field(default_factory=lambda: list(_DEFAULT_BREAKING_LABELS))
    monorepo: MonorepoConfig = field(default_factory=MonorepoConfig)
    exclude_paths: list[str] = field(default_factory=list)


VALID_MONOREPO_KEYS: frozenset[str] = frozenset({'enabled', 'detect', 'packages'})

VALID_CONFIG_KEYS: frozenset[str] = frozenset({
    'changelog_path',
    'categories',
    'breaking_labels',
    'monorepo',
    'exclude_paths',
})

# Spellings used by older config files.
_KEY_ALIASES: dict[str, str] = {
    'changelogPath': 'changelog_path',
    'breakingLabels': 'breaking_labels',
    'excludePaths': 'exclude_paths',
}


def _invalid(message: str) -> RelnoteError:
    return RelnoteError(
        ErrorCode.CONFIG_INVALID,
        message,
        hint=f'Check {DEFAULT_CONFIG_PATH} against the documented options.',
    )


def _check_keys(raw: dict[str, Any], valid: frozenset[str], section: str) -> None:
    unknown = sorted(str(k) for k in raw if k not in valid)
    if unknown:
        raise _invalid(f'Unknown key(s) in {section}: {", ".join(unknown)}')


def _parse_bool(value: object, key: str) -> bool:
    if not isinstance(value, bool):
        raise _invalid(f'{key} must be a boolean, got {type(value).__name__}')
    return value


def _parse_str(value: object, key: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise _invalid(f'{key} must be a non-empty string')
    return value.strip()


def _parse_str_list(value: object, key: str) -> list[str]:
    if not isinstance(value, list):
        raise _invalid(f'{key} must be a list of strings, got {type(value).__name__}')
    result: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise _invalid(f'{key} must be a list of strings, found {type(item).__name__}')
        result.append(item)
    return result


def _parse_categories(raw: object) -> dict[str, list[str]]:
    """Validate the ``categories`` mapping, preserving its order."""
    if not isinstance(raw, dict):
        raise _invalid(f'categories must be a mapping, got {type(raw).__name__}')
    categories: dict[str, list[str]] = {}
    for name, aliases in raw.items():
        cat = _parse_str(name, 'categories key')
        if any(existing.lower() == cat.lower() for existing in categories):
            raise _invalid(f'categories contains duplicate name {cat!r}')
        categories[cat] = [] if aliases is None else _parse_str_list(aliases, f'categories.{cat}')
    return categories


def _parse_monorepo(raw: object) -> MonorepoConfig:
    """Validate the ``monorepo`` section."""
    if raw is None:
        return MonorepoConfig()
    if not isinstance(raw, dict):
        raise _invalid(f'monorepo must be a mapping, got {type(raw).__name__}')
    _check_keys(raw, VALID_MONOREPO_KEYS, 'monorepo')
    defaults = MonorepoConfig()
    return MonorepoConfig(
        enabled=_parse_bool(raw.get('enabled', defaults.enabled), 'monorepo.enabled'),
        detect=_parse_bool(raw.get('detect', defaults.detect), 'monorepo.detect'),
        packages=_parse_str_list(raw.get('packages', []), 'monorepo.packages'),
    )


def parse_config(raw: dict[str, Any]) -> RelnoteConfig:
    """Build a :class:`RelnoteConfig` from a parsed mapping.

    Missing keys take their defaults.

    Args:
        raw: The top-level mapping from the config file.

    Returns:
        The validated configuration.

    Raises:
        RelnoteError: With code ``RN_CONFIG_INVALID`` on unknown keys or
            values of the wrong type.
    """
    data = {_KEY_ALIASES.get(k, k): v for k, v in raw.items()}
    _check_keys(data, VALID_CONFIG_KEYS, 'config')
    kwargs: dict[str, Any] = {'monorepo': _parse_monorepo(data.get('monorepo'))}
    if 'changelog_path' in data:
        kwargs['changelog_path'] = _parse_str(data['changelog_path'], 'changelog_path')
    if 'categories' in data:
        kwargs['categories'] = _parse_categories(data['categories'])
    if 'breaking_labels' in data:
        kwargs['breaking_labels'] = _parse_str_list(data['breaking_labels'], 'breaking_labels')
    if 'exclude_paths' in data:
        kwargs['exclude_paths'] = _parse_str_list(data['exclude_paths'], 'exclude_paths')
    return RelnoteConfig(**kwargs)


def parse_config_text(text: str) -> RelnoteConfig:
    """Parse YAML config text strictly.

    An empty document yields the defaults.

    Raises:
        RelnoteError: If the text is not valid YAML, is not a mapping,
            or fails validation.
    """
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise _invalid(f'config is not valid YAML: {exc}') from exc
    if raw is None:
        return RelnoteConfig()
    if not isinstance(raw, dict):
        raise _invalid(f'config must be a mapping, got {type(raw).__name__}')
    return parse_config(raw)


def load_config(path: Path | str | None = None) -> RelnoteConfig:
    """Load configuration from a YAML file, degrading to defaults.

    Args:
        path: Config file path. ``None`` or empty means
            :data:`DEFAULT_CONFIG_PATH`.

    Returns:
        The parsed configuration, or full defaults when the file is
        missing or malformed.
    """
    config_path = Path(path or DEFAULT_CONFIG_PATH)
    if not config_path.is_file():
        log.debug('config_not_found', path=str(config_path))
        return RelnoteConfig()
    try:
        text = config_path.read_text(encoding='utf-8')
        config = parse_config_text(text)
    except (OSError, UnicodeDecodeError, RelnoteError) as exc:
        log.warning(
            'config_malformed',
            path=str(config_path),
            error=str(exc),
            hint='Using built-in defaults for every option.',
        )
        return RelnoteConfig()
    log.debug('config_loaded', path=str(config_path), categories=list(config.categories))
    return config


__all__ = [
    'DEFAULT_CHANGELOG_PATH',
    'DEFAULT_CONFIG_PATH',
    'MonorepoConfig',
    'RelnoteConfig',
    'VALID_CONFIG_KEYS',
    'VALID_MONOREPO_KEYS',
    'load_config',
    'parse_config',
    'parse_config_text',
]
