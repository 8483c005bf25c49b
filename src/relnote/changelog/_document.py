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

"""Line-oriented model of a changelog document.

A document is a free-text header followed by ``##`` sections::

    # Changelog                              ┐
    All notable changes to this project ...  ┘ header
                                             
    ## [Unreleased]                          ┐ staging section
                                             │
    ### Fixes                                │ ┐ category block
    - [api] Clamp invalid page size (#56)    │ │
    - Clamp invalid question number (#55)    ┘ ┘
                                             
    ## [0.1.0] – 2024-01-01                  ┐ version section
    ### Features                             │
    - Add quiz export (#41)                  ┘

Sections start at any line beginning with ``##`` that is not ``###``,
so category headings inside a section never end it. The end of the
text ends the last section.

:func:`parse_document` is lossless apart from line endings
(``\\r\\n`` becomes ``\\n``, and the text always ends with one newline
when non-empty). :func:`normalize_document` adds the canonical header
and staging section where missing and fixes the blank-line layout of
the header and the staging section. Version sections are never
touched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

STAGING_TITLE = '## [Unreleased]'
DEFAULT_TITLE = '# Changelog'
DEFAULT_INTRO = 'All notable changes to this project will be documented in this file.'

_SECTION_RE = re.compile(r'^##(?!#)')
_STAGING_RE = re.compile(r'^##\s*\[?\s*unreleased\s*\]?\s*$', re.IGNORECASE)
_DOCUMENT_TITLE_RE = re.compile(r'^#(?!#)\s*\S')
_CATEGORY_RE = re.compile(r'^###(?!#)\s*(?P<name>.*?)\s*$')
_ENTRY_RE = re.compile(r'^\s*[-*+]\s+')


def _split_lines(text: str) -> list[str]:
    """Split on ``\\n``, ``\\r\\n`` and ``\\r`` only."""
    if not text:
        return []
    lines = text.replace('\r\n', '\n').replace('\r', '\n').split('\n')
    if lines[-1] == '':
        lines.pop()
    return lines


def _is_blank(line: str) -> bool:
    return not line.strip()


def _trim_blank(lines: tuple[str, ...] | list[str]) -> tuple[str, ...]:
    """Drop leading and trailing blank lines."""
    start, end = 0, len(lines)
    while start < end and _is_blank(lines[start]):
        start += 1
    while end > start and _is_blank(lines[end - 1]):
        end -= 1
    return tuple(lines[start:end])


def is_section_heading(line: str) -> bool:
    """Whether *line* opens a new ``##`` section."""
    return bool(_SECTION_RE.match(line))


def is_staging_heading(line: str) -> bool:
    """Whether *line* is ``## [Unreleased]`` or ``## Unreleased`` (any case).

    >>> is_staging_heading('## unreleased')
    True
    >>> is_staging_heading('## [ Unreleased ]')
    True
    >>> is_staging_heading('### Unreleased')
    False
    """
    return bool(_STAGING_RE.match(line.strip()))


@dataclass(frozen=True)
class Section:
    """A ``##`` section.

    Attributes:
        title: The heading line as written (e.g. ``## [0.1.0] – 2024-01-01``).
        lines: Body lines following the heading, up to the next section.
    """

    title: str
    lines: tuple[str, ...] = ()

    @property
    def is_staging(self) -> bool:
        """Whether this is the ``Unreleased`` section."""
        return is_staging_heading(self.title)

    @property
    def body(self) -> str:
        """The raw body text, newline-terminated when non-empty."""
        return ''.join(f'{line}\n' for line in self.lines)

    @property
    def content_lines(self) -> tuple[str, ...]:
        """Body lines without leading or trailing blank lines."""
        return _trim_blank(self.lines)

    @property
    def content(self) -> str:
        """The trimmed body, ending with a single newline when non-empty."""
        return ''.join(f'{line}\n' for line in self.content_lines)

    @property
    def is_empty(self) -> bool:
        """Whether the body holds nothing but whitespace."""
        return not self.content_lines


@dataclass(frozen=True)
class Document:
    """A parsed changelog: header lines plus ordered sections."""

    header: tuple[str, ...] = ()
    sections: tuple[Section, ...] = ()

    @property
    def staging_index(self) -> int:
        """Index of the first staging section, or ``-1``."""
        for i, section in enumerate(self.sections):
            if section.is_staging:
                return i
        return -1

    @property
    def staging(self) -> Section | None:
        """The staging section, if present."""
        idx = self.staging_index
        return self.sections[idx] if idx >= 0 else None

    @property
    def version_sections(self) -> tuple[Section, ...]:
        """Every section that is not a staging section."""
        return tuple(s for s in self.sections if not s.is_staging)

    def with_section(self, index: int, section: Section) -> Document:
        """Return a copy with the section at *index* replaced."""
        sections = list(self.sections)
        sections[index] = section
        return replace(self, sections=tuple(sections))

    def render(self) -> str:
        """Serialize back to text."""
        lines = list(self.header)
        for section in self.sections:
            lines.append(section.title)
            lines.extend(section.lines)
        return ''.join(f'{line}\n' for line in lines)


def parse_document(text: str) -> Document:
    """Parse changelog text into a :class:`Document`.

    Never fails: text without any section is all header, and empty
    text is an empty document.
    """
    header: list[str] = []
    sections: list[Section] = []
    title: str | None = None
    body: list[str] = []

    for line in _split_lines(text):
        if is_section_heading(line):
            if title is not None:
                sections.append(Section(title=title, lines=tuple(body)))
            title = line.rstrip()
            body = []
        elif title is None:
            header.append(line)
        else:
            body.append(line)

    if title is not None:
        sections.append(Section(title=title, lines=tuple(body)))
    return Document(header=tuple(header), sections=tuple(sections))


def _normalize_header(header: tuple[str, ...]) -> tuple[str, ...]:
    content = _trim_blank(header)
    if not any(_DOCUMENT_TITLE_RE.match(line) for line in content):
        defaults = (DEFAULT_TITLE, DEFAULT_INTRO)
        content = (*defaults, '', *content) if content else defaults
    return (*content, '')


def _staging_lines(content: tuple[str, ...], *, last: bool) -> tuple[str, ...]:
    """Canonical staging body: blank, content, blank separator."""
    lines: tuple[str, ...] = ('', *content) if content else ()
    return lines if last else (*lines, '')


def normalize_document(document: Document) -> Document:
    """Bring a document into canonical form.

    Guarantees a title header, exactly one staging section (inserted
    first when missing; later duplicates are folded into the first),
    one blank line between the header and the first section, and a
    staging body of ``blank, content, blank`` (no trailing blank when
    it is the last section). Idempotent.
    """
    sections = list(document.sections)
    staging_indices = [i for i, s in enumerate(sections) if s.is_staging]

    if not staging_indices:
        sections.insert(0, Section(title=STAGING_TITLE))
        idx = 0
    else:
        idx = staging_indices[0]
        merged = list(sections[idx].content_lines)
        for extra in staging_indices[1:]:
            extra_content = sections[extra].content_lines
            if extra_content:
                merged.extend(['', *extra_content] if merged else extra_content)
        for extra in reversed(staging_indices[1:]):
            del sections[extra]
        sections[idx] = Section(title=sections[idx].title, lines=tuple(merged))

    staging = sections[idx]
    sections[idx] = Section(
        title=staging.title,
        lines=_staging_lines(staging.content_lines, last=idx == len(sections) - 1),
    )
    return Document(header=_normalize_header(document.header), sections=tuple(sections))


def normalize(text: str) -> str:
    """Normalize changelog text; ``normalize(normalize(x)) == normalize(x)``."""
    return normalize_document(parse_document(text)).render()


def minimal_document() -> Document:
    """The smallest valid document: default header plus empty staging."""
    return normalize_document(Document())


@dataclass(frozen=True)
class CategoryBlock:
    """A ``### Name`` subsection of the staging section.

    Attributes:
        heading: The heading line as written (e.g. ``### Fixes``).
        lines: Lines up to the next category heading.
    """

    heading: str
    lines: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        """The category name with display casing."""
        match = _CATEGORY_RE.match(self.heading)
        return match.group('name') if match else self.heading.lstrip('#').strip()

    @property
    def entries(self) -> tuple[str, ...]:
        """The bullet lines of this block."""
        return tuple(line for line in self.lines if _ENTRY_RE.match(line))

    def matches(self, category: str) -> bool:
        """Case-insensitive name comparison."""
        return self.name.lower() == category.strip().lower()


@dataclass(frozen=True)
class StagingBody:
    """The staging section content split into category blocks.

    Attributes:
        preamble: Lines before the first category heading.
        blocks: Category blocks in document order.
    """

    preamble: tuple[str, ...] = ()
    blocks: tuple[CategoryBlock, ...] = ()

    @classmethod
    def parse(cls, lines: tuple[str, ...] | list[str]) -> StagingBody:
        """Split staging lines on ``###`` headings (``####`` does not split)."""
        preamble: list[str] = []
        blocks: list[CategoryBlock] = []
        heading: str | None = None
        body: list[str] = []
        for line in lines:
            if _CATEGORY_RE.match(line):
                if heading is not None:
                    blocks.append(CategoryBlock(heading=heading, lines=tuple(body)))
                heading = line.rstrip()
                body = []
            elif heading is None:
                preamble.append(line)
            else:
                body.append(line)
        if heading is not None:
            blocks.append(CategoryBlock(heading=heading, lines=tuple(body)))
        return cls(preamble=tuple(preamble), blocks=tuple(blocks))

    def find(self, category: str) -> int:
        """Index of the first block named *category*, or ``-1``."""
        for i, block in enumerate(self.blocks):
            if block.matches(category):
                return i
        return -1

    @property
    def names(self) -> list[str]:
        """Block names in order."""
        return [block.name for block in self.blocks]

    def render_lines(self) -> tuple[str, ...]:
        """Flatten back to lines."""
        lines = list(self.preamble)
        for block in self.blocks:
            lines.append(block.heading)
            lines.extend(block.lines)
        return tuple(lines)


__all__ = [
    'CategoryBlock',
    'DEFAULT_INTRO',
    'DEFAULT_TITLE',
    'Document',
    'STAGING_TITLE',
    'Section',
    'StagingBody',
    'is_section_heading',
    'is_staging_heading',
    'minimal_document',
    'normalize',
    'normalize_document',
    'parse_document',
]
