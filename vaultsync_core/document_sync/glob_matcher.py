"""
Copyright 2024, Zep Software, Inc.

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

import logging
import os
import re
from pathlib import Path

from vaultsync_core.config.settings import CONFIG_FILE_NAMES
from vaultsync_core.errors import BaseDirectoryError, PatternError
from vaultsync_core.helpers import posix_relative

logger = logging.getLogger(__name__)

# A '*' or '**' never matches a path segment that starts with a dot
_GLOBSTAR_DIRS = r'(?:(?!\.)[^/]+/)*'
_GLOBSTAR_TAIL = r'(?:(?!\.)[^/]+(?:/(?!\.)[^/]+)*)?'


def is_config_file(entry: str) -> bool:
    """True for the loader's own settings files at the root of the base directory."""
    if entry.startswith('./'):
        entry = entry[2:]
    return entry in CONFIG_FILE_NAMES


def expand_braces(pattern: str) -> list[str]:
    """
    Expand the first top-level {a,b} group and recurse.

    >>> expand_braces('notes/*.{md,mdx}')
    ['notes/*.md', 'notes/*.mdx']
    """
    depth = 0
    start = -1
    escaped = False
    for index, char in enumerate(pattern):
        if escaped:
            escaped = False
            continue
        if char == '\\':
            escaped = True
            continue
        if char == '{':
            if depth == 0:
                start = index
            depth += 1
        elif char == '}' and depth > 0:
            depth -= 1
            if depth == 0:
                options = _split_top_level(pattern[start + 1 : index])
                if len(options) < 2:
                    # no comma: keep the braces literally
                    continue
                prefix, suffix = pattern[:start], pattern[index + 1 :]
                expanded: list[str] = []
                for option in options:
                    expanded.extend(expand_braces(prefix + option + suffix))
                return expanded
    return [pattern]


def _split_top_level(body: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current = ''
    for char in body:
        if char == ',' and depth == 0:
            parts.append(current)
            current = ''
            continue
        if char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
        current += char
    parts.append(current)
    return parts


def _translate_segment(segment: str) -> str:
    out = ''
    if segment[:1] in ('*', '?', '['):
        out += r'(?!\.)'

    i = 0
    while i < len(segment):
        char = segment[i]
        if char == '\\' and i + 1 < len(segment):
            out += re.escape(segment[i + 1])
            i += 2
            continue
        if char == '*':
            while i + 1 < len(segment) and segment[i + 1] == '*':
                i += 1
            out += '[^/]*'
        elif char == '?':
            out += '[^/]'
        elif char == '[':
            end = segment.find(']', i + 2 if segment[i + 1 : i + 2] in ('!', '^', ']') else i + 1)
            if end == -1:
                out += re.escape(char)
            else:
                body = segment[i + 1 : end]
                if body[:1] in ('!', '^'):
                    body = '^' + body[1:]
                out += '[' + body.replace('\\', '\\\\') + ']'
                i = end
        else:
            out += re.escape(char)
        i += 1
    return out


def translate(pattern: str) -> str:
    """Translate one brace-free glob into an anchored regular expression."""
    segments = pattern.split('/')
    regex = ''
    for index, segment in enumerate(segments):
        last = index == len(segments) - 1
        if segment == '**':
            regex += _GLOBSTAR_TAIL if last else _GLOBSTAR_DIRS
            continue
        regex += _translate_segment(segment)
        if not last:
            regex += '/'
    return rf'\A{regex}\Z'


class GlobMatcher:
    """
    Compiled include pattern(s) for entries under a base directory.

    Patterns prefixed with '!' exclude matches of the other patterns.
    Paths escaping the base and the loader's own config files never match.
    """

    def __init__(self, pattern: str | list[str]):
        patterns = [pattern] if isinstance(pattern, str) else list(pattern)
        if not patterns:
            raise PatternError('', 'no pattern given')

        self.patterns = patterns
        self._includes: list[re.Pattern[str]] = []
        self._excludes: list[re.Pattern[str]] = []
        self._allow_dot_dirs = False

        for raw in patterns:
            negated = raw.startswith('!')
            glob = raw[1:] if negated else raw
            glob = glob[2:] if glob.startswith('./') else glob
            if not glob.strip():
                raise PatternError(raw, 'empty pattern')
            if glob.startswith('/') or glob.startswith('../'):
                raise PatternError(raw, 'pattern must be relative to the base directory')

            for expanded in expand_braces(glob):
                if any(segment.startswith('.') for segment in expanded.split('/')[:-1]):
                    self._allow_dot_dirs = True
                try:
                    compiled = re.compile(translate(expanded))
                except re.error as e:
                    raise PatternError(raw, str(e)) from e
                (self._excludes if negated else self._includes).append(compiled)

        if not self._includes:
            raise PatternError(', '.join(patterns), 'only negated patterns given')

    def matches(self, entry: str) -> bool:
        entry = entry.replace('\\', '/')
        if entry.startswith('./'):
            entry = entry[2:]
        if not entry or entry == '..' or entry.startswith('../') or entry.startswith('/'):
            return False
        if is_config_file(entry):
            return False
        if not any(regex.match(entry) for regex in self._includes):
            return False
        return not any(regex.match(entry) for regex in self._excludes)

    def enumerate(self, base_dir: str | Path) -> list[str]:
        """Relative POSIX paths of every matching file under base_dir, sorted."""
        base = Path(base_dir)
        if not base.is_dir():
            raise BaseDirectoryError(str(base))

        entries: list[str] = []
        for dirpath, dirnames, filenames in os.walk(base):
            if not self._allow_dot_dirs:
                dirnames[:] = [name for name in dirnames if not name.startswith('.')]
            dirnames.sort()
            for filename in sorted(filenames):
                entry = posix_relative(base, os.path.join(dirpath, filename))
                if self.matches(entry):
                    entries.append(entry)

        logger.debug(f'Matched {len(entries)} entries under {base}')
        return entries
