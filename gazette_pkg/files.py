"""
Source tree discovery.

Decides which files under a site root take part in a build using gitignore
style rules, and provides the small file helpers the build relies on.
"""

import os
import re
import shutil
import logging
from enum import Enum

from .errors import ConfigurationError, SourceReadError

logger = logging.getLogger(__name__)

# Names excluded unless a later rule whitelists them.
HIDDEN_PATTERNS = ['.*', '_*']


class Match(Enum):
    NONE = 'none'
    IGNORE = 'ignore'
    WHITELIST = 'whitelist'


class IgnoreRule:
    """A single compiled gitignore line."""

    def __init__(self, original, regex, whitelist=False, dir_only=False):
        self.original = original
        self.regex = regex
        self.whitelist = whitelist
        self.dir_only = dir_only

    def __repr__(self):
        return f"IgnoreRule({self.original!r})"

    def matches(self, rel_path, is_dir):
        if self.dir_only and not is_dir:
            return False
        return self.regex.match(rel_path) is not None

    @classmethod
    def parse(cls, line):
        """Compile a gitignore line, returning None for blanks and comments."""
        original = line
        line = line.rstrip('\r\n')
        # Trailing spaces are insignificant unless escaped.
        if not line.endswith('\\ '):
            line = line.rstrip(' ')
        if not line or line.startswith('#'):
            return None

        whitelist = False
        if line.startswith('!'):
            whitelist = True
            line = line[1:]
        elif line.startswith('\\!') or line.startswith('\\#'):
            line = line[1:]

        dir_only = line.endswith('/')
        if dir_only:
            line = line.rstrip('/')
        if not line:
            raise ConfigurationError(f"invalid ignore pattern '{original}'")

        anchored = '/' in line
        line = line.lstrip('/')
        body = _translate_glob(line, original)
        prefix = '' if anchored else '(?:.*/)?'
        regex = re.compile(f"^{prefix}{body}$", re.DOTALL)
        return cls(original, regex, whitelist=whitelist, dir_only=dir_only)


def _translate_glob(pattern, original):
    out = []
    i = 0
    n = len(pattern)
    while i < n:
        if pattern.startswith('**/', i) and (i == 0 or pattern[i - 1] == '/'):
            out.append('(?:.*/)?')
            i += 3
        elif pattern.startswith('**', i) and i + 2 == n and (i == 0 or pattern[i - 1] == '/'):
            out.append('.*')
            i += 2
        elif pattern[i] == '*':
            while i < n and pattern[i] == '*':
                i += 1
            out.append('[^/]*')
        elif pattern[i] == '?':
            out.append('[^/]')
            i += 1
        elif pattern[i] == '[':
            end = pattern.find(']', i + 2)
            if end == -1:
                raise ConfigurationError(f"invalid ignore pattern '{original}': unclosed character class")
            cls_body = pattern[i + 1:end]
            if cls_body.startswith('!'):
                cls_body = '^' + cls_body[1:]
            out.append('[' + cls_body.replace('\\', '\\\\') + ']')
            i = end + 1
        elif pattern[i] == '\\' and i + 1 < n:
            out.append(re.escape(pattern[i + 1]))
            i += 2
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return ''.join(out)


class IgnoreRuleSet:
    """Ordered gitignore rules where the last matching rule wins."""

    def __init__(self, rules=None):
        self.rules = list(rules or [])

    def add_line(self, line):
        rule = IgnoreRule.parse(line)
        if rule is not None:
            self.rules.append(rule)
        return rule

    def matched(self, rel_path, is_dir):
        for rule in reversed(self.rules):
            if rule.matches(rel_path, is_dir):
                return (Match.WHITELIST if rule.whitelist else Match.IGNORE), rule
        return Match.NONE, None


class FilesBuilder:
    """Collects ignore rules and limits, then builds a Files view."""

    def __init__(self, root_dir):
        self.root_dir = root_dir
        self.ignore = []
        self.hidden = True
        self.subtree = None
        self.extensions = []

    def add_ignore(self, line):
        logger.debug(f"{self.root_dir}: adding '{line}' ignore pattern")
        self.ignore.append(line)
        return self

    def ignore_hidden(self, ignore):
        self.hidden = ignore
        return self

    def limit(self, subtree):
        self.subtree = subtree
        return self

    def add_extension(self, ext):
        self.extensions.append(ext.lstrip('.'))
        return self

    def build(self):
        rules = IgnoreRuleSet()
        lines = (HIDDEN_PATTERNS if self.hidden else []) + self.ignore
        for line in lines:
            rules.add_line(line)
        return Files(self.root_dir, rules, subtree=self.subtree, extensions=self.extensions)


class Files:
    """
    The set of files under a root directory that take part in a build.

    A path is included only when every directory between it and the root is
    included as well, so an ignored directory cannot be re-entered by a rule
    that targets one of its children.
    """

    def __init__(self, root_dir, rules, subtree=None, extensions=None):
        self.root_dir = os.path.abspath(root_dir)
        self.rules = rules
        self.subtree = os.path.abspath(subtree) if subtree else None
        self.extensions = list(extensions or [])

    def __iter__(self):
        return self.files()

    def root(self):
        return self.root_dir

    def walk_root(self):
        return self.subtree or self.root_dir

    def includes_file(self, path):
        if not self._ext_contains(path):
            return False
        if not self._in_subtree(path):
            return False
        return self._includes_path(os.path.abspath(path), False)

    def includes_dir(self, path):
        if not self._in_subtree(path):
            return False
        return self._includes_path(os.path.abspath(path), True)

    def files(self):
        """Yield included file paths, sorted by name within each directory."""
        start = self.walk_root()
        if not os.path.isdir(start) or not self._includes_path(start, True):
            return
        yield from self._walk(start)

    def _walk(self, directory):
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            raise SourceReadError(directory, e)

        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                if self._includes_leaf(entry.path, True):
                    yield from self._walk(entry.path)
            elif entry.is_file():
                if self._ext_contains(entry.path) and self._includes_leaf(entry.path, False):
                    yield entry.path

    def _ext_contains(self, path):
        if not self.extensions:
            return True
        ext = os.path.splitext(path)[1].lstrip('.')
        return ext in self.extensions

    def _in_subtree(self, path):
        if self.subtree is None:
            return True
        return _is_within(os.path.abspath(path), self.subtree)

    def _relative(self, path):
        rel = os.path.relpath(path, self.root_dir)
        return rel.replace(os.sep, '/')

    def _includes_path(self, path, is_dir):
        if path == self.root_dir:
            return True
        if not _is_within(path, self.root_dir):
            return False
        parent = os.path.dirname(path)
        if parent != self.root_dir and not self._includes_path(parent, True):
            return False
        return self._includes_leaf(path, is_dir)

    def _includes_leaf(self, path, is_dir):
        match, rule = self.rules.matched(self._relative(path), is_dir)
        if match is Match.IGNORE:
            logger.debug(f"{path}: ignored by '{rule.original}'")
            return False
        if match is Match.WHITELIST:
            logger.debug(f"{path}: allowed by '{rule.original}'")
        return True


def _is_within(path, root):
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


def cleanup_path(path):
    """Strip leading './' segments, mapping '.' to the empty path."""
    while path.startswith('./'):
        path = path[2:]
    return '' if path == '.' else path


def find_project_file(directory, name):
    """Search `directory` and its parents for `name`."""
    current = os.path.abspath(directory)
    while True:
        candidate = os.path.join(current, name)
        if os.path.exists(candidate):
            return candidate
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def read_file(path):
    """Read a UTF-8 text file with line endings normalised to '\\n'."""
    try:
        with open(path, 'r', encoding='utf-8', newline='') as f:
            text = f.read()
    except (IOError, OSError, UnicodeDecodeError) as e:
        raise SourceReadError(path, e)
    return text.replace('\r\n', '\n').replace('\r', '\n')


def write_document_file(content, dest_file):
    try:
        os.makedirs(os.path.dirname(dest_file) or '.', exist_ok=True)
        with open(dest_file, 'w', encoding='utf-8') as f:
            f.write(content)
    except (IOError, OSError) as e:
        raise SourceReadError(dest_file, e)
    logger.debug(f"Wrote {dest_file}")


def copy_file(src_file, dest_file):
    try:
        os.makedirs(os.path.dirname(dest_file) or '.', exist_ok=True)
        logger.debug(f"Copying {src_file} to {dest_file}")
        shutil.copy2(src_file, dest_file)
    except (IOError, OSError) as e:
        raise SourceReadError(src_file, e)
