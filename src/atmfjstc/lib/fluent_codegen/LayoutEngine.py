from contextlib import contextmanager
from typing import ContextManager, Iterable, Optional

from atmfjstc.lib.py_lang_utils.iteration import iter_with_first

from atmfjstc.lib.fluent_codegen.LayoutSettings import LayoutSettings, DEFAULT_SETTINGS


class LayoutEngine:
    """
    A column-tracking text buffer that lays out generated code as it is being emitted.

    The engine is fed a stream of elementary operations (words, raw text, punctuation, newlines, blocks etc.) and
    takes care of:

    - Spacing between words (a single space, except after whitespace or an opening delimiter)
    - Wrapping words that would extend past the column budget onto a new, suitably indented line
    - Indentation of blocks
    - Attaching punctuation to the previous token, even if whitespace or line breaks were emitted since
    - Not doubling newlines and blank lines

    Each engine is meant to be used for a single render pass. It is not thread-safe.

    Notes:

    - The column is computed by scanning back to the last newline, only when a wrap decision needs to be made
    - The engine never raises for text that is too wide; a word that cannot fit on any line is simply placed on a line
      of its own
    - The structured operations (`block`, `statement`, `wrappable` etc.) are context managers. They restore the
      engine's counters even if their body raises, but the text emitted up to that point is left as-is.
    """

    _settings: LayoutSettings
    _buffer: list
    _depth: int
    _wrap_depth: int
    _hanging_levels: int
    _in_parens: bool
    _wrap_prefix: Optional[str]
    _wrappable_entry_position: int

    def __init__(self, settings: Optional[LayoutSettings] = None):
        self._settings = DEFAULT_SETTINGS if settings is None else settings
        self._buffer = []
        self._depth = 0
        self._wrap_depth = 0
        self._hanging_levels = 0
        self._in_parens = False
        self._wrap_prefix = None
        self._wrappable_entry_position = -1

    @property
    def settings(self) -> LayoutSettings:
        return self._settings

    @property
    def line_limit(self) -> int:
        return self._settings.line_limit

    @property
    def indent_by(self) -> int:
        return self._settings.indent

    @property
    def text(self) -> str:
        return ''.join(self._buffer)

    @property
    def depth(self) -> int:
        """The current block indentation depth (in indent units)"""
        return self._depth

    @property
    def wrap_depth(self) -> int:
        """The number of nested wrap regions currently open"""
        return self._wrap_depth

    @property
    def column(self) -> int:
        """The number of characters on the current (last) line"""
        index = len(self._buffer) - 1
        while index >= 0 and self._buffer[index] != '\n':
            index -= 1

        return len(self._buffer) - index - 1

    def __str__(self):
        return self.text

    def last_non_whitespace_char(self) -> Optional[str]:
        index = self._last_non_whitespace_index()

        return None if index < 0 else self._buffer[index]

    def is_on_new_line(self) -> bool:
        """True if nothing but indentation has been emitted since the last newline (or since the beginning)"""
        for char in reversed(self._buffer):
            if char == '\n':
                return True
            if not char.isspace():
                return False

        return True

    def word(self, text: str, hanging_wrap: bool = True) -> 'LayoutEngine':
        """
        Emits a word, i.e. a token that is separated by a space from the previous one (unless that one is whitespace or
        an opening delimiter).

        If the word would extend past the column budget, the line is wrapped first. The new line is indented to the
        current block depth, plus a hanging indent if `hanging_wrap` is set (always the case inside parentheses), plus
        one level for each enclosing wrap region beyond the first, plus the wrap prefix, if any. Indentation levels
        that would push the word past the budget are left out, unless the word is too wide to fit anyway.

        A line that holds nothing but indentation and the wrap prefix counts as a fresh line and is never wrapped.
        """
        if text is None:
            raise TypeError("Cannot emit a None word")
        if text == '':
            return self

        needs_space = self._needs_space_before_word()
        pending = len(text) + (1 if needs_space else 0)

        if not self._maybe_wrap(pending, len(text), hanging_wrap or self._in_parens) and needs_space:
            self._buffer.append(' ')

        self._buffer.extend(text)

        return self

    def word_unless_after(self, text: str, preceding: str, hanging_wrap: bool = True) -> 'LayoutEngine':
        """Emits a word, unless the last non-whitespace character emitted is `preceding`"""
        if self.last_non_whitespace_char() == preceding:
            return self

        return self.word(text, hanging_wrap)

    def append_raw(self, text: str) -> 'LayoutEngine':
        """
        Appends text exactly as given, with no spacing and no wrap check.

        A single character that is one of the settings' attached punctuation marks (by default ``,`` and ``;``) is
        instead attached to the last visible character (see `attach`).
        """
        if (len(text) == 1) and (text in self._settings.attached_punctuation):
            return self.attach(text)

        self._buffer.extend(text)

        return self

    def attach(self, text: str) -> 'LayoutEngine':
        """
        Inserts text immediately after the last non-whitespace character, i.e. before any whitespace or line breaks
        emitted since.
        """
        index = self._last_non_whitespace_index() + 1

        if index > 0:
            self._buffer[index:index] = text
        else:
            self._buffer.extend(text)

        return self

    def backup(self) -> 'LayoutEngine':
        """Removes all trailing whitespace, including newlines"""
        while self._buffer and self._buffer[-1].isspace():
            self._buffer.pop()

        return self

    def backup_if_last_non_whitespace_in(self, chars: str) -> 'LayoutEngine':
        """
        If the last visible character is one of `chars`, removes the whitespace after it. Otherwise, replaces any
        trailing whitespace with a single space.
        """
        last = self.last_non_whitespace_char()

        self.backup()

        if (last is not None) and (last not in chars):
            self._buffer.append(' ')

        return self

    def space(self) -> 'LayoutEngine':
        """Adds a space, unless the last character is whitespace or an opening delimiter"""
        if self._needs_space_before_word():
            self._buffer.append(' ')

        return self

    def newline(self) -> 'LayoutEngine':
        """
        Ensures the buffer ends with exactly one line break followed by the current indentation. Never adds a second
        line break if one is already there, and does nothing on an empty buffer.
        """
        if not self._buffer:
            return self

        self._trim_trailing_spaces()

        if not self._buffer or self._buffer[-1] != '\n':
            self._buffer.append('\n')

        self._indent_line()

        return self

    def double_newline(self) -> 'LayoutEngine':
        """Like `newline`, but ensures exactly one blank line at the end of the buffer"""
        if not self._buffer:
            return self

        self._trim_trailing_spaces()

        trailing = 0
        while (trailing < len(self._buffer)) and (self._buffer[-1 - trailing] == '\n'):
            trailing += 1

        self._buffer.extend('\n' * max(0, 2 - trailing))

        self._indent_line()

        return self

    def maybe_newline(self) -> bool:
        """Starts a new line unless already on one. Returns True if a line break was emitted."""
        if self.is_on_new_line():
            return False

        self.newline()

        return True

    def on_new_line(self) -> 'LayoutEngine':
        """
        Starts a new line (or reuses the current, still empty, one) and prepares it for continuing the current
        construct, i.e. adds any hanging indent and the wrap prefix.
        """
        self.newline()
        self._start_continuation_line(self._hanging_levels)

        return self

    def newline_if_new_statement(self) -> 'LayoutEngine':
        """Starts a new line if the last visible character ends a statement (by default ``;`` or ``}``)"""
        last = self.last_non_whitespace_char()

        if (last is not None) and (last in self._settings.statement_enders):
            self.maybe_newline()

        return self

    def statement_terminator(self) -> 'LayoutEngine':
        """Attaches the statement terminator, unless the last visible text is one already"""
        terminator = self._settings.statement_terminator

        if (terminator != '') and not self._visible_text_ends_with(terminator):
            self.attach(terminator)

        return self

    def line_comment(self, text: str, trailing: bool = False) -> 'LayoutEngine':
        """
        Emits a line comment.

        A regular comment is placed on its own line(s) and its words are wrapped like any other, with the comment prefix
        repeated on each continuation line. A trailing comment is appended to the current line, unwrapped.
        """
        prefix = self._settings.line_comment_prefix

        if trailing:
            self.space()
            self._buffer.extend((prefix + text).rstrip())
            self.newline()
            return self

        self.maybe_newline()
        self._buffer.extend(prefix if text.strip() != '' else prefix.rstrip())

        with self.with_wrap_prefix(prefix):
            for word in text.split():
                self.word(word, hanging_wrap=False)

        self.newline()

        return self

    @contextmanager
    def wrappable(self) -> ContextManager['LayoutEngine']:
        """
        Opens a wrap region. Each nested region adds one level of indentation to lines wrapped inside it (beyond the
        first region). A region opened at the same position where the enclosing one was opened does not deepen it.
        """
        position = len(self._buffer)
        deepen = (position != self._wrappable_entry_position)
        previous_position = self._wrappable_entry_position

        if deepen:
            self._wrap_depth += 1
        self._wrappable_entry_position = position

        try:
            yield self
        finally:
            if deepen:
                self._wrap_depth -= 1
            self._wrappable_entry_position = previous_position

    @contextmanager
    def hanging_wrap(self) -> ContextManager['LayoutEngine']:
        with self._hanging(1):
            yield self

    @contextmanager
    def double_hanging_wrap(self) -> ContextManager['LayoutEngine']:
        with self._hanging(2):
            yield self

    @contextmanager
    def with_wrap_prefix(self, prefix: str) -> ContextManager['LayoutEngine']:
        """Makes every line started by a wrap (or by `on_new_line`) inside this region begin with `prefix`"""
        previous_prefix = self._wrap_prefix
        self._wrap_prefix = prefix

        try:
            yield self
        finally:
            self._wrap_prefix = previous_prefix

    @contextmanager
    def delimit(self, opening: str, closing: str) -> ContextManager['LayoutEngine']:
        self._buffer.extend(opening)

        with self.wrappable():
            yield self

        self._buffer.extend(closing)

    @contextmanager
    def parens(self) -> ContextManager['LayoutEngine']:
        """Like `delimit` for ``(`` and ``)``, except that all words inside are automatically hanging-wrapped"""
        previous_in_parens = self._in_parens
        self._in_parens = True

        try:
            with self.delimit('(', ')'):
                yield self
        finally:
            self._in_parens = previous_in_parens

    @contextmanager
    def statement(self) -> ContextManager['LayoutEngine']:
        """
        Emits a statement: starts it on a new line, makes its content wrappable, and attaches the terminator at the end
        (unless the content already ends with one).
        """
        self.maybe_newline()

        with self.wrappable():
            yield self

        self.statement_terminator()

    @contextmanager
    def block(self, leading_blank_line: bool = False) -> ContextManager['LayoutEngine']:
        """
        Emits a block: the opening brace, the content indented one level deeper, and the closing brace at the original
        depth, followed by a newline.
        """
        if self._buffer and not self._buffer[-1].isspace():
            self._buffer.append(' ')

        self._buffer.extend(self._settings.block_open)
        self._depth += 1

        try:
            if leading_blank_line:
                self.double_newline()
            else:
                self.newline()

            yield self
        finally:
            self._depth -= 1

        self.maybe_newline()
        self._realign_current_line()
        self._buffer.extend(self._settings.block_close)
        self.newline()

    @contextmanager
    def switch_case(self, labels: Iterable[Optional[str]]) -> ContextManager['LayoutEngine']:
        """
        Emits one or more case labels (None stands for the default case) followed by the indented content of the case.
        """
        self.maybe_newline()

        for label, is_first in iter_with_first(labels):
            if not is_first:
                self.newline()

            if label is None:
                self.word('default')
            else:
                self.word('case').word(label)

            self.append_raw(':')

        self._depth += 1

        try:
            self.newline()
            yield self
        finally:
            self._depth -= 1

        self.maybe_newline()
        self._realign_current_line()

    @contextmanager
    def _hanging(self, levels: int):
        previous_levels = self._hanging_levels
        self._hanging_levels = max(previous_levels, levels)

        try:
            yield
        finally:
            self._hanging_levels = previous_levels

    def _maybe_wrap(self, pending: int, length: int, hanging: bool) -> bool:
        if self.is_on_new_line() or self._holds_only_wrap_prefix():
            return False

        limit = self._settings.line_limit
        indent = self._settings.indent

        if self.column + pending <= limit:
            return False

        self.newline()

        column = self.column + (0 if self._wrap_prefix is None else len(self._wrap_prefix))

        # Hanging levels that would push a word that fits the line past the limit are dropped
        hanging_levels = max(self._hanging_levels, 1 if hanging else 0)
        if column + length <= limit:
            while (hanging_levels > 0) and (column + indent * hanging_levels + length > limit):
                hanging_levels -= 1

        column += indent * hanging_levels

        for _ in range(1, self._wrap_depth):
            if column + indent + length > limit:
                break

            self._buffer.extend(' ' * indent)
            column += indent

        self._start_continuation_line(hanging_levels)

        return True

    def _holds_only_wrap_prefix(self) -> bool:
        if self._wrap_prefix is None:
            return False

        line = ''.join(self._buffer[len(self._buffer) - self.column:])

        return line.strip() == self._wrap_prefix.strip()

    def _start_continuation_line(self, hanging_levels: int):
        self._buffer.extend(' ' * (self._settings.indent * hanging_levels))

        if self._wrap_prefix is not None:
            self._buffer.extend(self._wrap_prefix)

    def _needs_space_before_word(self) -> bool:
        if not self._buffer:
            return False

        last = self._buffer[-1]

        return not (last.isspace() or (last in self._settings.opening_delimiters))

    def _last_non_whitespace_index(self) -> int:
        index = len(self._buffer) - 1
        while index >= 0 and self._buffer[index].isspace():
            index -= 1

        return index

    def _visible_text_ends_with(self, text: str) -> bool:
        end = self._last_non_whitespace_index() + 1

        return (end >= len(text)) and (self._buffer[end - len(text):end] == list(text))

    def _trim_trailing_spaces(self):
        while self._buffer and self._buffer[-1] in ' \t':
            self._buffer.pop()

    def _indent_line(self):
        self._buffer.extend(' ' * (self._settings.indent * self._depth))

    def _realign_current_line(self):
        # Only called when on a new line: replaces whatever indentation is there with that of the current depth
        self._trim_trailing_spaces()
        if self._buffer and self._buffer[-1] == '\n':
            self._indent_line()
