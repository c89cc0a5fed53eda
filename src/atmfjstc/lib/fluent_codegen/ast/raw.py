from textwrap import dedent

from atmfjstc.lib.py_lang_utils.iteration import iter_with_last
from atmfjstc.lib.text_utils import check_single_line, check_nonempty_str

from atmfjstc.lib.fluent_codegen.literals import string_literal, char_literal
from atmfjstc.lib.fluent_codegen.ast.base import Fragment


class Word(Fragment):
    """
    A token (identifier, keyword, number etc.) that is space-separated from the previous one and may be wrapped onto a
    new line if it does not fit within the column budget.

    If `hanging_wrap` is set, a line wrapped before this word gets an extra level of indentation.
    """
    AST_NODE_CONFIG = (
        ('PARAM', 'text', dict(type=str, check=(check_nonempty_str, check_single_line))),
        ('PARAM', 'hanging_wrap', dict(type=bool, default=True)),
    )

    def render(self, engine):
        engine.word(self.text, self.hanging_wrap)


class Raw(Fragment):
    """
    Text that is appended as-is, binding tightly to what precedes it. A single attached punctuation mark (e.g. a comma)
    snaps back onto the previous token.
    """
    AST_NODE_CONFIG = (
        ('PARAM', 'text', dict(type=str, check=check_single_line)),
    )

    def render(self, engine):
        engine.append_raw(self.text)


class Punctuation(Fragment):
    """
    A punctuation mark that always attaches right after the last visible character, even if whitespace or line breaks
    were emitted since.
    """
    AST_NODE_CONFIG = (
        ('PARAM', 'mark', dict(type=str, check=(check_nonempty_str, check_single_line))),
    )

    def render(self, engine):
        engine.attach(self.mark)


class Suffix(Fragment):
    """
    Text that is appended after removing any trailing whitespace, e.g. the ``[]`` of an array type.
    """
    AST_NODE_CONFIG = (
        ('PARAM', 'text', dict(type=str, check=(check_nonempty_str, check_single_line))),
    )

    def render(self, engine):
        engine.backup().append_raw(self.text)


class Space(Fragment):
    AST_NODE_CONFIG = ()

    def render(self, engine):
        engine.space()


class Backup(Fragment):
    AST_NODE_CONFIG = ()

    def render(self, engine):
        engine.backup()


class Empty(Fragment):
    """
    A fragment that renders nothing. Useful as a placeholder where omitting a child would be inelegant.
    """
    AST_NODE_CONFIG = ()

    def render(self, engine):
        pass


class StringLiteral(Fragment):
    """A string literal, quoted and escaped according to the layout settings"""
    AST_NODE_CONFIG = (
        ('PARAM', 'value', dict(type=str)),
    )

    def render(self, engine):
        engine.word(string_literal(self.value, engine.settings.string_quote))


def _check_single_char(value):
    return len(value) == 1


class CharLiteral(Fragment):
    AST_NODE_CONFIG = (
        ('PARAM', 'value', dict(type=str, check=_check_single_char)),
    )

    def render(self, engine):
        engine.word(char_literal(self.value))


class Verbatim(Fragment):
    """
    Preformatted text that is placed as-is, line by line, at the current indentation.

    Notes:

    - The text will automatically be dedent-ed (thus you can use triple-quote strings to specify it)
    - Leading and trailing blank lines will be removed, and runs of blank lines inside collapse into a single one
    - The content always starts on a new line and is followed by a newline
    """
    AST_NODE_CONFIG = (
        ('PARAM', 'text', dict(type=str)),
    )

    def render(self, engine):
        lines = dedent(self.text).strip('\n').split('\n')

        if lines == ['']:
            return

        engine.maybe_newline()

        for line, is_last in iter_with_last(lines):
            if line.strip() == '':
                engine.double_newline()
                continue

            engine.append_raw(line.rstrip())

            if not is_last:
                engine.newline()

        engine.newline()
