from atmfjstc.lib.py_lang_utils.iteration import iter_with_last
from atmfjstc.lib.text_utils import check_single_line

from atmfjstc.lib.fluent_codegen.ast.base import Fragment


class Composite(Fragment):
    """
    An ordered group of fragments that are rendered one after the other, with no separators other than what the
    fragments themselves produce.

    The items are never reordered. A None item is rejected when the composite is created.
    """
    AST_NODE_CONFIG = (
        ('CHILD_LIST', 'items', dict(type=Fragment)),
    )

    def render(self, engine):
        for item in self.items:
            item.render(engine)


class Joined(Fragment):
    """
    A list of fragments separated by a joiner (by default a comma, which snaps onto the preceding item).
    """
    AST_NODE_CONFIG = (
        ('CHILD_LIST', 'items', dict(type=Fragment)),
        ('PARAM', 'joiner', dict(type=str, check=check_single_line, default=',')),
    )

    def render(self, engine):
        for item, is_last in iter_with_last(self.items):
            item.render(engine)

            if not is_last:
                engine.append_raw(self.joiner)


class Wrappable(Fragment):
    """
    Renders the content in a wrap region. Lines wrapped inside nested regions are indented progressively deeper.
    """
    AST_NODE_CONFIG = (
        ('CHILD', 'content', dict(type=Fragment)),
    )

    def render(self, engine):
        with engine.wrappable():
            self.content.render(engine)


class HangingWrap(Fragment):
    """
    Renders the content such that any line wrapped (or explicitly started with `OnNewLine`) inside it gets one extra
    level of indentation (two if `double` is set).
    """
    AST_NODE_CONFIG = (
        ('CHILD', 'content', dict(type=Fragment)),
        ('PARAM', 'double', dict(type=bool, default=False)),
    )

    def render(self, engine):
        with (engine.double_hanging_wrap() if self.double else engine.hanging_wrap()):
            self.content.render(engine)


class Delimited(Fragment):
    """
    Renders the content between an opening and a closing delimiter. For parentheses, the words inside are always
    eligible for hanging wraps.
    """
    AST_NODE_CONFIG = (
        ('CHILD', 'content', dict(type=Fragment)),
        ('PARAM', 'opening', dict(type=str, check=check_single_line, default='(')),
        ('PARAM', 'closing', dict(type=str, check=check_single_line, default=')')),
    )

    def render(self, engine):
        if (self.opening, self.closing) == ('(', ')'):
            region = engine.parens()
        else:
            region = engine.delimit(self.opening, self.closing)

        with region:
            self.content.render(engine)


class Statement(Fragment):
    """
    A statement: starts on a new line, wraps as needed, and ends with a single terminator.
    """
    AST_NODE_CONFIG = (
        ('CHILD', 'content', dict(type=Fragment)),
    )

    def render(self, engine):
        with engine.statement():
            self.content.render(engine)


class NewStatement(Fragment):
    """Starts a new line if the preceding text ended a statement"""
    AST_NODE_CONFIG = ()

    def render(self, engine):
        engine.newline_if_new_statement()


class OnNewLine(Fragment):
    AST_NODE_CONFIG = ()

    def render(self, engine):
        engine.on_new_line()


class Newline(Fragment):
    AST_NODE_CONFIG = ()

    def render(self, engine):
        engine.newline()


class BlankLine(Fragment):
    AST_NODE_CONFIG = ()

    def render(self, engine):
        engine.double_newline()


class LineComment(Fragment):
    """
    A line comment. A regular comment starts on its own line and its text is reflowed; a trailing comment is placed at
    the end of the current line.
    """
    AST_NODE_CONFIG = (
        ('PARAM', 'text', dict(type=str, check=check_single_line)),
        ('PARAM', 'trailing', dict(type=bool, default=False)),
    )

    def render(self, engine):
        engine.line_comment(self.text, trailing=self.trailing)


def seq(*items) -> Composite:
    """Convenience function for instantiating a Composite"""
    return Composite(items)


def parens(*items) -> Delimited:
    """Convenience function for wrapping a sequence of items in parentheses"""
    return Delimited(Composite(items))


def comma_list(*items) -> Joined:
    return Joined(items)
