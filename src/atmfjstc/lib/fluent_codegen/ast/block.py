from atmfjstc.lib.text_utils import check_single_line, check_nonempty_str

from atmfjstc.lib.fluent_codegen.ast.base import Fragment


class Block(Fragment):
    """
    A braced block: the opening brace is placed at the end of the current line, the content is indented one level
    deeper, and the closing brace goes on its own line at the original depth.

    If `leading_blank_line` is set, a blank line separates the opening brace from the content.
    """
    AST_NODE_CONFIG = (
        ('CHILD', 'content', dict(type=Fragment)),
        ('PARAM', 'leading_blank_line', dict(type=bool, default=False)),
    )

    def render(self, engine):
        with engine.block(self.leading_blank_line):
            self.content.render(engine)


def _check_case_label(label):
    if label is not None:
        check_nonempty_str(label, 'case label')
        check_single_line(label, 'case label')


class SwitchCase(Fragment):
    """
    A case in a switch statement: one or more labels (None standing for the default case) followed by the indented,
    brace-less content.
    """
    AST_NODE_CONFIG = (
        ('PARAM', 'labels', dict(type=tuple)),
        ('CHILD', 'content', dict(type=Fragment)),
    )

    def _sanity_check_post_init(self):
        if len(self.labels) == 0:
            raise ValueError("A switch case must have at least one label")

        for label in self.labels:
            _check_case_label(label)

    def render(self, engine):
        with engine.switch_case(self.labels):
            self.content.render(engine)
