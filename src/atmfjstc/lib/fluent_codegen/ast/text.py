from textwrap import dedent

from atmfjstc.lib.py_lang_utils.iteration import iter_with_first
from atmfjstc.lib.text_utils import split_paragraphs, check_single_line

from atmfjstc.lib.fluent_codegen.ast.base import Fragment


class DocComment(Fragment):
    """
    A documentation comment whose text is reflowed so as to take up all the available width.

    Rendering looks like::

        /**
         * First paragraph, reflowed within
         * the column budget.
         *
         * Second paragraph.
         */

    Notes:

    - The text will automatically be dedent-ed (thus you can use triple-quote strings to specify it)
    - Lines of text separated by a single newline are merged into a single reflowable paragraph. Paragraphs are
      separated by more than one newline.
    - If the text is blank, nothing is rendered
    """
    AST_NODE_CONFIG = (
        ('PARAM', 'text', dict(type=str)),
        ('PARAM', 'head', dict(type=str, check=check_single_line, default='/**')),
        ('PARAM', 'prefix', dict(type=str, check=check_single_line, default=' * ')),
        ('PARAM', 'tail', dict(type=str, check=check_single_line, default=' */')),
    )

    def render(self, engine):
        text = dedent(self.text).strip()
        if text == '':
            return

        engine.maybe_newline()
        engine.append_raw(self.head)

        with engine.with_wrap_prefix(self.prefix):
            for paragraph, is_first in iter_with_first(split_paragraphs(text)):
                if not is_first:
                    engine.on_new_line()

                engine.on_new_line()

                for word in paragraph.split():
                    engine.word(word, hanging_wrap=False)

        engine.newline()
        engine.append_raw(self.tail)
        engine.newline()
