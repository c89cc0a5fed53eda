from abc import ABCMeta, abstractmethod
from typing import Optional

from atmfjstc.lib.ast import ASTNode

from atmfjstc.lib.fluent_codegen.LayoutEngine import LayoutEngine
from atmfjstc.lib.fluent_codegen.LayoutSettings import LayoutSettings


class Fragment(ASTNode, metaclass=ABCMeta):
    """
    Base class for all the nodes that make up the tree of textual fragments of a generated piece of code.

    Fragments are immutable. They do not render into text by themselves, but rather drive a `LayoutEngine` that takes
    care of spacing, wrapping and indentation. Thus the same fragment can be rendered any number of times, with any
    settings.
    """
    AST_NODE_CONFIG = ('abstract',)

    @abstractmethod
    def render(self, engine: LayoutEngine):
        """
        Renders this fragment by feeding the appropriate operations into a layout engine.

        Args:
            engine: The `LayoutEngine` that receives the text. Only its public operations should be used.
        """
        raise NotImplementedError

    def stringify(self, settings: Optional[LayoutSettings] = None) -> str:
        """
        Renders this fragment into a fresh layout engine and returns the resulting text.
        """
        engine = LayoutEngine(settings)
        self.render(engine)

        return engine.text

    def __str__(self):
        return self.stringify()
