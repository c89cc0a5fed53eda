import logging
import os
import traceback

from abc import ABCMeta, abstractmethod
from typing import Callable, Generic, List, Optional, TypeVar, Union

from atmfjstc.lib.fluent_codegen.BuildContext import BuildContext
from atmfjstc.lib.fluent_codegen.errors import BuilderClosedTwiceError, BuilderMisuseError, IncompleteBuilderError, \
    UnclosedBuilderError
from atmfjstc.lib.fluent_codegen.ast.base import Fragment
from atmfjstc.lib.fluent_codegen.ast.raw import Word


LOG = logging.getLogger(__name__)

R = TypeVar('R')

Value = Union[str, int, float, bool, Fragment]


class Builder(Generic[R], metaclass=ABCMeta):
    """
    Base class for all fluent builders.

    A builder accumulates the parts of some construct through chained calls, until one of its *terminal* operations is
    called. The terminal assembles the fragment for the construct and hands it to the builder's *continuation*, a
    function that was supplied by whoever created the builder. Whatever the continuation returns is what the terminal
    returns. For a top-level builder, the continuation simply returns the fragment; for a builder spawned by another,
    it stores the fragment in the parent and returns the parent, so that the chain of calls can continue there.

    Rules:

    - A builder can be closed exactly once. Calling a terminal again raises `BuilderClosedTwiceError`, every time.
    - A terminal called before all required parts are provided raises `IncompleteBuilderError` and leaves the builder
      open. This includes the case where a child builder opened from this one has not been closed yet.
    - Once a builder is closed, its children can no longer deliver their fragments to it (`BuilderMisuseError`)
    - Builders can also be used in a ``with`` statement or run through a callback (see `run_scoped`). In that case, a
      builder left open at the end of the scope is closed in the default way appropriate for its kind, or, if there
      is no sensible default, `UnclosedBuilderError` is raised.
    """

    _continuation: Callable[[Fragment], R]
    _context: BuildContext
    _closed_by: Optional[str]
    _children: List['Builder']

    def __init__(self, continuation: Callable[[Fragment], R], context: Optional[BuildContext] = None):
        self._continuation = continuation
        self._context = BuildContext() if context is None else context
        self._closed_by = None
        self._children = []

        self._context.register_open(self)

    @property
    def context(self) -> BuildContext:
        return self._context

    @property
    def is_closed(self) -> bool:
        return self._closed_by is not None

    def describe(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def _build_fragment(self) -> Fragment:
        """
        Assembles the fragment for the construct. Raises `IncompleteBuilderError` or `FragmentShapeError` if the
        parts supplied so far do not make for a complete construct.
        """
        raise NotImplementedError

    def _finish(self, terminal: str) -> R:
        self._check_can_finish(terminal)

        fragment = self._build_fragment()

        self._closed_by = terminal
        self._context.register_closed(self)

        return self._continuation(fragment)

    def _check_can_finish(self, terminal: str):
        if self._closed_by is not None:
            raise BuilderClosedTwiceError(self, terminal, self._closed_by)

        self._check_children_closed()

    def _check_open(self):
        if self._closed_by is not None:
            raise BuilderMisuseError(
                f"{self.describe()} was already closed by '{self._closed_by}()' and cannot be altered"
            )

    def _check_children_closed(self):
        pending = [child for child in self._children if not child.is_closed]

        if len(pending) > 0:
            raise IncompleteBuilderError(
                self, "the closing of " + ', '.join(child.describe() for child in pending) + " opened from it"
            )

    def _close_by_default(self):
        raise UnclosedBuilderError([self.describe()], "it has no default way of being closed")

    def _child(self, child: 'Builder') -> 'Builder':
        """Records a builder whose fragment will be delivered to this one, so that it cannot be left behind"""
        self._children.append(child)

        return child

    def _spawn(self, child: 'Builder', body: Optional[Callable[['Builder'], None]]):
        """
        Returns a newly created child builder (direct style), or, if a callback is given, runs the callback on it and
        returns this builder (scoped style).
        """
        self._child(child)

        if body is None:
            return child

        run_scoped(child, body)

        return self

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if (exc_type is None) and not self.is_closed:
            close_by_default(self)

        return False


def close_by_default(builder: Builder):
    LOG.debug("Closing %s by default at end of scope", builder.describe())
    builder._close_by_default()


def run_scoped(
    builder: Builder, body: Callable[[Builder], None], default_close: Optional[Callable[[Builder], None]] = None
):
    """
    Runs a callback that is supposed to fill in and (possibly) close a builder. If the builder is still open after the
    callback returns, it is closed using `default_close` or, if that is not given, the default way for its kind.

    If the callback raises, the builder is left as-is.
    """
    body(builder)

    if builder.is_closed:
        return

    if default_close is None:
        close_by_default(builder)
    else:
        LOG.debug("Closing %s at end of callback", builder.describe())
        default_close(builder)


def fragment_result(fragment: Fragment) -> Fragment:
    """The continuation used by top-level builders: the terminal simply returns the finished fragment"""
    return fragment


def value_fragment(value: Value) -> Fragment:
    """
    Converts a simple value to a fragment: booleans become ``true``/``false``, numbers and strings become words, and
    fragments are passed through.
    """
    if isinstance(value, Fragment):
        return value
    if isinstance(value, bool):
        return Word('true' if value else 'false')
    if isinstance(value, (int, float)):
        return Word(str(value))

    return Word(value)


_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def caller_location() -> str:
    """Describes the first frame on the call stack that is outside this library, e.g. ``gen.py:12 (make_class)``"""
    for frame in reversed(traceback.extract_stack()):
        if not os.path.abspath(frame.filename).startswith(_PACKAGE_DIR):
            return f"{os.path.basename(frame.filename)}:{frame.lineno} ({frame.name})"

    return '<unknown>'
