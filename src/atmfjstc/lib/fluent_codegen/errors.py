from typing import Any, Iterable, Optional


class FluentCodegenError(Exception):
    """
    Base class for all exceptions raised by the fluent code generation library.
    """


class BuilderMisuseError(FluentCodegenError):
    """
    Base class for exceptions raised when a builder is used out of protocol (closed twice, closed before all its
    required parts were supplied, abandoned without being closed etc.)
    """


class BuilderClosedTwiceError(BuilderMisuseError):
    builder: Any
    terminal: str
    first_terminal: str

    def __init__(self, builder: Any, terminal: str, first_terminal: str):
        super().__init__(
            f"{describe_builder(builder)} was already closed by '{first_terminal}()', cannot close it again with "
            f"'{terminal}()'"
        )

        self.builder = builder
        self.terminal = terminal
        self.first_terminal = first_terminal


class IncompleteBuilderError(BuilderMisuseError):
    builder: Any
    missing: str

    def __init__(self, builder: Any, missing: str):
        super().__init__(f"{describe_builder(builder)} cannot be completed: missing {missing}")

        self.builder = builder
        self.missing = missing


class UnclosedBuilderError(BuilderMisuseError):
    builders: tuple

    def __init__(self, builders: Iterable[str], detail: Optional[str] = None):
        builders = tuple(builders)

        message = "Builder(s) were never closed: " + ', '.join(builders)
        if detail is not None:
            message += f" ({detail})"

        super().__init__(message)

        self.builders = builders


class FragmentShapeError(FluentCodegenError, ValueError):
    """
    Raised when fragments are composed in a way that breaks a structural builder's contract, e.g. a comparison with no
    right-hand side, a duplicate case label, an unknown modifier etc.
    """


def describe_builder(builder: Any) -> str:
    describe = getattr(builder, 'describe', None)

    return describe() if callable(describe) else builder.__class__.__name__
