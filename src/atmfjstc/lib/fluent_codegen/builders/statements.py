from typing import Callable, Iterable, List, Optional, Tuple, Union

from atmfjstc.lib.fluent_codegen.BuildContext import BuildContext
from atmfjstc.lib.fluent_codegen.errors import FragmentShapeError, IncompleteBuilderError, UnclosedBuilderError
from atmfjstc.lib.fluent_codegen.literals import string_literal
from atmfjstc.lib.fluent_codegen.ast.base import Fragment
from atmfjstc.lib.fluent_codegen.ast.raw import Word, Space, Backup, StringLiteral
from atmfjstc.lib.fluent_codegen.ast.structural import Composite, Delimited, Statement, OnNewLine, BlankLine, \
    LineComment, seq
from atmfjstc.lib.fluent_codegen.ast.block import Block, SwitchCase
from atmfjstc.lib.fluent_codegen.builders.base import Builder, Value, value_fragment, fragment_result, \
    caller_location, run_scoped, R
from atmfjstc.lib.fluent_codegen.builders.expressions import InvocationBuilder, ArrayBuilder, ConditionBuilder, \
    NumericExpressionBuilder, TernaryBuilder, _check_name


MODIFIER_ORDER = (
    'public', 'protected', 'private', 'abstract', 'static', 'final', 'transient', 'volatile', 'synchronized', 'native',
    'strictfp',
)

ASSIGNMENT_OPERATORS = ('=', '+=', '-=', '*=', '/=', '%=', '|=', '&=', '^=', '<<=', '>>=')


def _text_or_fragment(value: Union[str, Fragment]) -> Fragment:
    return value if isinstance(value, Fragment) else Word(value)


class BlockBuilder(Builder[R]):
    """
    Builds the body of a block of code: a sequence of statements, comments, nested blocks and control structures.

    The builder produces just the body; whoever created it decides whether it is wrapped in braces (e.g. for an ``if``)
    or not (e.g. for a switch case). The block is completed with `end_block`, which is also what happens by default
    when the builder is used in a scoped manner and left open.

    If the build context has `debug_code` set, the block starts with a comment identifying the code that generated it.
    """

    _statements: List[Fragment]

    def __init__(self, continuation: Callable[[Fragment], R], context: Optional[BuildContext] = None):
        super().__init__(continuation, context)

        self._statements = []

        if self._context.debug_code:
            self._statements.append(LineComment(f"Generated by {caller_location()}"))

    def statement(self, content: Union[str, Fragment]) -> 'BlockBuilder[R]':
        return self._add(Statement(_text_or_fragment(content)))

    def blank_line(self) -> 'BlockBuilder[R]':
        return self._add(BlankLine())

    def line_comment(self, text: str) -> 'BlockBuilder[R]':
        return self._add(LineComment(text))

    def invoke(self, name: str, body=None):
        self._check_open()
        return self._spawn(InvocationBuilder(name, self._add_statement, self._context), body)

    def returning(self, value: Value) -> 'BlockBuilder[R]':
        return self._add_return(value_fragment(value))

    def returning_string_literal(self, text: str) -> 'BlockBuilder[R]':
        return self._add_return(StringLiteral(text))

    def returning_invocation_of(self, name: str, body=None):
        self._check_open()
        return self._spawn(InvocationBuilder(name, self._add_return, self._context), body)

    def returning_ternary(self, body=None):
        self._check_open()
        return self._spawn(TernaryBuilder(self._add_return, self._context), body)

    def declare(self, name: str, body=None):
        self._check_open()
        return self._spawn(DeclarationBuilder(name, self._add_statement, self._context), body)

    def assign(self, variable: str, body=None):
        self._check_open()
        return self._spawn(AssignmentBuilder(variable, self._add_statement, self._context), body)

    def increment(self, variable: str) -> 'BlockBuilder[R]':
        return self._add(Statement(Word(_check_name(variable, 'variable name') + '++')))

    def decrement(self, variable: str) -> 'BlockBuilder[R]':
        return self._add(Statement(Word(_check_name(variable, 'variable name') + '--')))

    def if_(self, condition: Value, body=None):
        self._check_open()
        return self._spawn(IfBuilder(value_fragment(condition), self._add_structure, self._context), body)

    def if_condition(self) -> ConditionBuilder['IfBuilder[BlockBuilder[R]]']:
        """
        Opens a builder for the condition of an ``if``. Ending the condition yields the `IfBuilder` itself.
        """
        self._check_open()

        def _condition_done(fragment):
            self._check_open()
            return self._child(IfBuilder(fragment, self._add_structure, self._context))

        return self._child(ConditionBuilder(_condition_done, self._context))

    def switching_on(self, expression: Value, body=None):
        self._check_open()
        return self._spawn(SwitchBuilder(value_fragment(expression), self._add_structure, self._context), body)

    def block(self, body=None):
        self._check_open()

        def _block_done(fragment):
            return self._add_structure(Block(fragment))

        return self._spawn(BlockBuilder(_block_done, self._context), body)

    def log(self, message: str, *arguments: Value, level: str = 'INFO') -> 'BlockBuilder[R]':
        """
        Adds a logging statement, e.g. ``LOGGER.log(Level.INFO, "message", arg1);``. Records the need for a logger and
        for the ``Level`` import in the build context.
        """
        self._check_open()

        logger = self._context.request_logger()
        self._context.require_import('java.util.logging.Level')

        builder = InvocationBuilder('log', self._add_statement, self._context) \
            .with_argument('Level.' + _check_name(level, 'log level')) \
            .with_string_literal(message)

        for argument in arguments:
            builder.with_argument(argument)

        return builder.on(logger)

    def debug_log(self, message: str, *arguments: Value) -> 'BlockBuilder[R]':
        """Like `log` at the ``FINE`` level, but only emitted if the build context has `debug_code` set"""
        if not self._context.debug_code:
            self._check_open()
            return self

        return self.log(message, *arguments, level='FINE')

    def conditionally(self, condition: bool, body: Callable[['BlockBuilder[R]'], None]) -> 'BlockBuilder[R]':
        """Runs `body` on this builder only if `condition` is true, so as not to break a chain of calls"""
        self._check_open()

        if condition:
            body(self)

        return self

    def end_block(self) -> R:
        return self._finish('end_block')

    def _add(self, fragment: Fragment):
        self._check_open()
        self._statements.append(fragment)

        return self

    def _add_statement(self, fragment):
        return self._add(Statement(fragment))

    def _add_return(self, fragment):
        return self._add(Statement(seq(Word('return'), fragment)))

    def _add_structure(self, fragment):
        return self._add(seq(OnNewLine(), fragment))

    def _close_by_default(self):
        self.end_block()

    def _build_fragment(self):
        return Composite(self._statements)


class IfBuilder(Builder[R]):
    """
    Builds an ``if`` statement with optional ``else if`` and ``else`` branches.

    Usage::

        body.if_('x > 0') \\
            .then_do().invoke('positive').in_scope().end_block() \\
            .else_if('x < 0') \\
            .then_do().invoke('negative').in_scope().end_block() \\
            .else_do().invoke('zero').in_scope().end_block()

    Each condition must receive its block (`then_do`) before another branch is added. Closing the ``else`` block
    completes the whole ``if``; otherwise, it is completed with `end_if`.
    """

    _branches: List[List[Optional[Fragment]]]
    _else: Optional[Fragment]

    def __init__(
        self, condition: Fragment, continuation: Callable[[Fragment], R], context: Optional[BuildContext] = None
    ):
        super().__init__(continuation, context)

        self._branches = [[condition, None]]
        self._else = None

    def describe(self):
        return f"IfBuilder({self._branches[0][0].stringify()!r})"

    def then_do(self, body=None):
        self._check_open()
        self._check_children_closed()

        branch = self._branches[-1]
        if branch[1] is not None:
            raise FragmentShapeError(
                f"{self.describe()}: condition {branch[0].stringify()!r} already has a block; use else_if() first"
            )

        def _block_done(fragment):
            self._check_open()

            if branch[1] is not None:
                raise FragmentShapeError(f"{self.describe()}: condition {branch[0].stringify()!r} already has a block")

            branch[1] = fragment
            return self

        return self._spawn(BlockBuilder(_block_done, self._context), body)

    def else_if(self, condition: Value) -> 'IfBuilder[R]':
        self._check_open()
        self._check_last_branch_complete()

        fragment = value_fragment(condition)

        if any(fragment == branch[0] for branch in self._branches):
            raise FragmentShapeError(f"{self.describe()}: duplicate condition {fragment.stringify()!r}")

        self._branches.append([fragment, None])

        return self

    def else_if_condition(self) -> ConditionBuilder['IfBuilder[R]']:
        self._check_open()
        self._check_last_branch_complete()

        return self._child(ConditionBuilder(self.else_if, self._context))

    def else_do(self, body=None):
        """
        Opens a builder for the ``else`` block. Closing that block completes the ``if`` too, so `end_block` returns
        what `end_if` would have.
        """
        self._check_can_finish('else_do')
        self._check_last_branch_complete()

        results = []

        def _else_done(fragment):
            self._check_can_finish('else_do')
            self._else = fragment
            results.append(self._finish('else_do'))
            return results[-1]

        child = self._child(BlockBuilder(_else_done, self._context))

        if body is None:
            return child

        run_scoped(child, body)

        return results[0]

    def end_if(self) -> R:
        return self._finish('end_if')

    def _check_last_branch_complete(self):
        condition, block = self._branches[-1]

        if block is None:
            raise IncompleteBuilderError(self, f"a block for condition {condition.stringify()!r}")

    def _close_by_default(self):
        self.end_if()

    def _build_fragment(self):
        self._check_last_branch_complete()

        parts = []

        for index, (condition, block) in enumerate(self._branches):
            if index > 0:
                parts.extend([Backup(), Word('else')])

            parts.extend([Word('if'), Space(), Delimited(condition), Block(block)])

        if self._else is not None:
            parts.extend([Backup(), Word('else'), Block(self._else)])

        return Composite(parts)


CaseLabel = Union[str, int, None]


class SwitchBuilder(Builder[R]):
    """
    Builds a ``switch`` statement. Each case gets a brace-less block of its own (remember to add a ``break``
    statement where needed). Labels must be unique across all cases.
    """

    _expression: Fragment
    _cases: List[Tuple[Tuple[Optional[str], ...], Fragment]]
    _used_labels: set

    def __init__(
        self, expression: Fragment, continuation: Callable[[Fragment], R], context: Optional[BuildContext] = None
    ):
        super().__init__(continuation, context)

        self._expression = expression
        self._cases = []
        self._used_labels = set()

    def describe(self):
        return f"SwitchBuilder({self._expression.stringify()!r})"

    def in_case(self, label: CaseLabel, body=None):
        return self.in_cases([label], body)

    def in_cases(self, labels: Iterable[CaseLabel], body=None):
        self._check_open()

        labels = tuple(None if label is None else str(label) for label in labels)

        if len(labels) == 0:
            raise FragmentShapeError(f"{self.describe()}: a case needs at least one label")

        for label in labels:
            if (label in self._used_labels) or (labels.count(label) > 1):
                raise FragmentShapeError(
                    f"{self.describe()}: duplicate case " + ('default' if label is None else repr(label))
                )

        self._used_labels.update(labels)

        def _case_done(fragment):
            self._check_open()
            self._cases.append((labels, fragment))
            return self

        return self._spawn(BlockBuilder(_case_done, self._context), body)

    def in_string_literal_case(self, text: str, body=None):
        return self.in_case(string_literal(text, self._context.settings.string_quote), body)

    def in_default_case(self, body=None):
        return self.in_case(None, body)

    def build(self) -> R:
        return self._finish('build')

    def _close_by_default(self):
        if len(self._cases) == 0:
            raise UnclosedBuilderError([self.describe()], "it has no cases")

        self.build()

    def _build_fragment(self):
        if len(self._cases) == 0:
            raise IncompleteBuilderError(self, "at least one case")

        cases = [SwitchCase(labels, body) for labels, body in self._cases]

        return seq(Word('switch'), Space(), Delimited(self._expression), Block(Composite(cases)))


class DeclarationBuilder(Builder[R]):
    """
    Builds a variable (or field) declaration, e.g. ``private static final int x = 5``.

    Modifiers are always rendered in the canonical order (``public static final`` etc.), no matter the order in which
    they were added. The declaration is completed by specifying its type with `as_type`, or by
    `initialized_as_new_array`, which opens a builder for the array and completes the declaration when it is closed.
    """

    _name: str
    _modifiers: set
    _initializer: Optional[Fragment]
    _type: Optional[str]

    def __init__(self, name: str, continuation: Callable[[Fragment], R], context: Optional[BuildContext] = None):
        super().__init__(continuation, context)

        self._name = _check_name(name, 'variable name')
        self._modifiers = set()
        self._initializer = None
        self._type = None

    def describe(self):
        return f"DeclarationBuilder({self._name!r})"

    def with_modifier(self, *modifiers: str) -> 'DeclarationBuilder[R]':
        self._check_open()

        for modifier in modifiers:
            if modifier not in MODIFIER_ORDER:
                raise FragmentShapeError(f"Unknown modifier '{modifier}'")

        self._modifiers.update(modifiers)

        return self

    def initialized_with(self, value: Value) -> 'DeclarationBuilder[R]':
        return self._set_initializer(value_fragment(value))

    def initialized_with_string_literal(self, text: str) -> 'DeclarationBuilder[R]':
        return self._set_initializer(StringLiteral(text))

    def initialized_by_invoking(self, name: str, body=None):
        self._check_open()
        return self._spawn(InvocationBuilder(name, self._set_initializer, self._context), body)

    def initialized_with_ternary(self, body=None):
        self._check_open()
        return self._spawn(TernaryBuilder(self._set_initializer, self._context), body)

    def initialized_with_numeric_expression(self, operand: Optional[Value] = None, body=None):
        self._check_open()
        return self._spawn(NumericExpressionBuilder(operand, self._set_initializer, self._context), body)

    def as_type(self, type_name: str) -> R:
        self._check_can_finish('as_type')
        self._type = _check_name(type_name, 'type name')

        return self._finish('as_type')

    def initialized_as_new_array(self, type_name: str) -> ArrayBuilder[R]:
        self._check_can_finish('initialized_as_new_array')

        if self._initializer is not None:
            raise FragmentShapeError(f"{self.describe()}: initializer was already set")

        def _array_done(fragment):
            self._check_can_finish('initialized_as_new_array')
            self._initializer = fragment
            self._type = type_name + '[]'
            return self._finish('initialized_as_new_array')

        return self._child(ArrayBuilder(_array_done, self._context, new_type=type_name))

    def _set_initializer(self, fragment):
        self._check_open()

        if self._initializer is not None:
            raise FragmentShapeError(f"{self.describe()}: initializer was already set")

        self._initializer = fragment

        return self

    def _build_fragment(self):
        parts = [Word(modifier) for modifier in MODIFIER_ORDER if modifier in self._modifiers]
        parts.extend([Word(self._type), Word(self._name)])

        if self._initializer is not None:
            parts.extend([Word('='), self._initializer])

        return Composite(parts)


class AssignmentBuilder(Builder[R]):
    """
    Builds an assignment, e.g. ``x += 5``. The operator defaults to ``=``; the value is given by one of the ``to*``
    terminals.
    """

    _variable: str
    _operator: str
    _value: Optional[Fragment]

    def __init__(self, variable: str, continuation: Callable[[Fragment], R], context: Optional[BuildContext] = None):
        super().__init__(continuation, context)

        self._variable = _check_name(variable, 'variable name')
        self._operator = '='
        self._value = None

    def describe(self):
        return f"AssignmentBuilder({self._variable!r})"

    def with_operator(self, operator: str) -> 'AssignmentBuilder[R]':
        self._check_open()

        if operator not in ASSIGNMENT_OPERATORS:
            raise FragmentShapeError(f"Unknown assignment operator '{operator}'")

        self._operator = operator

        return self

    def to(self, value: Value) -> R:
        self._check_can_finish('to')

        return self._value_done(value_fragment(value), 'to')

    def to_string_literal(self, text: str) -> R:
        self._check_can_finish('to_string_literal')

        return self._value_done(StringLiteral(text), 'to_string_literal')

    def to_invocation_of(self, name: str) -> InvocationBuilder[R]:
        self._check_can_finish('to_invocation_of')

        return self._child(
            InvocationBuilder(name, lambda fragment: self._value_done(fragment, 'to_invocation_of'), self._context)
        )

    def to_numeric_expression(self, operand: Optional[Value] = None) -> NumericExpressionBuilder[R]:
        self._check_can_finish('to_numeric_expression')

        return self._child(NumericExpressionBuilder(
            operand, lambda fragment: self._value_done(fragment, 'to_numeric_expression'), self._context
        ))

    def to_ternary(self) -> TernaryBuilder[R]:
        self._check_can_finish('to_ternary')

        return self._child(TernaryBuilder(lambda fragment: self._value_done(fragment, 'to_ternary'), self._context))

    def _value_done(self, fragment, terminal):
        self._check_can_finish(terminal)
        self._value = fragment

        return self._finish(terminal)

    def _build_fragment(self):
        return seq(Word(self._variable), Word(self._operator), self._value)


def block(context: Optional[BuildContext] = None) -> BlockBuilder[Fragment]:
    """
    Starts building a braced block of code. `end_block` returns the finished fragment.
    """
    def _block_done(fragment):
        return Block(fragment)

    return BlockBuilder(_block_done, context)


def if_(condition: Value, context: Optional[BuildContext] = None) -> IfBuilder[Fragment]:
    return IfBuilder(value_fragment(condition), fragment_result, context)


def switch_on(expression: Value, context: Optional[BuildContext] = None) -> SwitchBuilder[Fragment]:
    return SwitchBuilder(value_fragment(expression), fragment_result, context)


def declaration(name: str, context: Optional[BuildContext] = None) -> DeclarationBuilder[Fragment]:
    return DeclarationBuilder(name, fragment_result, context)


def assignment(variable: str, context: Optional[BuildContext] = None) -> AssignmentBuilder[Fragment]:
    return AssignmentBuilder(variable, fragment_result, context)
