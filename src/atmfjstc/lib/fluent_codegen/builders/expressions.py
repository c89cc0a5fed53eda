from typing import Callable, List, Optional

from atmfjstc.lib.py_lang_utils.token import Token
from atmfjstc.lib.text_utils import check_nonempty_str, check_single_line

from atmfjstc.lib.fluent_codegen.BuildContext import BuildContext
from atmfjstc.lib.fluent_codegen.errors import FragmentShapeError, IncompleteBuilderError
from atmfjstc.lib.fluent_codegen.ast.base import Fragment
from atmfjstc.lib.fluent_codegen.ast.raw import Word, Raw, Suffix, Space, StringLiteral, CharLiteral
from atmfjstc.lib.fluent_codegen.ast.structural import Composite, Joined, Wrappable, Delimited, NewStatement, seq
from atmfjstc.lib.fluent_codegen.builders.base import Builder, Value, value_fragment, fragment_result, R


def _check_name(name: str, what: str = 'name') -> str:
    check_nonempty_str(name, what)
    check_single_line(name, what)

    return name


class InvocationBuilder(Builder[R]):
    """
    Builds a method or function invocation, e.g. ``target.name(arg1, arg2)``.

    Arguments are added with the ``with_*`` methods. The invocation is completed by one of the terminals that specify
    what it is invoked on:

    - `on` (an explicit target), `on_this`
    - `in_scope` (no target, i.e. a plain function call)
    - `on_invocation_of`, which opens a builder for another invocation whose result is the target, for chaining
    """

    _name: str
    _arguments: List[Fragment]
    _target: Optional[Fragment]

    def __init__(self, name: str, continuation: Callable[[Fragment], R], context: Optional[BuildContext] = None):
        super().__init__(continuation, context)

        self._name = _check_name(name, 'method name')
        self._arguments = []
        self._target = None

    def describe(self):
        return f"InvocationBuilder({self._name!r})"

    def with_argument(self, value: Value) -> 'InvocationBuilder[R]':
        self._check_open()
        self._arguments.append(value_fragment(value))

        return self

    def with_arguments(self, *values: Value) -> 'InvocationBuilder[R]':
        fragments = [value_fragment(value) for value in values]

        if len(set(fragments)) != len(fragments):
            raise FragmentShapeError(f"Duplicate arguments in {values!r}")

        for fragment in fragments:
            self.with_argument(fragment)

        return self

    def with_string_literal(self, text: str) -> 'InvocationBuilder[R]':
        return self.with_argument(StringLiteral(text))

    def with_argument_from_invoking(self, name: str, body=None):
        self._check_open()
        return self._spawn(InvocationBuilder(name, self._add_argument, self._context), body)

    def with_array_argument(self, body=None):
        self._check_open()
        return self._spawn(ArrayBuilder(self._add_argument, self._context), body)

    def with_new_array_argument(self, type_name: str, body=None):
        self._check_open()
        return self._spawn(ArrayBuilder(self._add_argument, self._context, new_type=type_name), body)

    def with_ternary_argument(self, body=None):
        self._check_open()
        return self._spawn(TernaryBuilder(self._add_argument, self._context), body)

    def with_numeric_argument(self, operand: Optional[Value] = None, body=None):
        self._check_open()
        return self._spawn(NumericExpressionBuilder(operand, self._add_argument, self._context), body)

    def on(self, target: Value) -> R:
        self._check_can_finish('on')
        self._target = value_fragment(target)

        return self._finish('on')

    def on_this(self) -> R:
        return self.on('this')

    def in_scope(self) -> R:
        return self._finish('in_scope')

    def on_invocation_of(self, name: str) -> 'InvocationBuilder[R]':
        """
        Opens a builder for the invocation whose result this invocation is performed on. Closing that builder also
        completes this one, e.g. ``invocation('b').on_invocation_of('a').on('x')`` yields ``x.a().b()``.
        """
        self._check_can_finish('on_invocation_of')

        def _target_done(target):
            self._check_can_finish('on_invocation_of')
            self._target = target
            return self._finish('on_invocation_of')

        return self._child(InvocationBuilder(name, _target_done, self._context))

    def _add_argument(self, fragment):
        self._check_open()
        self._arguments.append(fragment)
        return self

    def _close_by_default(self):
        self.in_scope()

    def _build_fragment(self):
        if self._target is None:
            head = [Word(self._name)]
        else:
            head = [self._target, Raw('.'), Raw(self._name)]

        return seq(NewStatement(), Wrappable(seq(*head, Delimited(Joined(self._arguments)))))


class ArrayBuilder(Builder[R]):
    """
    Builds an array literal, e.g. ``{1, 2, 3}``, or, if `new_type` is given, an array creation expression such as
    ``new int[] {1, 2, 3}``.
    """

    _values: List[Fragment]
    _new_type: Optional[str]

    def __init__(
        self, continuation: Callable[[Fragment], R], context: Optional[BuildContext] = None,
        new_type: Optional[str] = None
    ):
        super().__init__(continuation, context)

        self._values = []
        self._new_type = None if new_type is None else _check_name(new_type, 'array type')

    def value(self, value: Value) -> 'ArrayBuilder[R]':
        self._check_open()
        self._values.append(value_fragment(value))

        return self

    def number(self, value) -> 'ArrayBuilder[R]':
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"Expected a number, got {value!r}")

        return self.value(value)

    def string_literal(self, text: str) -> 'ArrayBuilder[R]':
        return self.value(StringLiteral(text))

    def char_literal(self, char: str) -> 'ArrayBuilder[R]':
        return self.value(CharLiteral(char))

    def invoke(self, name: str, body=None):
        self._check_open()
        return self._spawn(InvocationBuilder(name, self._add_value, self._context), body)

    def array(self, body=None):
        self._check_open()
        return self._spawn(ArrayBuilder(self._add_value, self._context), body)

    def close_array(self) -> R:
        return self._finish('close_array')

    def _add_value(self, fragment):
        self._check_open()
        self._values.append(fragment)
        return self

    def _close_by_default(self):
        self.close_array()

    def _build_fragment(self):
        head = [] if self._new_type is None else [Word('new'), Word(self._new_type), Suffix('[]')]

        return Wrappable(seq(*head, Word('{'), Joined(self._values), Raw('}')))


_OPERAND = Token(repr_='_OPERAND')
_OPERATOR = Token(repr_='_OPERATOR')


class _ExpressionChainBuilder(Builder[R]):
    """
    Common logic for builders of expressions that alternate operands and binary operators.
    """

    _parts: List[Fragment]
    _expecting: Token

    def __init__(self, continuation: Callable[[Fragment], R], context: Optional[BuildContext] = None):
        super().__init__(continuation, context)

        self._parts = []
        self._expecting = _OPERAND

    def _add_operand(self, fragment: Fragment):
        self._check_open()

        if self._expecting is not _OPERAND:
            raise FragmentShapeError(
                f"{self.describe()}: expected an operator, got an operand ({fragment.stringify()!r})"
            )

        self._parts.append(fragment)
        self._expecting = _OPERATOR

        return self

    def _add_operator(self, operator: str):
        self._check_open()

        if self._expecting is not _OPERATOR:
            what = "a left-hand side" if len(self._parts) == 0 else "a right-hand side for the previous operator"
            raise FragmentShapeError(f"{self.describe()}: operator '{operator}' is missing {what}")

        self._parts.append(Word(operator))
        self._expecting = _OPERAND

        return self

    def _check_complete(self):
        if len(self._parts) == 0:
            raise FragmentShapeError(f"{self.describe()} has no operands")
        if self._expecting is _OPERAND:
            raise FragmentShapeError(
                f"{self.describe()}: operator '{self._parts[-1].text}' is missing its right-hand side"
            )

    def _build_fragment(self):
        self._check_complete()

        return Wrappable(Composite(self._parts))


class ConditionBuilder(_ExpressionChainBuilder[R]):
    """
    Builds a boolean condition, by alternating operands (`variable`, `literal`, `invoke` etc.) with comparison or
    logical operators (`equals`, `and_` etc.) and ending with `end_condition`.

    Calling an operator where an operand is expected (or vice versa), or ending the condition after an operator,
    raises `FragmentShapeError`.
    """

    _negate_next: bool

    def __init__(self, continuation: Callable[[Fragment], R], context: Optional[BuildContext] = None):
        super().__init__(continuation, context)

        self._negate_next = False

    def not_(self) -> 'ConditionBuilder[R]':
        self._check_open()

        if self._expecting is not _OPERAND:
            raise FragmentShapeError(f"{self.describe()}: negation must precede an operand")

        self._negate_next = not self._negate_next

        return self

    def variable(self, name: str) -> 'ConditionBuilder[R]':
        return self._add_simple_operand(_check_name(name, 'variable name'))

    def literal(self, value: Value) -> 'ConditionBuilder[R]':
        if isinstance(value, Fragment):
            return self._add_operand_fragment(value)

        return self._add_simple_operand(value_fragment(value).text)

    def string_literal(self, text: str) -> 'ConditionBuilder[R]':
        return self._add_operand_fragment(StringLiteral(text))

    def invoke(self, name: str, body=None):
        self._check_open()
        return self._spawn(InvocationBuilder(name, self._add_operand_fragment, self._context), body)

    def numeric(self, operand: Optional[Value] = None, body=None):
        self._check_open()
        return self._spawn(NumericExpressionBuilder(operand, self._add_operand_fragment, self._context), body)

    def parenthesized(self, body=None):
        """Opens a builder for a sub-condition that will be placed in parentheses"""
        self._check_open()

        def _sub_condition_done(fragment):
            return self._add_operand_fragment(Delimited(fragment), parenthesized=True)

        return self._spawn(ConditionBuilder(_sub_condition_done, self._context), body)

    def equals(self, value: Optional[Value] = None) -> 'ConditionBuilder[R]':
        return self._comparison('==', value)

    def not_equals(self, value: Optional[Value] = None) -> 'ConditionBuilder[R]':
        return self._comparison('!=', value)

    def greater_than(self, value: Optional[Value] = None) -> 'ConditionBuilder[R]':
        return self._comparison('>', value)

    def less_than(self, value: Optional[Value] = None) -> 'ConditionBuilder[R]':
        return self._comparison('<', value)

    def greater_than_or_equal(self, value: Optional[Value] = None) -> 'ConditionBuilder[R]':
        return self._comparison('>=', value)

    def less_than_or_equal(self, value: Optional[Value] = None) -> 'ConditionBuilder[R]':
        return self._comparison('<=', value)

    def instance_of(self, type_name: Optional[str] = None) -> 'ConditionBuilder[R]':
        return self._comparison('instanceof', type_name)

    def and_(self) -> 'ConditionBuilder[R]':
        return self._add_operator('&&')

    def or_(self) -> 'ConditionBuilder[R]':
        return self._add_operator('||')

    def is_null(self) -> 'ConditionBuilder[R]':
        return self._comparison('==', 'null')

    def is_not_null(self) -> 'ConditionBuilder[R]':
        return self._comparison('!=', 'null')

    def end_condition(self) -> R:
        return self._finish('end_condition')

    def _comparison(self, operator: str, value: Optional[Value]):
        self._add_operator(operator)

        return self if value is None else self.literal(value)

    def _add_simple_operand(self, text: str):
        if self._negate_next:
            self._negate_next = False
            return self._add_operand(Word('!' + text))

        return self._add_operand(Word(text))

    def _add_operand_fragment(self, fragment: Fragment, parenthesized: bool = False):
        if self._negate_next:
            self._negate_next = False
            fragment = seq(Word('!'), fragment if parenthesized else Delimited(fragment))
        elif parenthesized:
            fragment = seq(Space(), fragment)

        return self._add_operand(fragment)

    def _check_complete(self):
        if self._negate_next:
            raise FragmentShapeError(f"{self.describe()}: negation is not followed by an operand")

        super()._check_complete()


class NumericExpressionBuilder(_ExpressionChainBuilder[R]):
    """
    Builds an arithmetic or bitwise expression, e.g. ``a + b * 2``.

    Each operator can take its right-hand side directly (``plus(2)``), or the right-hand side can be supplied
    afterwards (``plus().invoke('size').on('list')``). Ending the expression after a dangling operator raises
    `FragmentShapeError`.
    """

    def __init__(
        self, operand: Optional[Value], continuation: Callable[[Fragment], R], context: Optional[BuildContext] = None
    ):
        super().__init__(continuation, context)

        if operand is not None:
            self.value(operand)

    def value(self, value: Value) -> 'NumericExpressionBuilder[R]':
        return self._add_operand(value_fragment(value))

    def invoke(self, name: str, body=None):
        self._check_open()
        return self._spawn(InvocationBuilder(name, self._add_operand, self._context), body)

    def parenthesized(self, operand: Optional[Value] = None, body=None):
        """Opens a builder for a sub-expression that will be placed in parentheses"""
        self._check_open()

        def _sub_expression_done(fragment):
            return self._add_operand(seq(Space(), Delimited(fragment)))

        return self._spawn(NumericExpressionBuilder(operand, _sub_expression_done, self._context), body)

    def plus(self, value: Optional[Value] = None) -> 'NumericExpressionBuilder[R]':
        return self._operation('+', value)

    def minus(self, value: Optional[Value] = None) -> 'NumericExpressionBuilder[R]':
        return self._operation('-', value)

    def times(self, value: Optional[Value] = None) -> 'NumericExpressionBuilder[R]':
        return self._operation('*', value)

    def divided_by(self, value: Optional[Value] = None) -> 'NumericExpressionBuilder[R]':
        return self._operation('/', value)

    def modulo(self, value: Optional[Value] = None) -> 'NumericExpressionBuilder[R]':
        return self._operation('%', value)

    def bitwise_and(self, value: Optional[Value] = None) -> 'NumericExpressionBuilder[R]':
        return self._operation('&', value)

    def bitwise_or(self, value: Optional[Value] = None) -> 'NumericExpressionBuilder[R]':
        return self._operation('|', value)

    def bitwise_xor(self, value: Optional[Value] = None) -> 'NumericExpressionBuilder[R]':
        return self._operation('^', value)

    def shift_left(self, value: Optional[Value] = None) -> 'NumericExpressionBuilder[R]':
        return self._operation('<<', value)

    def shift_right(self, value: Optional[Value] = None) -> 'NumericExpressionBuilder[R]':
        return self._operation('>>', value)

    def end_numeric_expression(self) -> R:
        return self._finish('end_numeric_expression')

    def _operation(self, operator: str, value: Optional[Value]):
        self._add_operator(operator)

        return self if value is None else self.value(value)

    def _close_by_default(self):
        self.end_numeric_expression()


class TernaryBuilder(Builder[R]):
    """
    Builds a conditional expression, ``condition ? value_if_true : value_if_false``.

    The condition is given either as text (`when`) or through a condition builder (`condition`). The value for the
    true branch is given with `then_value`, and the terminal `otherwise` supplies the value for the false branch.
    """

    _condition: Optional[Fragment]
    _then: Optional[Fragment]
    _otherwise: Optional[Fragment]

    def __init__(self, continuation: Callable[[Fragment], R], context: Optional[BuildContext] = None):
        super().__init__(continuation, context)

        self._condition = None
        self._then = None
        self._otherwise = None

    def when(self, condition: Value) -> 'TernaryBuilder[R]':
        return self._set_condition(value_fragment(condition))

    def condition(self, body=None):
        self._check_open()
        return self._spawn(ConditionBuilder(self._set_condition, self._context), body)

    def then_value(self, value: Value) -> 'TernaryBuilder[R]':
        self._check_open()

        if self._then is not None:
            raise FragmentShapeError(f"{self.describe()}: value for the true branch was already set")

        self._then = value_fragment(value)

        return self

    def then_string_literal(self, text: str) -> 'TernaryBuilder[R]':
        return self.then_value(StringLiteral(text))

    def otherwise(self, value: Value) -> R:
        self._check_can_finish('otherwise')
        self._otherwise = value_fragment(value)

        return self._finish('otherwise')

    def otherwise_string_literal(self, text: str) -> R:
        return self.otherwise(StringLiteral(text))

    def _set_condition(self, fragment):
        self._check_open()

        if self._condition is not None:
            raise FragmentShapeError(f"{self.describe()}: condition was already set")

        self._condition = fragment

        return self

    def _build_fragment(self):
        if self._condition is None:
            raise IncompleteBuilderError(self, "a condition")
        if self._then is None:
            raise IncompleteBuilderError(self, "a value for the true branch")

        return Wrappable(seq(self._condition, Word('?'), self._then, Word(':'), self._otherwise))


def invocation(name: str, context: Optional[BuildContext] = None) -> InvocationBuilder[Fragment]:
    return InvocationBuilder(name, fragment_result, context)


def array_literal(new_type: Optional[str] = None, context: Optional[BuildContext] = None) -> ArrayBuilder[Fragment]:
    return ArrayBuilder(fragment_result, context, new_type=new_type)


def condition(context: Optional[BuildContext] = None) -> ConditionBuilder[Fragment]:
    return ConditionBuilder(fragment_result, context)


def numeric_expression(
    operand: Optional[Value] = None, context: Optional[BuildContext] = None
) -> NumericExpressionBuilder[Fragment]:
    return NumericExpressionBuilder(operand, fragment_result, context)


def ternary(context: Optional[BuildContext] = None) -> TernaryBuilder[Fragment]:
    return TernaryBuilder(fragment_result, context)
