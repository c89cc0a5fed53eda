import unittest

from atmfjstc.lib.fluent_codegen.BuildContext import BuildContext
from atmfjstc.lib.fluent_codegen.errors import BuilderClosedTwiceError, BuilderMisuseError, IncompleteBuilderError, \
    UnclosedBuilderError, FluentCodegenError
from atmfjstc.lib.fluent_codegen.builders.base import run_scoped
from atmfjstc.lib.fluent_codegen.builders.expressions import InvocationBuilder, invocation, condition, ternary
from atmfjstc.lib.fluent_codegen.builders.statements import block, if_


class SingleFinalizationTest(unittest.TestCase):
    def test_simple_invocation(self):
        fragment = invocation('foo').with_argument('1').with_argument('2').on_this()

        self.assertEqual(fragment.stringify(), 'this.foo(1, 2)')

    def test_continuation_result_returned(self):
        received = []

        def _continuation(fragment):
            received.append(fragment)
            return 'done'

        builder = InvocationBuilder('foo', _continuation)

        self.assertEqual(builder.in_scope(), 'done')
        self.assertEqual(len(received), 1)
        self.assertEqual(received[0].stringify(), 'foo()')

    def test_closing_twice_always_raises(self):
        received = []
        builder = InvocationBuilder('foo', received.append)
        builder.in_scope()

        for _ in range(2):
            with self.assertRaises(BuilderClosedTwiceError):
                builder.in_scope()

        with self.assertRaises(BuilderClosedTwiceError) as cm:
            builder.on('x')

        self.assertEqual(cm.exception.terminal, 'on')
        self.assertEqual(cm.exception.first_terminal, 'in_scope')
        self.assertEqual(len(received), 1)

    def test_chaining_terminal_on_closed_builder(self):
        builder = invocation('foo')
        builder.in_scope()

        with self.assertRaises(BuilderClosedTwiceError):
            builder.on_invocation_of('bar')

    def test_alter_after_close(self):
        builder = invocation('foo')
        builder.in_scope()

        with self.assertRaises(BuilderMisuseError):
            builder.with_argument('x')

    def test_incomplete_builder_stays_open(self):
        builder = ternary()

        with self.assertRaises(IncompleteBuilderError) as cm:
            builder.otherwise(1)

        self.assertEqual(cm.exception.missing, 'a condition')
        self.assertFalse(builder.is_closed)

        self.assertEqual(builder.when('c').then_value(0).otherwise(1).stringify(), 'c ? 0 : 1')

    def test_incomplete_if(self):
        builder = if_('x')

        with self.assertRaises(IncompleteBuilderError):
            builder.end_if()

        self.assertEqual(builder.then_do().end_block().end_if().stringify(), 'if (x) {\n}\n')

    def test_error_hierarchy(self):
        self.assertTrue(issubclass(BuilderClosedTwiceError, BuilderMisuseError))
        self.assertTrue(issubclass(UnclosedBuilderError, FluentCodegenError))


class ScopedCompletionTest(unittest.TestCase):
    def test_callbacks_closed_by_default(self):
        fragment = block() \
            .if_('x', lambda i: i.then_do(lambda b: b.statement('y()'))) \
            .invoke('foo', lambda inv: inv.with_argument(1)) \
            .end_block()

        self.assertEqual(fragment.stringify(), '{\n    if (x) {\n        y();\n    }\n    foo(1);\n}\n')

    def test_callback_closing_explicitly(self):
        fragment = block().invoke('foo', lambda inv: inv.on('bar')).end_block()

        self.assertEqual(fragment.stringify(), '{\n    bar.foo();\n}\n')

    def test_callback_without_default(self):
        with self.assertRaises(UnclosedBuilderError):
            invocation('f').with_ternary_argument(lambda t: t.when('x').then_value(1))

    def test_run_scoped_with_explicit_default(self):
        results = []
        builder = InvocationBuilder('foo', results.append)

        run_scoped(builder, lambda b: b.with_argument('a'), default_close=lambda b: b.on_this())

        self.assertEqual(results[0].stringify(), 'this.foo(a)')

    def test_with_statement(self):
        outer = block()

        with outer.block() as inner:
            inner.statement('a()')

        self.assertEqual(outer.end_block().stringify(), '{\n    {\n        a();\n    }\n}\n')

    def test_with_statement_without_default(self):
        with self.assertRaises(UnclosedBuilderError):
            with condition() as cond:
                cond.variable('x')

    def test_with_statement_error(self):
        builder = block()

        with self.assertRaises(RuntimeError):
            with builder:
                raise RuntimeError("Boom")

        self.assertFalse(builder.is_closed)


class ChildBuilderTest(unittest.TestCase):
    def test_parent_cannot_close_with_open_child(self):
        parent = invocation('f')
        child = parent.with_argument_from_invoking('g')

        with self.assertRaises(IncompleteBuilderError) as cm:
            parent.in_scope()

        self.assertIn("InvocationBuilder('g')", cm.exception.missing)
        self.assertFalse(parent.is_closed)

        self.assertEqual(child.with_argument(1).in_scope().in_scope().stringify(), 'f(g(1))')

    def test_open_child_blocks_every_terminal(self):
        parent = invocation('f')
        parent.with_array_argument()

        with self.assertRaises(IncompleteBuilderError):
            parent.on('x')

        with self.assertRaises(IncompleteBuilderError):
            parent.on_invocation_of('h')

        outer = block()
        outer.if_('a')

        with self.assertRaises(IncompleteBuilderError):
            outer.end_block()

    def test_child_cannot_deliver_to_closed_parent(self):
        parent = invocation('f')
        parent.in_scope()

        with self.assertRaises(BuilderMisuseError):
            InvocationBuilder('g', parent._add_argument).in_scope()

        self.assertEqual(parent._arguments, [])

    def test_open_child_in_callback_is_reported(self):
        with self.assertRaises(IncompleteBuilderError):
            block().invoke('f', lambda inv: inv.with_argument_from_invoking('g'))

    def test_second_block_for_same_branch(self):
        builder = if_('a')
        first = builder.then_do()

        with self.assertRaises(IncompleteBuilderError):
            builder.then_do()

        self.assertEqual(first.statement('x()').end_block().end_if().stringify(), 'if (a) {\n    x();\n}\n')

    def test_open_condition_blocks_if(self):
        outer = block()
        outer.if_condition().variable('x')

        with self.assertRaises(IncompleteBuilderError):
            outer.end_block()


class BuildContextTest(unittest.TestCase):
    def test_all_closed(self):
        with BuildContext() as ctx:
            block(ctx).invoke('foo').in_scope().end_block()

        self.assertEqual(ctx.open_builders, [])

    def test_abandoned_builder(self):
        ctx = BuildContext()
        block(ctx).end_block()
        invocation('foo', context=ctx)

        with self.assertRaises(UnclosedBuilderError) as cm:
            ctx.check_all_closed()

        self.assertEqual(cm.exception.builders, ("InvocationBuilder('foo')",))

    def test_abandoned_builder_at_exit(self):
        with self.assertRaises(UnclosedBuilderError):
            with BuildContext() as ctx:
                invocation('foo', context=ctx)

    def test_context_handed_down(self):
        ctx = BuildContext()
        nested = block(ctx).if_('x').then_do()

        self.assertIs(nested.context, ctx)

    def test_imports(self):
        ctx = BuildContext()
        ctx.require_import('java.util.List')
        ctx.require_import('java.io.File')
        ctx.require_import('java.util.List')

        self.assertEqual(ctx.imports, ['java.io.File', 'java.util.List'])

    def test_debug_code_marks_blocks(self):
        text = block(BuildContext(debug_code=True)).end_block().stringify()

        self.assertIn('// Generated by test_builder_protocol.py:', text)
        self.assertIn('(test_debug_code_marks_blocks)', text)
