import unittest

from atmfjstc.lib.fluent_codegen.BuildContext import BuildContext
from atmfjstc.lib.fluent_codegen.errors import FragmentShapeError, IncompleteBuilderError, UnclosedBuilderError
from atmfjstc.lib.fluent_codegen.builders.statements import block, if_, switch_on, declaration, assignment


class BlockBuilderTest(unittest.TestCase):
    def test_three_statements(self):
        fragment = block().statement('a()').statement('b()').statement('c()').end_block()

        self.assertEqual(fragment.stringify(), '{\n    a();\n    b();\n    c();\n}\n')

    def test_package_example(self):
        with BuildContext() as ctx:
            body = block(ctx) \
                .declare('total').with_modifier('final').initialized_with(0).as_type('int') \
                .if_('items != null') \
                .then_do().invoke('process').with_argument('items').with_argument('total').on_this().end_block() \
                .end_if() \
                .returning('total') \
                .end_block()

        self.assertEqual(
            body.stringify(),
            '{\n'
            '    final int total = 0;\n'
            '    if (items != null) {\n'
            '        this.process(items, total);\n'
            '    }\n'
            '    return total;\n'
            '}\n'
        )

    def test_comments_and_blank_lines(self):
        fragment = block().line_comment('Setup').statement('a()').blank_line().statement('b()').end_block()

        self.assertEqual(fragment.stringify(), '{\n    // Setup\n    a();\n\n    b();\n}\n')

    def test_returning(self):
        self.assertEqual(block().returning_string_literal('x').end_block().stringify(), '{\n    return "x";\n}\n')
        self.assertEqual(
            block().returning_invocation_of('get').on_this().end_block().stringify(),
            '{\n    return this.get();\n}\n'
        )
        self.assertEqual(
            block().returning_ternary().when('a').then_value(1).otherwise(2).end_block().stringify(),
            '{\n    return a ? 1 : 2;\n}\n'
        )

    def test_increment_decrement(self):
        self.assertEqual(block().increment('i').decrement('j').end_block().stringify(), '{\n    i++;\n    j--;\n}\n')

    def test_nested_block(self):
        self.assertEqual(
            block().statement('a()').block().statement('b()').end_block().end_block().stringify(),
            '{\n    a();\n    {\n        b();\n    }\n}\n'
        )

    def test_conditionally(self):
        fragment = block() \
            .conditionally(False, lambda b: b.statement('no()')) \
            .conditionally(True, lambda b: b.statement('yes()')) \
            .end_block()

        self.assertEqual(fragment.stringify(), '{\n    yes();\n}\n')

    def test_log(self):
        ctx = BuildContext()
        fragment = block(ctx).log('Started {0}', 'name').end_block()

        self.assertEqual(fragment.stringify(), '{\n    LOGGER.log(Level.INFO, "Started {0}", name);\n}\n')
        self.assertTrue(ctx.logger_requested)
        self.assertEqual(ctx.imports, ['java.util.logging.Level'])

    def test_debug_log(self):
        self.assertEqual(block().debug_log('x').end_block().stringify(), '{\n}\n')

        text = block(BuildContext(debug_code=True, logger_name='LOG')).debug_log('x').end_block().stringify()
        self.assertIn('    LOG.log(Level.FINE, "x");\n', text)

    def test_long_statement_wraps_inside_block(self):
        builder = block().invoke('configure')
        for index in range(8):
            builder.with_argument(f'someSetting{index}')

        text = builder.on('builder').end_block().stringify()
        lines = text.split('\n')

        self.assertEqual(lines[1], '    builder.configure(someSetting0, someSetting1, someSetting2, someSetting3,')
        self.assertEqual(lines[2], '            someSetting4, someSetting5, someSetting6, someSetting7);')
        self.assertEqual(lines[3], '}')


class IfBuilderTest(unittest.TestCase):
    def test_if_else_chain(self):
        fragment = block() \
            .if_('x > 0').then_do().invoke('positive').in_scope().end_block() \
            .else_if('x < 0').then_do().invoke('negative').in_scope().end_block() \
            .else_do().invoke('zero').in_scope().end_block() \
            .end_block()

        self.assertEqual(
            fragment.stringify(),
            '{\n'
            '    if (x > 0) {\n'
            '        positive();\n'
            '    } else if (x < 0) {\n'
            '        negative();\n'
            '    } else {\n'
            '        zero();\n'
            '    }\n'
            '}\n'
        )

    def test_top_level(self):
        self.assertEqual(
            if_('ok').then_do().statement('go()').end_block().end_if().stringify(),
            'if (ok) {\n    go();\n}\n'
        )

    def test_if_condition(self):
        fragment = block() \
            .if_condition().variable('x').is_null().end_condition() \
            .then_do().returning('null').end_block() \
            .end_if() \
            .end_block()

        self.assertEqual(fragment.stringify(), '{\n    if (x == null) {\n        return null;\n    }\n}\n')

    def test_else_if_condition(self):
        fragment = if_('a').then_do().end_block() \
            .else_if_condition().variable('b').end_condition().then_do().end_block() \
            .end_if()

        self.assertEqual(fragment.stringify(), 'if (a) {\n} else if (b) {\n}\n')

    def test_scoped_else(self):
        outer = block()
        result = outer.if_('a').then_do().end_block().else_do(lambda b: b.statement('b()'))

        self.assertIs(result, outer)
        self.assertEqual(outer.end_block().stringify(), '{\n    if (a) {\n    } else {\n        b();\n    }\n}\n')

    def test_duplicate_condition(self):
        with self.assertRaises(FragmentShapeError):
            if_('a').then_do().end_block().else_if('a')

    def test_branch_without_block(self):
        with self.assertRaises(IncompleteBuilderError):
            if_('a').else_if('b')

        with self.assertRaises(IncompleteBuilderError):
            if_('a').else_do()

    def test_block_twice(self):
        with self.assertRaises(FragmentShapeError):
            if_('a').then_do().end_block().then_do()


class SwitchBuilderTest(unittest.TestCase):
    def test_cases(self):
        fragment = switch_on('kind') \
            .in_case(1).statement('one()').statement('break').end_block() \
            .in_string_literal_case('x').statement('ex()').end_block() \
            .in_default_case().statement('other()').end_block() \
            .build()

        self.assertEqual(
            fragment.stringify(),
            'switch (kind) {\n'
            '    case 1:\n'
            '        one();\n'
            '        break;\n'
            '    case "x":\n'
            '        ex();\n'
            '    default:\n'
            '        other();\n'
            '}\n'
        )

    def test_multiple_labels(self):
        self.assertEqual(
            switch_on('c').in_cases(['a', 'b']).statement('f()').end_block().build().stringify(),
            'switch (c) {\n    case a:\n    case b:\n        f();\n}\n'
        )

    def test_scoped_in_block(self):
        fragment = block() \
            .switching_on('x', lambda s: s.in_case(1, lambda c: c.statement('a()'))) \
            .end_block()

        self.assertEqual(fragment.stringify(), '{\n    switch (x) {\n        case 1:\n            a();\n    }\n}\n')

    def test_duplicate_labels(self):
        with self.assertRaises(FragmentShapeError):
            switch_on('x').in_case(1).end_block().in_case('1')

        with self.assertRaises(FragmentShapeError):
            switch_on('x').in_default_case().end_block().in_default_case()

        with self.assertRaises(FragmentShapeError):
            switch_on('x').in_cases(['a', 'a'])

    def test_no_cases(self):
        with self.assertRaises(IncompleteBuilderError):
            switch_on('x').build()

        with self.assertRaises(UnclosedBuilderError):
            with switch_on('x'):
                pass


class DeclarationBuilderTest(unittest.TestCase):
    def test_canonical_modifier_order(self):
        self.assertEqual(
            declaration('x').with_modifier('final', 'static', 'private').initialized_with(5).as_type('int').stringify(),
            'private static final int x = 5'
        )

    def test_unknown_modifier(self):
        with self.assertRaises(FragmentShapeError):
            declaration('x').with_modifier('constant')

    def test_string_initializer_in_block(self):
        self.assertEqual(
            block().declare('s').initialized_with_string_literal('hi').as_type('String').end_block().stringify(),
            '{\n    String s = "hi";\n}\n'
        )

    def test_new_array(self):
        self.assertEqual(
            block().declare('xs').initialized_as_new_array('int').number(1).number(2).close_array().end_block()
                .stringify(),
            '{\n    int[] xs = new int[] {1, 2};\n}\n'
        )

    def test_initialized_by_invoking(self):
        self.assertEqual(
            declaration('n').initialized_by_invoking('size').on('list').as_type('int').stringify(),
            'int n = list.size()'
        )

    def test_initializer_twice(self):
        with self.assertRaises(FragmentShapeError):
            declaration('n').initialized_with(1).initialized_with(2)


class AssignmentBuilderTest(unittest.TestCase):
    def test_operator(self):
        self.assertEqual(assignment('x').with_operator('+=').to(1).stringify(), 'x += 1')

    def test_unknown_operator(self):
        with self.assertRaises(FragmentShapeError):
            assignment('x').with_operator('=>')

    def test_invocation_in_block(self):
        self.assertEqual(
            block().assign('y').to_invocation_of('compute').with_argument('x').in_scope().end_block().stringify(),
            '{\n    y = compute(x);\n}\n'
        )

    def test_numeric_expression(self):
        self.assertEqual(
            assignment('z').to_numeric_expression('a').minus('b').end_numeric_expression().stringify(),
            'z = a - b'
        )

    def test_ternary(self):
        self.assertEqual(
            assignment('m').to_ternary().when('a > b').then_value('a').otherwise('b').stringify(),
            'm = a > b ? a : b'
        )

    def test_string_literal(self):
        self.assertEqual(assignment('s').to_string_literal('v').stringify(), 's = "v"')
