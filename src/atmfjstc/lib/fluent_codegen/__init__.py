"""
A fluent, builder-based API for generating well-formed, readably wrapped source code in C-family languages.

Rationale
---------

Generating code by pasting strings together works for trivial outputs, but quickly breaks down for anything serious:

- Indentation must follow the nesting of blocks, which is only known at runtime
- Long expressions (e.g. calls with many arguments) must be wrapped so as to respect a column budget, and the wrapped
  lines must be indented so that the structure remains obvious
- Punctuation must stick to the token it belongs to (``foo(a,`` and never ``foo(a\\n    ,``), even when the code that
  emits the comma has no idea that a line break was just emitted
- Structures such as ``if``/``else`` chains and ``switch`` statements have rules (every condition needs a block, case
  labels must be unique) that string concatenation cannot check

The Solution
------------

The package is organized in three layers:

- A `LayoutEngine` (see `atmfjstc.lib.fluent_codegen.LayoutEngine`) is a column-tracking text buffer that knows how to
  place words, punctuation, blocks and statements, taking care of spacing, wrapping and indentation as the text is being
  emitted. Its behavior is controlled by a `LayoutSettings` object (line limit, indent size, braces etc.)

- A tree of immutable *fragments* (see `atmfjstc.lib.fluent_codegen.ast.*`) describes the output in terms of the
  engine's operations. A fragment can be rendered any number of times, with any settings.

- A set of fluent *builders* (see `atmfjstc.lib.fluent_codegen.builders.*`) assembles fragment trees through chained
  calls. Each builder is completed by a *terminal* call that hands the finished fragment to whoever created the builder
  and returns control to it, so that nested constructs can be described in a single chain. Builders enforce their
  structural rules as soon as they are broken, and can be closed exactly once.

All the builders that work on the same unit of code share a `BuildContext`, which tracks builders that were never
closed, collects the imports needed by the generated code, and holds generation options.

Example
-------

::

    with BuildContext() as ctx:
        body = block(ctx) \\
            .declare('total').with_modifier('final').initialized_with(0).as_type('int') \\
            .if_('items != null') \\
                .then_do().invoke('process').with_argument('items').with_argument('total').on_this().end_block() \\
                .end_if() \\
            .returning('total') \\
            .end_block()

    print(body.stringify())

Result::

    {
        final int total = 0;
        if (items != null) {
            this.process(items, total);
        }
        return total;
    }
"""
