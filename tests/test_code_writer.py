import io
import unittest

from dataclasses import FrozenInstanceError

from atmfjstc.lib.kotlin_codegen.CodeWriter import CodeWriter
from atmfjstc.lib.kotlin_codegen.CodegenContext import CodegenContext, DEFAULT_CONTEXT
from atmfjstc.lib.kotlin_codegen.CodeBlock import CodeBlock
from atmfjstc.lib.kotlin_codegen.errors import EmitStateError
from atmfjstc.lib.kotlin_codegen.modifiers import KModifier, sorted_modifiers


def _render(action, context=DEFAULT_CONTEXT):
    out = io.StringIO()

    with CodeWriter(out, context) as writer:
        action(writer)

    return out.getvalue()


class CodegenContextTest(unittest.TestCase):
    def test_defaults(self):
        self.assertEqual(DEFAULT_CONTEXT.indent, '  ')
        self.assertEqual(DEFAULT_CONTEXT.column_limit, 100)

    def test_derive(self):
        derived = DEFAULT_CONTEXT.derive(column_limit=80)

        self.assertEqual(derived.column_limit, 80)
        self.assertEqual(derived.indent, '  ')
        self.assertEqual(DEFAULT_CONTEXT.column_limit, 100)

    def test_immutable(self):
        with self.assertRaises(FrozenInstanceError):
            DEFAULT_CONTEXT.indent = '\t'

    def test_invalid_indent(self):
        with self.assertRaises(ValueError):
            CodegenContext(indent='x')

    def test_invalid_column_limit(self):
        with self.assertRaises(ValueError):
            CodegenContext(column_limit=0)
        with self.assertRaises(ValueError):
            CodegenContext(column_limit=True)


class StatementTest(unittest.TestCase):
    def test_wrapped_statement_is_double_indented(self):
        block = CodeBlock.builder().add_statement('return %L♢+♢%L', 'aaaaaaaaaa', 'bbbbbbbbbb').build()

        self.assertEqual(
            _render(lambda writer: writer.emit_code(block), CodegenContext(column_limit=20)),
            'return aaaaaaaaaa +\n    bbbbbbbbbb\n'
        )

    def test_statement_that_fits(self):
        block = CodeBlock.builder().add_statement('return %L♢+♢%L', 'a', 'b').build()

        self.assertEqual(_render(lambda writer: writer.emit_code(block)), 'return a + b\n')

    def test_multiline_statement(self):
        block = CodeBlock.builder().add_statement('val x = f(\na,\nb)').add_statement('g()').build()

        self.assertEqual(_render(lambda writer: writer.emit_code(block)), 'val x = f(\n    a,\n    b)\ng()\n')

    def test_unbalanced_close(self):
        with self.assertRaises(EmitStateError):
            _render(lambda writer: writer.emit_code('»'))

    def test_nested_open(self):
        with self.assertRaises(EmitStateError):
            _render(lambda writer: writer.emit_code('««'))

    def test_unindent_past_zero(self):
        with self.assertRaises(EmitStateError):
            _render(lambda writer: writer.emit_code('⇤'))


class IndentationTest(unittest.TestCase):
    def test_indent(self):
        self.assertEqual(_render(lambda writer: writer.emit_code('a {\n⇥b\n⇤}\n')), 'a {\n  b\n}\n')

    def test_custom_indent(self):
        self.assertEqual(
            _render(lambda writer: writer.emit_code('a {\n⇥b\n⇤}\n'), CodegenContext(indent='\t')),
            'a {\n\tb\n}\n'
        )

    def test_no_trailing_whitespace_on_blank_lines(self):
        self.assertEqual(_render(lambda writer: writer.emit_code('⇥a\n\nb\n⇤')), '  a\n\n  b\n')


class CommentsTest(unittest.TestCase):
    def test_kdoc(self):
        self.assertEqual(
            _render(lambda writer: writer.emit_kdoc(CodeBlock.of('First.\n\nSecond.\n'))),
            '/**\n * First.\n *\n * Second.\n */\n'
        )

    def test_kdoc_terminator_is_neutralized(self):
        output = _render(lambda writer: writer.emit_kdoc(CodeBlock.of('Ends */ here, /* opens\n')))

        self.assertEqual(output, '/**\n * Ends &#42;/ here, /&#42; opens\n */\n')
        self.assertEqual(output.count('*/'), 1)

    def test_terminator_split_across_parts(self):
        kdoc = CodeBlock.builder().add('Ends with *').add('/ then more').build()
        output = _render(lambda writer: writer.emit_kdoc(kdoc))

        self.assertEqual(output, '/**\n * Ends with *&#47; then more\n */\n')
        self.assertEqual(output.count('*/'), 1)

    def test_terminator_split_by_argument(self):
        output = _render(lambda writer: writer.emit_kdoc(CodeBlock.of('x %L/ y', 'a *')))

        self.assertEqual(output, '/**\n * x a *&#47; y\n */\n')
        self.assertEqual(output.count('*/'), 1)

    def test_opener_split_across_parts(self):
        kdoc = CodeBlock.builder().add('a /').add('* b').build()

        self.assertEqual(_render(lambda writer: writer.emit_kdoc(kdoc)), '/**\n * a /&#42; b\n */\n')

    def test_delimiter_characters_on_separate_lines(self):
        kdoc = CodeBlock.builder().add('a *\n').add('/ b').build()

        self.assertEqual(_render(lambda writer: writer.emit_kdoc(kdoc)), '/**\n * a *\n * / b\n */\n')

    def test_empty_kdoc(self):
        self.assertEqual(_render(lambda writer: writer.emit_kdoc(CodeBlock.of(''))), '')

    def test_comment(self):
        self.assertEqual(
            _render(lambda writer: writer.emit_comment(CodeBlock.of('Generated.\nDo not edit.'))),
            '// Generated.\n// Do not edit.\n'
        )


class ModifiersTest(unittest.TestCase):
    def test_order(self):
        self.assertEqual(
            sorted_modifiers({KModifier.DATA, KModifier.OPEN, KModifier.PUBLIC}),
            [KModifier.PUBLIC, KModifier.OPEN, KModifier.DATA]
        )

    def test_implicit_public_is_spelled_out(self):
        self.assertEqual(_render(lambda writer: writer.emit_modifiers(set(), {KModifier.PUBLIC})), 'public ')

    def test_other_visibility_replaces_public(self):
        self.assertEqual(
            _render(lambda writer: writer.emit_modifiers({KModifier.PRIVATE}, {KModifier.PUBLIC})), 'private '
        )

    def test_override_omits_public(self):
        self.assertEqual(
            _render(lambda writer: writer.emit_modifiers({KModifier.OVERRIDE}, {KModifier.PUBLIC})), 'override '
        )

    def test_implicit_modifiers_are_skipped(self):
        self.assertEqual(
            _render(lambda writer: writer.emit_modifiers(
                {KModifier.ABSTRACT, KModifier.SUSPEND}, {KModifier.PUBLIC, KModifier.ABSTRACT}
            )),
            'public suspend '
        )


class RenderToStringTest(unittest.TestCase):
    def test_diverts_output(self):
        out = io.StringIO()

        with CodeWriter(out) as writer:
            writer.emit('a ')
            captured = writer.render_to_string(lambda w: w.emit_code('%S', 'x'))
            writer.emit('b')

        self.assertEqual(captured, '"x"')
        self.assertEqual(out.getvalue(), 'a b')
