import unittest

from atmfjstc.lib.kotlin_codegen.lexical import (
    escape_if_necessary, escape_segments_if_necessary, string_literal_with_quotes,
    character_literal_without_single_quotes, is_keyword,
)
from atmfjstc.lib.kotlin_codegen.errors import InvalidIdentifierError
from atmfjstc.lib.kotlin_codegen.CodeBlock import CodeBlock


class EscapeIfNecessaryTest(unittest.TestCase):
    def test_plain_name(self):
        self.assertEqual(escape_if_necessary('foo'), 'foo')

    def test_keyword(self):
        self.assertEqual(escape_if_necessary('when'), '`when`')
        self.assertEqual(escape_if_necessary('value'), '`value`')

    def test_dollar(self):
        self.assertEqual(escape_if_necessary('a$b'), '`a$b`')

    def test_only_underscores(self):
        self.assertEqual(escape_if_necessary('__'), '`__`')

    def test_invalid_characters(self):
        self.assertEqual(escape_if_necessary('my name'), '`my name`')
        self.assertEqual(escape_if_necessary('1st'), '`1st`')

    def test_already_escaped(self):
        self.assertEqual(escape_if_necessary('`when`'), '`when`')

    def test_illegal_characters(self):
        with self.assertRaises(InvalidIdentifierError):
            escape_if_necessary('a.b')
        with self.assertRaises(InvalidIdentifierError):
            escape_if_necessary('a<b>')

    def test_illegal_characters_without_validation(self):
        self.assertEqual(escape_if_necessary('a.b', validate=False), '`a.b`')

    def test_segments(self):
        self.assertEqual(escape_segments_if_necessary('com.when.Foo'), 'com.`when`.Foo')
        self.assertEqual(escape_segments_if_necessary(''), '')

    def test_is_keyword(self):
        self.assertTrue(is_keyword('typealias'))
        self.assertFalse(is_keyword('foo'))


class StringLiteralTest(unittest.TestCase):
    def test_simple(self):
        self.assertEqual(string_literal_with_quotes('abc'), '"abc"')

    def test_quotes(self):
        self.assertEqual(string_literal_with_quotes('a"b'), '"a\\"b"')
        self.assertEqual(string_literal_with_quotes("it's"), '"it\'s"')

    def test_control_characters(self):
        self.assertEqual(string_literal_with_quotes('a\tb'), '"a\\tb"')
        self.assertEqual(string_literal_with_quotes('\x01'), '"\\u0001"')

    def test_backslash_escaped_once(self):
        self.assertEqual(string_literal_with_quotes('\\'), '"\\\\"')
        self.assertEqual(string_literal_with_quotes('\\n'), '"\\\\n"')

    def test_dollar_escaped(self):
        self.assertEqual(string_literal_with_quotes('cost: $5'), '"cost: ${\'$\'}5"')

    def test_escape_sequence_is_escaped_once(self):
        self.assertEqual(string_literal_with_quotes("${'$'}"), "\"${'$'}{'${'$'}'}\"")
        self.assertEqual(str(CodeBlock.of('%S', "${'$'}")), "\"${'$'}{'${'$'}'}\"")

    def test_template_keeps_dollar(self):
        self.assertEqual(string_literal_with_quotes('Hi $name', template=True), '"""Hi $name"""')

    def test_multiline(self):
        self.assertEqual(string_literal_with_quotes('a\nb'), '"""\n|a\n|b\n""".trimMargin()')

    def test_multiline_trailing_newline(self):
        self.assertEqual(string_literal_with_quotes('a\n'), '"""\n|a\n|""".trimMargin()')

    def test_multiline_dollar(self):
        self.assertEqual(string_literal_with_quotes('$a\nb'), '"""\n|${\'$\'}a\n|b\n""".trimMargin()')
        self.assertEqual(string_literal_with_quotes('$a\nb', template=True), '"""\n|$a\n|b\n""".trimMargin()')

    def test_multiline_in_constant_context(self):
        self.assertEqual(string_literal_with_quotes('a\nb', constant_context=True), '"a\\nb"')


class CharacterLiteralTest(unittest.TestCase):
    def test_plain(self):
        self.assertEqual(character_literal_without_single_quotes('a'), 'a')

    def test_escapes(self):
        self.assertEqual(character_literal_without_single_quotes("'"), "\\'")
        self.assertEqual(character_literal_without_single_quotes('"'), '"')
        self.assertEqual(character_literal_without_single_quotes('\n'), '\\n')
        self.assertEqual(character_literal_without_single_quotes('\x7f'), '\\u007f')
