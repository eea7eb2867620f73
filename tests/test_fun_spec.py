import unittest

from atmfjstc.lib.kotlin_codegen.FunSpec import FunSpec
from atmfjstc.lib.kotlin_codegen.ParameterSpec import ParameterSpec
from atmfjstc.lib.kotlin_codegen.CodeBlock import CodeBlock
from atmfjstc.lib.kotlin_codegen.typenames import ClassName, TypeVariableName, INT, STRING
from atmfjstc.lib.kotlin_codegen.modifiers import KModifier
from atmfjstc.lib.kotlin_codegen.errors import ModelValidationError


class FunSpecRenderTest(unittest.TestCase):
    def test_empty_body(self):
        self.assertEqual(str(FunSpec.builder('f').build()), 'public fun f() {\n}\n')

    def test_block_body(self):
        fun = FunSpec.builder('f').add_statement('val x = 1').add_statement('println(x)').build()

        self.assertEqual(str(fun), 'public fun f() {\n  val x = 1\n  println(x)\n}\n')

    def test_expression_body(self):
        fun = FunSpec.builder('answer').returns(INT).add_statement('return %L', 42).build()

        self.assertEqual(str(fun), 'public fun answer(): kotlin.Int = 42\n')

    def test_expression_body_spells_out_unit(self):
        fun = FunSpec.builder('f').add_statement('return g()').build()

        self.assertEqual(str(fun), 'public fun f(): kotlin.Unit = g()\n')

    def test_throw_expression_body(self):
        fun = FunSpec.builder('f').add_statement('throw %T()', ClassName('kotlin', 'IllegalStateException')).build()

        self.assertEqual(str(fun), 'public fun f(): kotlin.Unit = throw kotlin.IllegalStateException()\n')

    def test_parameters(self):
        fun = FunSpec.builder('f').add_parameter('a', INT).add_parameter('b', STRING).build()

        self.assertEqual(str(fun), 'public fun f(a: kotlin.Int, b: kotlin.String) {\n}\n')

    def test_many_parameters_one_per_line(self):
        fun = FunSpec.builder('f').add_parameter('a', INT).add_parameter('b', INT).add_parameter('c', INT).build()

        self.assertEqual(str(fun), 'public fun f(\n  a: kotlin.Int,\n  b: kotlin.Int,\n  c: kotlin.Int,\n) {\n}\n')

    def test_keyword_parameter_name(self):
        fun = FunSpec.builder('f').add_parameter('value', INT).build()

        self.assertEqual(str(fun), 'public fun f(`value`: kotlin.Int) {\n}\n')

    def test_receiver(self):
        fun = FunSpec.builder('shout').receiver(STRING).returns(STRING).add_statement('return uppercase()').build()

        self.assertEqual(str(fun), 'public fun kotlin.String.shout(): kotlin.String = uppercase()\n')

    def test_type_variables(self):
        t = TypeVariableName('T')
        fun = FunSpec.builder('id').add_type_variable(t).add_parameter('item', t).returns(t).add_statement(
            'return item'
        ).build()

        self.assertEqual(str(fun), 'public fun <T> id(item: T): T = item\n')

    def test_modifiers(self):
        fun = FunSpec.builder('f').add_modifiers(KModifier.PRIVATE, KModifier.SUSPEND).build()

        self.assertEqual(str(fun), 'private suspend fun f() {\n}\n')

    def test_override(self):
        fun = FunSpec.builder('toString').add_modifiers(KModifier.OVERRIDE).returns(STRING).add_statement(
            'return %S', 'x'
        ).build()

        self.assertEqual(str(fun), 'override fun toString(): kotlin.String = "x"\n')

    def test_abstract(self):
        fun = FunSpec.builder('f').add_modifiers(KModifier.ABSTRACT).returns(INT).build()

        self.assertEqual(str(fun), 'public abstract fun f(): kotlin.Int\n')

    def test_kdoc_tags(self):
        fun = (
            FunSpec.builder('f')
            .add_kdoc('Does things.\n')
            .add_parameter(ParameterSpec.builder('a', INT).add_kdoc('the a').build())
            .returns(INT, 'the result')
            .add_statement('return a')
            .build()
        )

        self.assertEqual(
            str(fun),
            '/**\n * Does things.\n *\n * @param a the a\n * @return the result\n */\n'
            'public fun f(a: kotlin.Int): kotlin.Int = a\n'
        )

    def test_control_flow(self):
        fun = (
            FunSpec.builder('f')
            .add_parameter('x', INT)
            .begin_control_flow('if (x > 0)')
            .add_statement('println(%S)', 'positive')
            .end_control_flow()
            .build()
        )

        self.assertEqual(
            str(fun),
            'public fun f(x: kotlin.Int) {\n  if (x > 0) {\n    println("positive")\n  }\n}\n'
        )

    def test_comment(self):
        fun = FunSpec.builder('f').add_comment('nothing to do').build()

        self.assertEqual(str(fun), 'public fun f() {\n  // nothing to do\n}\n')

    def test_secondary_constructor(self):
        constructor = FunSpec.constructor_builder().add_parameter('a', INT).call_this_constructor('a', '0').build()

        self.assertEqual(str(constructor), 'public constructor(a: kotlin.Int) : this(a, 0)\n')


class FunSpecModelTest(unittest.TestCase):
    def test_builder_snapshot(self):
        builder = FunSpec.builder('f').add_statement('a()')
        first = builder.build()
        builder.add_statement('b()').add_parameter('x', INT)
        second = builder.build()

        self.assertEqual(str(first), 'public fun f() {\n  a()\n}\n')
        self.assertEqual(len(first.parameters), 0)
        self.assertEqual(len(second.parameters), 1)

    def test_immutable(self):
        fun = FunSpec.builder('f').build()

        with self.assertRaises(AttributeError):
            fun.name = 'g'

    def test_equality(self):
        self.assertEqual(FunSpec.builder('f').build(), FunSpec.builder('f').build())
        self.assertEqual(hash(FunSpec.builder('f').build()), hash(FunSpec.builder('f').build()))
        self.assertNotEqual(FunSpec.builder('f').build(), FunSpec.builder('g').build())

    def test_to_builder(self):
        original = FunSpec.builder('f').add_statement('a()').tag('k', 'v').build()
        derived = original.to_builder().add_statement('b()').build()

        self.assertEqual(str(derived), 'public fun f() {\n  a()\n  b()\n}\n')
        self.assertEqual(derived.tag('k'), 'v')
        self.assertEqual(str(original), 'public fun f() {\n  a()\n}\n')

    def test_tag_removal(self):
        fun = FunSpec.builder('f').tag('k', 1).tag('k', None).build()

        self.assertEqual(len(fun.tags), 0)

    def test_parameter_lookup(self):
        fun = FunSpec.builder('f').add_parameter('a', INT).build()

        self.assertEqual(fun.parameter('a').type, INT)
        self.assertIsNone(fun.parameter('b'))

    def test_expression_body_from_code(self):
        fun = FunSpec.builder('f').returns(INT).add_code(CodeBlock.of('return 1\n')).build()

        self.assertEqual(str(fun), 'public fun f(): kotlin.Int = 1\n')


class FunSpecValidationTest(unittest.TestCase):
    def test_abstract_with_code(self):
        with self.assertRaises(ModelValidationError):
            FunSpec.builder('f').add_modifiers(KModifier.ABSTRACT).add_statement('g()').build()

    def test_getter_with_parameters(self):
        with self.assertRaises(ModelValidationError):
            FunSpec.getter_builder().add_parameter('a', INT).build()

    def test_setter_with_two_parameters(self):
        with self.assertRaises(ModelValidationError):
            FunSpec.setter_builder().add_parameter('a', INT).add_parameter('b', INT).build()

    def test_constructor_return_type(self):
        with self.assertRaises(ModelValidationError):
            FunSpec.constructor_builder().returns(INT)

    def test_accessor_receiver(self):
        with self.assertRaises(ModelValidationError):
            FunSpec.getter_builder().receiver(STRING)

    def test_delegating_non_constructor(self):
        with self.assertRaises(ModelValidationError):
            FunSpec.builder('f').call_super_constructor()

    def test_parameter_modifiers(self):
        with self.assertRaises(ModelValidationError):
            ParameterSpec.builder('a', INT, KModifier.PRIVATE).build()

    def test_vararg_parameter(self):
        self.assertEqual(str(ParameterSpec.get('names', STRING, KModifier.VARARG)), 'vararg names: kotlin.String')

    def test_parameter_default_value(self):
        parameter = ParameterSpec.builder('name', STRING).set_default_value('%S', 'x').build()

        self.assertEqual(str(parameter), 'name: kotlin.String = "x"')

    def test_empty_name(self):
        with self.assertRaises(ValueError):
            FunSpec.builder('')
