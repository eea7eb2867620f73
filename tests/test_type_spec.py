import unittest

from atmfjstc.lib.kotlin_codegen.TypeSpec import TypeSpec
from atmfjstc.lib.kotlin_codegen.TypeAliasSpec import TypeAliasSpec
from atmfjstc.lib.kotlin_codegen.FunSpec import FunSpec
from atmfjstc.lib.kotlin_codegen.PropertySpec import PropertySpec
from atmfjstc.lib.kotlin_codegen.ParameterSpec import ParameterSpec
from atmfjstc.lib.kotlin_codegen.AnnotationSpec import AnnotationSpec, UseSiteTarget
from atmfjstc.lib.kotlin_codegen.CodeBlock import CodeBlock
from atmfjstc.lib.kotlin_codegen.typenames import ClassName, TypeVariableName, INT, STRING, DOUBLE, LIST
from atmfjstc.lib.kotlin_codegen.modifiers import KModifier
from atmfjstc.lib.kotlin_codegen.errors import ModelValidationError


MARKER = ClassName('com.example', 'Marker')


def _point():
    constructor = FunSpec.constructor_builder().add_parameter('x', INT).add_parameter('y', INT).build()

    return (
        TypeSpec.class_builder('Point')
        .add_modifiers(KModifier.DATA)
        .set_primary_constructor(constructor)
        .add_property(PropertySpec.builder('x', INT).set_initializer('x').build())
        .add_property(PropertySpec.builder('y', INT).set_initializer('y').build())
        .build()
    )


class ClassRenderTest(unittest.TestCase):
    def test_empty_class(self):
        self.assertEqual(str(TypeSpec.class_builder('Empty').build()), 'public class Empty\n')

    def test_class_with_property(self):
        taco = TypeSpec.class_builder('Taco').add_property(
            PropertySpec.builder('name', STRING).set_initializer('%S', 'x').build()
        ).build()

        self.assertEqual(str(taco), 'public class Taco {\n  public val name: kotlin.String = "x"\n}\n')

    def test_members_are_separated_by_blank_lines(self):
        taco = (
            TypeSpec.class_builder('Taco')
            .add_property('a', INT)
            .add_property('b', INT)
            .add_function(FunSpec.builder('eat').build())
            .build()
        )

        self.assertEqual(
            str(taco),
            'public class Taco {\n'
            '  public val a: kotlin.Int\n'
            '\n'
            '  public val b: kotlin.Int\n'
            '\n'
            '  public fun eat() {\n'
            '  }\n'
            '}\n'
        )

    def test_constructor_properties_are_folded(self):
        self.assertEqual(
            str(_point()),
            'public data class Point(\n  public val x: kotlin.Int,\n  public val y: kotlin.Int,\n)\n'
        )

    def test_unmatched_property_is_not_folded(self):
        constructor = FunSpec.constructor_builder().add_parameter('x', INT).build()
        box = (
            TypeSpec.class_builder('Box')
            .set_primary_constructor(constructor)
            .add_property(PropertySpec.builder('x', INT).set_initializer('x + 1').build())
            .build()
        )

        self.assertEqual(
            str(box),
            'public class Box(\n  x: kotlin.Int,\n) {\n  public val x: kotlin.Int = x + 1\n}\n'
        )

    def test_folded_property_has_single_doc_comment(self):
        parameter = ParameterSpec.builder('label', STRING).add_annotation(MARKER).build()
        constructor = FunSpec.constructor_builder().add_parameter(parameter).build()
        prop = PropertySpec.builder('label', STRING).set_initializer('label').add_kdoc(
            'The label. Never contains */ text.\n'
        ).build()

        box = TypeSpec.class_builder('Box').set_primary_constructor(constructor).add_property(prop).build()
        output = str(box)

        self.assertEqual(
            output,
            '/**\n'
            ' * @property label The label. Never contains &#42;/ text.\n'
            ' */\n'
            'public class Box(\n'
            '  @com.example.Marker\n'
            '  public val label: kotlin.String,\n'
            ')\n'
        )
        self.assertEqual(output.count('/**'), 1)
        self.assertEqual(output.count('*/'), 1)

    def test_doc_terminator_split_across_kdoc_calls(self):
        foo = TypeSpec.class_builder('Foo').add_kdoc('Ends with *').add_kdoc('/ then more').build()
        output = str(foo)

        self.assertEqual(output, '/**\n * Ends with *&#47; then more\n */\npublic class Foo\n')
        self.assertEqual(output.count('*/'), 1)

    def test_constructor_parameter_docs(self):
        parameter = ParameterSpec.builder('size', INT).add_kdoc('The size.').build()
        constructor = FunSpec.constructor_builder().add_parameter(parameter).build()
        box = TypeSpec.class_builder('Box').add_kdoc('A box.\n').set_primary_constructor(constructor).build()

        self.assertEqual(
            str(box),
            '/**\n * A box.\n *\n * @param size The size.\n */\npublic class Box(\n  size: kotlin.Int,\n)\n'
        )

    def test_supertypes(self):
        impl = (
            TypeSpec.class_builder('Impl')
            .set_superclass(ClassName('com.example', 'Base'))
            .add_superclass_constructor_parameter('%S', 'x')
            .add_superinterface(ClassName('com.example', 'Api'))
            .build()
        )

        self.assertEqual(str(impl), 'public class Impl : com.example.Base("x"), com.example.Api\n')

    def test_interface_delegation(self):
        api = ClassName('com.example', 'Api')
        constructor = FunSpec.constructor_builder().add_parameter('base', api).build()
        impl = TypeSpec.class_builder('Impl').set_primary_constructor(constructor).add_superinterface(
            api, 'base'
        ).build()

        self.assertEqual(
            str(impl),
            'public class Impl(\n  base: com.example.Api,\n) : com.example.Api by base\n'
        )

    def test_type_variables(self):
        box = TypeSpec.class_builder('Box').add_type_variable(TypeVariableName('T', STRING)).build()

        self.assertEqual(str(box), 'public class Box<T : kotlin.String>\n')

    def test_initializer_block(self):
        a = TypeSpec.class_builder('A').add_initializer_block('println()\n').build()

        self.assertEqual(str(a), 'public class A {\n  init {\n    println()\n  }\n}\n')

    def test_nested_type(self):
        outer = TypeSpec.class_builder('Outer').add_type(TypeSpec.class_builder('Inner').build()).build()

        self.assertEqual(str(outer), 'public class Outer {\n  public class Inner\n}\n')

    def test_nested_type_alias(self):
        outer = TypeSpec.class_builder('Outer').add_type_alias(
            TypeAliasSpec.builder('Names', LIST.parameterized_by(STRING)).build()
        ).build()

        self.assertEqual(
            str(outer),
            'public class Outer {\n  public typealias Names = kotlin.collections.List<kotlin.String>\n}\n'
        )

    def test_annotated_class(self):
        a = TypeSpec.class_builder('A').add_annotation(
            AnnotationSpec.builder(MARKER).add_member('name = %S', 'a').build()
        ).build()

        self.assertEqual(str(a), '@com.example.Marker(name = "a")\npublic class A\n')


class OtherKindsRenderTest(unittest.TestCase):
    def test_object(self):
        self.assertEqual(str(TypeSpec.object_builder('Registry').build()), 'public object Registry\n')

    def test_interface(self):
        shape = TypeSpec.interface_builder('Shape').add_function(
            FunSpec.builder('area').add_modifiers(KModifier.ABSTRACT).returns(DOUBLE).build()
        ).build()

        self.assertEqual(str(shape), 'public interface Shape {\n  public fun area(): kotlin.Double\n}\n')

    def test_enum(self):
        color = TypeSpec.enum_builder('Color').add_enum_constant('RED').add_enum_constant('GREEN').build()

        self.assertEqual(str(color), 'public enum class Color {\n  RED,\n  GREEN,\n}\n')

    def test_enum_with_members(self):
        color = (
            TypeSpec.enum_builder('Color')
            .set_primary_constructor(FunSpec.constructor_builder().add_parameter('rgb', INT).build())
            .add_enum_constant('RED', TypeSpec.anonymous_class_builder().add_superclass_constructor_parameter(
                '%L', 0xff0000
            ).build())
            .add_property(PropertySpec.builder('rgb', INT).set_initializer('rgb').build())
            .add_function(FunSpec.builder('f').build())
            .build()
        )

        self.assertEqual(
            str(color),
            'public enum class Color(\n'
            '  public val rgb: kotlin.Int,\n'
            ') {\n'
            '  RED(16_711_680),\n'
            '  ;\n'
            '\n'
            '  public fun f() {\n'
            '  }\n'
            '}\n'
        )

    def test_companion_object(self):
        a = TypeSpec.class_builder('A').add_type(
            TypeSpec.companion_object_builder().add_property(
                PropertySpec.builder('X', INT, KModifier.CONST).set_initializer('%L', 1).build()
            ).build()
        ).build()

        self.assertEqual(
            str(a),
            'public class A {\n  public companion object {\n    public const val X: kotlin.Int = 1\n  }\n}\n'
        )

    def test_named_companion_object(self):
        a = TypeSpec.class_builder('A').add_type(TypeSpec.companion_object_builder('Factory').build()).build()

        self.assertEqual(str(a), 'public class A {\n  public companion object Factory\n}\n')

    def test_anonymous_class(self):
        runnable = ClassName('java.lang', 'Runnable')
        anonymous = TypeSpec.anonymous_class_builder().add_superinterface(runnable).add_function(
            FunSpec.builder('run').add_modifiers(KModifier.OVERRIDE).build()
        ).build()

        self.assertEqual(str(anonymous), 'object : java.lang.Runnable {\n  override fun run() {\n  }\n}')

    def test_anonymous_class_as_literal(self):
        anonymous = TypeSpec.anonymous_class_builder().add_superinterface(ClassName('java.lang', 'Runnable')).build()

        self.assertEqual(str(CodeBlock.of('val r = %L', anonymous)), 'val r = object : java.lang.Runnable {\n}')

    def test_type_alias(self):
        alias = TypeAliasSpec.builder('Names', LIST.parameterized_by(STRING)).add_modifiers(KModifier.INTERNAL).build()

        self.assertEqual(str(alias), 'internal typealias Names = kotlin.collections.List<kotlin.String>\n')


class TypeSpecModelTest(unittest.TestCase):
    def test_to_builder(self):
        original = _point()
        derived = original.to_builder(name='Vector').build()

        self.assertEqual(derived.name, 'Vector')
        self.assertEqual(original.name, 'Point')
        self.assertEqual(len(derived.property_specs), 2)

    def test_builder_snapshot(self):
        builder = TypeSpec.class_builder('A').add_property('a', INT)
        first = builder.build()
        builder.add_property('b', INT)

        self.assertEqual(len(first.property_specs), 1)
        self.assertEqual(len(builder.build().property_specs), 2)

    def test_properties(self):
        self.assertTrue(TypeSpec.enum_builder('E').build().is_enum)
        self.assertTrue(TypeSpec.annotation_builder('A').build().is_annotation)
        self.assertTrue(TypeSpec.anonymous_class_builder().build().is_anonymous_class)
        self.assertTrue(TypeSpec.companion_object_builder().build().is_companion)

    def test_equality(self):
        self.assertEqual(_point(), _point())
        self.assertEqual(hash(_point()), hash(_point()))


class TypeSpecValidationTest(unittest.TestCase):
    def test_enum_constant_on_class(self):
        with self.assertRaises(ModelValidationError):
            TypeSpec.class_builder('A').add_enum_constant('X').build()

    def test_reserved_enum_constant(self):
        with self.assertRaises(ModelValidationError):
            TypeSpec.enum_builder('E').add_enum_constant('name')

    def test_abstract_function_in_concrete_class(self):
        with self.assertRaises(ModelValidationError):
            TypeSpec.class_builder('A').add_function(
                FunSpec.builder('f').add_modifiers(KModifier.ABSTRACT).build()
            ).build()

    def test_abstract_property_in_concrete_class(self):
        with self.assertRaises(ModelValidationError):
            TypeSpec.class_builder('A').add_property('x', INT, KModifier.ABSTRACT).build()

    def test_interface_primary_constructor(self):
        with self.assertRaises(ModelValidationError):
            TypeSpec.interface_builder('I').set_primary_constructor(FunSpec.constructor_builder().build())

    def test_primary_constructor_must_be_constructor(self):
        with self.assertRaises(ModelValidationError):
            TypeSpec.class_builder('A').set_primary_constructor(FunSpec.builder('f').build())

    def test_modifiers_on_anonymous_class(self):
        with self.assertRaises(ModelValidationError):
            TypeSpec.anonymous_class_builder().add_modifiers(KModifier.PRIVATE)

    def test_value_class_parameters(self):
        constructor = FunSpec.constructor_builder().add_parameter('a', INT).add_parameter('b', INT).build()

        with self.assertRaises(ModelValidationError):
            TypeSpec.class_builder('V').add_modifiers(KModifier.VALUE).set_primary_constructor(constructor)

    def test_value_class_needs_property(self):
        constructor = FunSpec.constructor_builder().add_parameter('a', INT).build()

        with self.assertRaises(ModelValidationError):
            TypeSpec.class_builder('V').add_modifiers(KModifier.VALUE).set_primary_constructor(constructor).build()

    def test_fun_interface_needs_one_abstract_function(self):
        abstract = FunSpec.builder('f').add_modifiers(KModifier.ABSTRACT).build()

        with self.assertRaises(ModelValidationError):
            TypeSpec.fun_interface_builder('F').add_function(abstract).add_function(
                abstract.to_builder(name='g').build()
            ).build()

    def test_multiple_companions(self):
        with self.assertRaises(ModelValidationError):
            TypeSpec.class_builder('A').add_type(TypeSpec.companion_object_builder().build()).add_type(
                TypeSpec.companion_object_builder('Other').build()
            ).build()

    def test_superclass_on_interface(self):
        with self.assertRaises(ModelValidationError):
            TypeSpec.interface_builder('I').set_superclass(ClassName('com.example', 'Base'))

    def test_annotation_class_function(self):
        with self.assertRaises(ModelValidationError):
            TypeSpec.annotation_builder('A').add_function(FunSpec.builder('f').build()).build()

    def test_type_alias_modifiers(self):
        with self.assertRaises(ModelValidationError):
            TypeAliasSpec.builder('A', INT).add_modifiers(KModifier.OPEN).build()

    def test_annotation_use_site_target(self):
        annotation = AnnotationSpec.builder(MARKER).set_use_site_target(UseSiteTarget.GET).build()

        self.assertEqual(str(annotation), '@get:com.example.Marker')
