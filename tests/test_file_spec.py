import tempfile
import unittest

from pathlib import Path

from atmfjstc.lib.kotlin_codegen.FileSpec import FileSpec, CompilationUnit
from atmfjstc.lib.kotlin_codegen.TypeSpec import TypeSpec
from atmfjstc.lib.kotlin_codegen.FunSpec import FunSpec
from atmfjstc.lib.kotlin_codegen.PropertySpec import PropertySpec
from atmfjstc.lib.kotlin_codegen.AnnotationSpec import AnnotationSpec, UseSiteTarget
from atmfjstc.lib.kotlin_codegen.MemberName import MemberName
from atmfjstc.lib.kotlin_codegen.CodegenContext import CodegenContext
from atmfjstc.lib.kotlin_codegen.typenames import ClassName, STRING, DOUBLE
from atmfjstc.lib.kotlin_codegen.errors import EmitStateError, ModelValidationError


def _taco():
    return TypeSpec.class_builder('Taco').add_property(
        PropertySpec.builder('name', STRING).set_initializer('%S', 'x').build()
    ).build()


def _greeter_file():
    greeter = TypeSpec.class_builder('Greeter').add_function(
        FunSpec.builder('greet').add_parameter('name', STRING).add_statement('println(%S + name)', 'Hello, ').build()
    ).build()

    return FileSpec.get('com.example', greeter)


class FileRenderTest(unittest.TestCase):
    def test_imports_are_collected(self):
        self.assertEqual(
            str(FileSpec.get('com.example', _taco())),
            'package com.example\n\nimport kotlin.String\n\npublic class Taco {\n  public val name: String = "x"\n}\n'
        )

    def test_default_imports_are_omitted(self):
        file = FileSpec.builder('com.example', 'Taco').add_type(_taco()).add_kotlin_default_imports().build()

        self.assertEqual(
            str(file),
            'package com.example\n\npublic class Taco {\n  public val name: String = "x"\n}\n'
        )

    def test_greeter(self):
        self.assertEqual(
            str(_greeter_file()),
            'package com.example\n'
            '\n'
            'import kotlin.String\n'
            '\n'
            'public class Greeter {\n'
            '  public fun greet(name: String) {\n'
            '    println("Hello, " + name)\n'
            '  }\n'
            '}\n'
        )

    def test_colliding_names_stay_qualified(self):
        holder = (
            TypeSpec.class_builder('Holder')
            .add_property('a', ClassName('com.a', 'Foo'))
            .add_property('b', ClassName('com.b', 'Foo'))
            .build()
        )
        output = str(FileSpec.get('com.example', holder))

        self.assertNotIn('import', output)
        self.assertIn('public val a: com.a.Foo', output)
        self.assertIn('public val b: com.b.Foo', output)

    def test_same_package_needs_no_import(self):
        file = FileSpec.builder('com.example', 'Bars').add_property(
            PropertySpec.builder('bar', ClassName('com.example', 'Bar')).build()
        ).build()

        self.assertEqual(str(file), 'package com.example\n\npublic val bar: Bar\n')

    def test_type_shadowed_by_enclosing_class(self):
        bar = TypeSpec.class_builder('Bar').add_property('other', ClassName('com.other', 'Bar')).build()
        output = str(FileSpec.get('com.example', bar))

        self.assertIn('public val other: com.other.Bar', output)
        self.assertNotIn('import com.other.Bar', output)

    def test_member_import(self):
        fun = (
            FunSpec.builder('f')
            .add_parameter('x', DOUBLE)
            .returns(DOUBLE)
            .add_statement('return %M(x)', MemberName('kotlin.math', 'sin'))
            .build()
        )
        file = FileSpec.builder('com.example', 'Math').add_function(fun).build()

        self.assertEqual(
            str(file),
            'package com.example\n'
            '\n'
            'import kotlin.Double\n'
            'import kotlin.math.sin\n'
            '\n'
            'public fun f(x: Double): Double = sin(x)\n'
        )

    def test_type_and_member_sharing_a_name_stay_qualified(self):
        fun = FunSpec.builder('f').add_statement(
            'val x: %T = %M()', ClassName('com.a', 'Bar'), MemberName('com.b', 'Bar')
        ).build()
        output = str(FileSpec.builder('com.example', 'Bars').add_function(fun).build())

        self.assertNotIn('import', output)
        self.assertIn('val x: com.a.Bar = com.b.Bar()\n', output)

    def test_aliased_import(self):
        foo = ClassName('com.a', 'Foo')
        file = (
            FileSpec.builder('com.example', 'Aliases')
            .add_aliased_import(foo, 'AFoo')
            .add_property(PropertySpec.builder('x', foo).build())
            .build()
        )
        output = str(file)

        self.assertIn('import com.a.Foo as AFoo\n', output)
        self.assertIn('public val x: AFoo\n', output)

    def test_members_are_separated(self):
        file = (
            FileSpec.builder('com.example', 'Things')
            .add_property(PropertySpec.builder('a', ClassName('com.example', 'A')).build())
            .add_property(PropertySpec.builder('b', ClassName('com.example', 'A')).build())
            .build()
        )

        self.assertEqual(str(file), 'package com.example\n\npublic val a: A\n\npublic val b: A\n')

    def test_comment(self):
        file = FileSpec.builder('com.example', 'Taco').add_comment('Generated.').add_type(_taco()).build()

        self.assertTrue(str(file).startswith('// Generated.\n'))

    def test_file_annotation(self):
        annotation = (
            AnnotationSpec.builder(ClassName('kotlin.jvm', 'JvmName'))
            .add_member('%S', 'Tacos')
            .set_use_site_target(UseSiteTarget.FILE)
            .build()
        )
        file = FileSpec.builder('com.example', 'Taco').add_annotation(annotation).add_type(_taco()).build()
        output = str(file)

        self.assertTrue(output.startswith('@file:'))
        self.assertIn('package com.example\n', output)

    def test_default_package(self):
        file = FileSpec.builder('', 'Bars').add_type(TypeSpec.object_builder('O').build()).build()

        self.assertEqual(str(file), 'public object O\n')

    def test_deterministic(self):
        self.assertEqual(str(_greeter_file()), str(_greeter_file()))

    def test_unbalanced_statement_fails(self):
        fun = FunSpec.builder('f').add_code('»').build()
        file = FileSpec.builder('com.example', 'Broken').add_function(fun).build()

        with self.assertRaises(EmitStateError):
            str(file)


class IndentTest(unittest.TestCase):
    def test_file_indent(self):
        file = FileSpec.builder('com.example', 'Taco').add_type(_taco()).indent('    ').build()

        self.assertIn('\n    public val name: String = "x"\n', str(file))

    def test_context_indent(self):
        file = FileSpec.get('com.example', _taco())

        self.assertIn('\n\tpublic val name: String = "x"\n', file.to_string(CodegenContext(indent='\t')))

    def test_file_indent_wins(self):
        file = FileSpec.builder('com.example', 'Taco').add_type(_taco()).indent('    ').build()

        self.assertIn('\n    public val name', file.to_string(CodegenContext(indent='\t')))


class OutputTest(unittest.TestCase):
    def test_relative_path(self):
        self.assertEqual(_greeter_file().relative_path, 'com/example/Greeter.kt')
        self.assertEqual(FileSpec.builder('', 'Top').build().relative_path, 'Top.kt')

    def test_builder_from_class_name(self):
        file = FileSpec.builder(ClassName('com.example', 'Greeter')).build()

        self.assertEqual(file.relative_path, 'com/example/Greeter.kt')

    def test_compilation_unit(self):
        file = _greeter_file()
        unit = file.to_compilation_unit()

        self.assertIsInstance(unit, CompilationUnit)
        self.assertEqual(unit.uri, 'com/example/Greeter.kt')
        self.assertEqual(unit.char_content(), str(file))
        self.assertEqual(unit.bytes_content(), str(file).encode('utf-8'))

    def test_write_to_directory(self):
        file = _greeter_file()

        with tempfile.TemporaryDirectory() as tmp:
            path = file.write_to_directory(tmp)

            self.assertEqual(path, Path(tmp) / 'com' / 'example' / 'Greeter.kt')
            self.assertEqual(path.read_text(encoding='utf-8'), str(file))

    def test_logs_rendering(self):
        with self.assertLogs('atmfjstc.lib.kotlin_codegen.FileSpec', 'DEBUG') as logs:
            str(_greeter_file())

        self.assertTrue(any('Rendering file com/example/Greeter.kt' in line for line in logs.output))


class FileSpecValidationTest(unittest.TestCase):
    def test_constructor_is_not_a_top_level_function(self):
        with self.assertRaises(ModelValidationError):
            FileSpec.builder('com.example', 'X').add_function(FunSpec.constructor_builder().build())

    def test_file_annotation_needs_file_target(self):
        with self.assertRaises(ModelValidationError):
            FileSpec.builder('com.example', 'X').add_annotation(ClassName('kotlin.jvm', 'JvmName')).build()

    def test_wildcard_import(self):
        with self.assertRaises(ValueError):
            FileSpec.builder('com.example', 'X').add_import('kotlin.math', '*')

    def test_empty_name(self):
        with self.assertRaises(ValueError):
            FileSpec.builder('com.example', '')

    def test_nested_class_name(self):
        with self.assertRaises(ValueError):
            FileSpec.builder(ClassName('com.example', 'Outer', 'Inner'))
