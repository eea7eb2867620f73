"""
Generated Kotlin source files.

A `FileSpec` is the unit that gets written out: a package declaration, imports and a sequence of top-level members.
Imports are never specified by hand (although explicit and aliased imports can be added); instead, the file is
rendered twice, the first time only to discover which types and members it refers to. See `imports` for the rules.
"""

import io
import logging
import os

from pathlib import Path
from typing import Dict, Optional, TextIO, Tuple, Union

from atmfjstc.lib.kotlin_codegen.base import Spec, SpecBuilder, AnnotatableBuilder, as_code_block
from atmfjstc.lib.kotlin_codegen.errors import ModelValidationError
from atmfjstc.lib.kotlin_codegen.lexical import escape_segments_if_necessary
from atmfjstc.lib.kotlin_codegen.modifiers import KModifier
from atmfjstc.lib.kotlin_codegen.CodegenContext import CodegenContext, DEFAULT_CONTEXT
from atmfjstc.lib.kotlin_codegen.typenames import ClassName
from atmfjstc.lib.kotlin_codegen.MemberName import MemberName
from atmfjstc.lib.kotlin_codegen.CodeBlock import CodeBlock, CodeBlockBuilder
from atmfjstc.lib.kotlin_codegen.CodeWriter import CodeWriter
from atmfjstc.lib.kotlin_codegen.imports import Import
from atmfjstc.lib.kotlin_codegen.AnnotationSpec import AnnotationSpec, UseSiteTarget
from atmfjstc.lib.kotlin_codegen.PropertySpec import PropertySpec
from atmfjstc.lib.kotlin_codegen.FunSpec import FunSpec
from atmfjstc.lib.kotlin_codegen.TypeSpec import TypeSpec
from atmfjstc.lib.kotlin_codegen.TypeAliasSpec import TypeAliasSpec


LOG = logging.getLogger(__name__)

KOTLIN_DEFAULT_IMPORTS = (
    'kotlin', 'kotlin.annotation', 'kotlin.collections', 'kotlin.comparisons', 'kotlin.io', 'kotlin.ranges',
    'kotlin.sequences', 'kotlin.text',
)
KOTLIN_DEFAULT_JVM_IMPORTS = ('java.lang',)
KOTLIN_DEFAULT_JS_IMPORTS = ('kotlin.js',)

FileMember = Union[TypeSpec, FunSpec, PropertySpec, TypeAliasSpec]


class FileSpec(Spec):
    """
    A Kotlin file containing top level members.

    Attributes:
        package_name: The package of the file ('' for the default package)
        name: The file name, without the ``.kt`` extension
        comment: A comment at the very top of the file
        annotations: File annotations (``@file:JvmName("X")``)
        members: The top-level types, functions, properties and type aliases, in declaration order
        default_imports: Packages whose members are imported implicitly, and thus need no ``import`` line
        indent: The indent unit to use for this file, overriding that of the render context
    """

    package_name: str
    name: str
    comment: CodeBlock
    annotations: Tuple[AnnotationSpec, ...]
    members: Tuple[FileMember, ...]
    default_imports: Tuple[str, ...]
    indent: Optional[str]

    _member_imports: Dict[str, Import]

    def __init__(self, builder: 'FileSpecBuilder'):
        self.package_name = builder.package_name
        self.name = builder.name
        self.comment = builder.comment.build()
        self.annotations = tuple(builder.annotations)
        self.members = tuple(builder.members)
        self.default_imports = tuple(sorted(builder.default_imports))
        self.indent = builder.indent_unit
        self._member_imports = {
            member_import.qualified_name: member_import for member_import in builder.member_imports
        }
        self.tags = builder._build_tags()
        self._lock()

    @staticmethod
    def builder(
        package_or_name: Union[str, ClassName, MemberName], file_name: Optional[str] = None
    ) -> 'FileSpecBuilder':
        """
        Creates a builder for a file. Accepts either a package and file name, or a top-level `ClassName` or
        `MemberName`, in which case the file is named after it and placed in its package.
        """
        if isinstance(package_or_name, ClassName):
            if len(package_or_name.simple_names) != 1:
                raise ValueError(f"nested types can't be used to name a file: {package_or_name}")
            return FileSpecBuilder(package_or_name.package_name, package_or_name.simple_name)
        if isinstance(package_or_name, MemberName):
            if package_or_name.enclosing_class_name is not None:
                raise ValueError(f"nested members can't be used to name a file: {package_or_name}")
            return FileSpecBuilder(package_or_name.package_name, package_or_name.simple_name)

        if file_name is None:
            raise TypeError("A file name is required along with a package name")

        return FileSpecBuilder(package_or_name, file_name)

    @staticmethod
    def get(package_name: str, type_spec: TypeSpec) -> 'FileSpec':
        """Returns a file containing a single type, named after it"""
        if type_spec.name is None:
            raise ValueError("file name required but type has no name")

        return FileSpecBuilder(package_name, type_spec.name).add_type(type_spec).build()

    @property
    def relative_path(self) -> str:
        """The path of the file relative to a source root, e.g. ``com/example/Foo.kt``"""
        directories = [] if self.package_name == '' else self.package_name.split('.')

        return '/'.join(directories + [self.name + '.kt'])

    def to_builder(self) -> 'FileSpecBuilder':
        builder = FileSpecBuilder(self.package_name, self.name)
        builder.comment.add_code(self.comment)
        builder.annotations.extend(self.annotations)
        builder.members.extend(self.members)
        builder.default_imports.update(self.default_imports)
        builder.member_imports.extend(self._member_imports.values())
        builder.indent_unit = self.indent
        builder.tags.update(self.tags)

        return builder

    def write_to(self, out: TextIO, context: Optional[CodegenContext] = None):
        """
        Writes the file's source code to a text stream.

        Args:
            out: Any object with a ``write(str)`` method
            context: The render options. The file's own indent setting, if any, takes precedence over the one here.

        Raises:
            EmitStateError: If the code in the file is malformed, e.g. has unbalanced statement markers
        """
        context = context or DEFAULT_CONTEXT
        if self.indent is not None:
            context = context.derive(indent=self.indent)

        writer = CodeWriter.with_collected_imports(
            out, context, self._member_imports, lambda collector: self._emit(collector, True)
        )

        LOG.debug("Rendering file %s", self.relative_path)
        with writer:
            self._emit(writer, False)
        LOG.debug("Finished rendering file %s", self.relative_path)

    def write_to_directory(self, directory: Union[str, os.PathLike], context: Optional[CodegenContext] = None) -> Path:
        """
        Writes the file to its place under a source root directory, creating package directories as needed.

        Returns:
            The path of the written file
        """
        directory = Path(directory)
        if directory.exists() and not directory.is_dir():
            raise NotADirectoryError(f"path {directory} exists but is not a directory")

        output_path = directory.joinpath(*self.relative_path.split('/'))
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with output_path.open('w', encoding='utf-8', newline='') as f:
            self.write_to(f, context)

        return output_path

    def to_string(self, context: Optional[CodegenContext] = None) -> str:
        buffer = io.StringIO()
        self.write_to(buffer, context)

        return buffer.getvalue()

    def to_compilation_unit(self) -> 'CompilationUnit':
        return CompilationUnit(self)

    def __str__(self):
        return self.to_string()

    def _emit(self, writer: CodeWriter, collecting_imports: bool):
        if not self.comment.is_empty():
            writer.emit_comment(self.comment)

        if len(self.annotations) > 0:
            writer.emit_annotations(self.annotations, False)
            writer.emit('\n')

        writer.push_package(self.package_name)

        escaped_package_name = escape_segments_if_necessary(self.package_name)
        if escaped_package_name != '':
            writer.emit_code('package %L\n', escaped_package_name)
            writer.emit('\n')

        rendered_imports = self._rendered_imports(writer, collecting_imports)
        for rendered_import in rendered_imports:
            writer.emit_code('import %L', rendered_import)
            writer.emit('\n')
        if len(rendered_imports) > 0:
            writer.emit('\n')

        for index, member in enumerate(self.members):
            if index > 0:
                writer.emit('\n')

            if isinstance(member, TypeSpec):
                member._emit(writer, None)
            elif isinstance(member, FunSpec):
                member._emit(writer, {KModifier.PUBLIC}, True)
            elif isinstance(member, PropertySpec):
                member._emit(writer, {KModifier.PUBLIC})
            else:
                member._emit(writer)

        writer.pop_package()

    def _rendered_imports(self, writer: CodeWriter, collecting_imports: bool):
        # Imports from default packages are only filtered in the final pass, so that they still claim their names
        # while imports are being collected
        default_imports = set()
        if not collecting_imports:
            default_imports = {escape_segments_if_necessary(package) for package in self.default_imports}

        plain = sorted({
            str(item) for item in writer.imports.values()
            if (item.alias is None) and (str(item).rsplit('.', 1)[0] not in default_imports)
        })
        aliased = sorted({str(item) for item in writer.imports.values() if item.alias is not None})

        return plain + aliased


class FileSpecBuilder(SpecBuilder, AnnotatableBuilder):
    def __init__(self, package_name: str, name: str):
        if name == '':
            raise ValueError("File name must not be empty")

        super().__init__()

        self.package_name = package_name
        self.name = name
        self.comment = CodeBlockBuilder()
        self.annotations = []
        self.members = []
        self.default_imports = set()
        self.member_imports = []
        self.indent_unit = None

    def add_comment(self, format_or_block: Union[str, CodeBlock], *args) -> 'FileSpecBuilder':
        self.comment.add_code(as_code_block(format_or_block, *args))
        return self

    def clear_comment(self) -> 'FileSpecBuilder':
        self.comment.clear()
        return self

    def add_type(self, type_spec: TypeSpec) -> 'FileSpecBuilder':
        self.members.append(type_spec)
        return self

    def add_function(self, fun_spec: FunSpec) -> 'FileSpecBuilder':
        if fun_spec.is_constructor or fun_spec.is_accessor:
            raise ModelValidationError(f"cannot add {fun_spec.name} to file {self.name}")

        self.members.append(fun_spec)
        return self

    def add_property(self, property_spec: PropertySpec) -> 'FileSpecBuilder':
        self.members.append(property_spec)
        return self

    def add_type_alias(self, type_alias_spec: TypeAliasSpec) -> 'FileSpecBuilder':
        self.members.append(type_alias_spec)
        return self

    def add_import(self, class_or_package: Union[ClassName, MemberName, str], *names: str) -> 'FileSpecBuilder':
        """
        Adds explicit imports. Accepts a `MemberName`, or a class or package followed by the names of members to
        import from it, e.g. ``add_import('kotlin.math', 'sin', 'cos')``.
        """
        if isinstance(class_or_package, MemberName):
            if len(names) > 0:
                raise TypeError("No further names are accepted along with a MemberName")
            self.member_imports.append(Import(class_or_package.canonical_name))
            return self

        if len(names) == 0:
            raise ValueError("names array is empty")
        if '*' in names:
            raise ValueError("Wildcard imports are not allowed")

        prefix = class_or_package.canonical_name if isinstance(class_or_package, ClassName) else class_or_package
        for name in names:
            self.member_imports.append(Import(prefix + '.' + name if prefix != '' else name))

        return self

    def add_aliased_import(self, name: Union[ClassName, MemberName], alias: str) -> 'FileSpecBuilder':
        self.member_imports.append(Import(name.canonical_name, alias))
        return self

    def add_default_package_import(self, package_name: str) -> 'FileSpecBuilder':
        self.default_imports.add(package_name)
        return self

    def add_kotlin_default_imports(self, include_jvm: bool = True, include_js: bool = True) -> 'FileSpecBuilder':
        """
        Marks the packages that Kotlin imports implicitly as default imports, so that no ``import`` lines are written
        for them.
        """
        self.default_imports.update(KOTLIN_DEFAULT_IMPORTS)
        if include_jvm:
            self.default_imports.update(KOTLIN_DEFAULT_JVM_IMPORTS)
        if include_js:
            self.default_imports.update(KOTLIN_DEFAULT_JS_IMPORTS)

        return self

    def indent(self, indent: str) -> 'FileSpecBuilder':
        self.indent_unit = indent
        return self

    def build(self) -> 'FileSpec':
        for annotation in self.annotations:
            if annotation.use_site_target != UseSiteTarget.FILE:
                raise ModelValidationError(
                    f"Use-site target {annotation.use_site_target} not supported for file annotations."
                )

        return FileSpec(self)


FileSpec.Builder = FileSpecBuilder


class CompilationUnit:
    """
    A view of a `FileSpec` as a compiler input: a source file with a relative URI and on-demand content.
    """

    kind = 'SOURCE'

    def __init__(self, file_spec: FileSpec):
        self._file_spec = file_spec

    @property
    def uri(self) -> str:
        return self._file_spec.relative_path

    @property
    def file_spec(self) -> FileSpec:
        return self._file_spec

    def char_content(self) -> str:
        return str(self._file_spec)

    def bytes_content(self) -> bytes:
        return self.char_content().encode('utf-8')

    def __repr__(self):
        return f"CompilationUnit({self.uri!r})"
