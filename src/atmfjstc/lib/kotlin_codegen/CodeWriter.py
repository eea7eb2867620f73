"""
The writer that turns code blocks and declaration specs into Kotlin text.

The writer tracks everything needed to lay out code correctly: the indentation level, whether KDoc or a comment is
being written, the current package and stack of enclosing types (for resolving short names), whether a multi-line
statement is in progress, and the imports in effect. All text goes through `CodeWriter.emit`, which writes indentation
lazily so that no line ever ends in whitespace.
"""

import io
import logging
import sys

from typing import Callable, Iterable, List, Mapping, Optional, Set, TextIO, Union

from atmfjstc.lib.kotlin_codegen.errors import EmitStateError
from atmfjstc.lib.kotlin_codegen.CodegenContext import CodegenContext, DEFAULT_CONTEXT
from atmfjstc.lib.kotlin_codegen.LineWrapper import LineWrapper
from atmfjstc.lib.kotlin_codegen.lexical import (
    escape_character_literals, is_identifier_part, is_identifier_start, string_literal_with_quotes,
)
from atmfjstc.lib.kotlin_codegen.modifiers import KModifier, sorted_modifiers
from atmfjstc.lib.kotlin_codegen.typenames import ClassName, TypeVariableName, NULLABLE_ANY
from atmfjstc.lib.kotlin_codegen.MemberName import MemberName
from atmfjstc.lib.kotlin_codegen.CodeBlock import CodeBlock
from atmfjstc.lib.kotlin_codegen.imports import Import, ImportResolver


LOG = logging.getLogger(__name__)

_NO_PACKAGE = object()
_UNLIMITED_CONTEXT = CodegenContext(column_limit=sys.maxsize)


class _NullSink:
    def write(self, text: str):
        pass


class CodeWriter:
    """
    Converts code and declarations to text suitable for both human and compiler consumption.

    Use `with_collected_imports` to create a writer for a whole file. Writers for standalone fragments (e.g. for
    ``str()`` of a code block) can be created directly; they know of no imports and will thus fully qualify all names.
    """

    statement_line: int
    """
    When emitting a statement, this is the line of the statement currently being written. The first line of a
    statement is indented normally and subsequent wrapped lines are double-indented. This is -1 when the
    currently-written line isn't part of a statement.
    """

    imports: Mapping[str, Import]

    _out: LineWrapper
    _context: CodegenContext
    _indent_level: int = 0
    _kdoc: bool = False
    _kdoc_tail: str = ''
    _comment: bool = False
    _trailing_newline: bool = False
    _type_stack: list
    _member_import_names: Set[str]
    _resolver: ImportResolver

    def __init__(
        self, out: TextIO, context: CodegenContext = DEFAULT_CONTEXT, imports: Optional[Mapping[str, Import]] = None,
        imported_types: Optional[Mapping[str, ClassName]] = None,
        imported_members: Optional[Mapping[str, MemberName]] = None,
    ):
        self._context = context
        self._out = LineWrapper(out, context.indent, context.column_limit)
        self._package_name = _NO_PACKAGE
        self._type_stack = []

        self.imports = dict(imports or dict())
        self._imported_types = dict(imported_types or dict())
        self._imported_members = dict(imported_members or dict())
        self._resolver = ImportResolver(self.imports)
        self._member_import_names = {
            qualified_name.rsplit('.', 1)[0] for qualified_name in self.imports.keys() if '.' in qualified_name
        }

        self.statement_line = -1

    @property
    def context(self) -> CodegenContext:
        return self._context

    @property
    def resolver(self) -> ImportResolver:
        return self._resolver

    def indent(self, levels: int = 1) -> 'CodeWriter':
        self._indent_level += levels
        return self

    def unindent(self, levels: int = 1) -> 'CodeWriter':
        if self._indent_level - levels < 0:
            raise EmitStateError(f"cannot unindent {levels} from {self._indent_level}")

        self._indent_level -= levels
        return self

    @property
    def package_name(self) -> Optional[str]:
        return None if self._package_name is _NO_PACKAGE else self._package_name

    def _package_or_default(self) -> str:
        return self.package_name or ''

    def push_package(self, package_name: str) -> 'CodeWriter':
        if self._package_name is not _NO_PACKAGE:
            raise EmitStateError(f"package already set: {self._package_name}")

        self._package_name = package_name
        return self

    def pop_package(self) -> 'CodeWriter':
        if self._package_name is _NO_PACKAGE:
            raise EmitStateError("package not set")

        self._package_name = _NO_PACKAGE
        return self

    def push_type(self, type_spec) -> 'CodeWriter':
        self._type_stack.append(type_spec)
        return self

    def pop_type(self) -> 'CodeWriter':
        self._type_stack.pop()
        return self

    def emit_comment(self, code_block: CodeBlock):
        self._trailing_newline = True  # Force the '//' prefix for the comment
        self._comment = True
        try:
            self.emit_code(code_block)
            self.emit('\n')
        finally:
            self._comment = False

    def emit_kdoc(self, kdoc: CodeBlock):
        """
        Emits a KDoc comment block. Comment delimiters in the content are neutralized, so the result is always exactly
        one well-formed comment.
        """
        if kdoc.is_empty():
            return

        self.emit('/**\n')
        self._kdoc = True
        self._kdoc_tail = ''
        try:
            self.emit_code(kdoc, ensure_trailing_newline=True)
        finally:
            self._kdoc = False
        self.emit(' */\n')

    def emit_annotations(self, annotations: Iterable, inline: bool):
        for annotation in annotations:
            annotation._emit(self, inline)
            self.emit(' ' if inline else '\n')

    def emit_modifiers(self, modifiers: Iterable[KModifier], implicit_modifiers: Iterable[KModifier] = ()):
        """
        Emits modifiers in the standard order. Modifiers in `implicit_modifiers` are not emitted, except for ``public``
        which is always spelled out unless another visibility is present or the declaration is an override.
        """
        modifiers = set(modifiers)
        implicit_modifiers = set(implicit_modifiers)

        if _should_emit_public_modifier(modifiers, implicit_modifiers):
            self.emit(KModifier.PUBLIC.keyword + ' ')

        for modifier in sorted_modifiers(modifiers):
            if (modifier != KModifier.PUBLIC) and (modifier not in implicit_modifiers):
                self.emit(modifier.keyword + ' ')

    def emit_type_variables(self, type_variables: List[TypeVariableName]):
        """
        Emits type variables with their bounds. Type variables that have more than one bound also need a ``where``
        block, to be emitted later with `emit_where_block`.
        """
        if len(type_variables) == 0:
            return

        self.emit('<')
        for index, type_variable in enumerate(type_variables):
            if index > 0:
                self.emit(', ')
            if type_variable.variance is not None:
                self.emit(type_variable.variance.keyword + ' ')
            if type_variable.reified:
                self.emit('reified ')
            self.emit_code('%L', type_variable.name)
            if (len(type_variable.bounds) == 1) and (type_variable.bounds[0] != NULLABLE_ANY):
                self.emit_code(' : %T', type_variable.bounds[0])
        self.emit('>')

    def emit_where_block(self, type_variables: List[TypeVariableName]):
        first_bound = True
        for type_variable in type_variables:
            if len(type_variable.bounds) > 1:
                for bound in type_variable.bounds:
                    self.emit_code(' where ' if first_bound else ', ')
                    self.emit_code('%L : %T', type_variable.name, bound)
                    first_bound = False

    def emit_code(
        self, code: Union[str, CodeBlock], *args, constant_context: bool = False, ensure_trailing_newline: bool = False
    ) -> 'CodeWriter':
        """
        Interprets a code block (or a format string and its arguments) and emits the result.

        Args:
            code: A `CodeBlock`, or a format string to be combined with `args`
            args: The format arguments, if `code` is a string
            constant_context: Whether the code appears in a context that only allows constant expressions (e.g. an
                annotation argument or a ``const val`` initializer). This inhibits ``trimMargin()`` raw strings.
            ensure_trailing_newline: If set, a newline is added after the code unless it already ended in one

        Raises:
            EmitStateError: If the statement markers in the code are unbalanced
        """
        code_block = code if isinstance(code, CodeBlock) else CodeBlock.of(code, *args)

        arg_index = 0
        deferred_type_name = None

        parts = code_block.format_parts
        for index, part in enumerate(parts):
            if part == '%L':
                self._emit_literal(code_block.args[arg_index], constant_context)
                arg_index += 1
            elif part == '%N':
                self.emit(code_block.args[arg_index])
                arg_index += 1
            elif part in ('%S', '%P'):
                self._emit_string(code_block.args[arg_index], part == '%P', constant_context)
                arg_index += 1
            elif part == '%T':
                type_name = code_block.args[arg_index]
                arg_index += 1

                if type_name.is_annotated:
                    type_name._emit_annotations(self)
                    type_name = type_name.copy(annotations=())

                # Defer the type if it may be followed by a statically imported member
                if (
                    isinstance(type_name, ClassName) and (index + 1 < len(parts)) and
                    not parts[index + 1].startswith('%') and (type_name.canonical_name in self._member_import_names)
                ):
                    deferred_type_name = type_name
                else:
                    type_name._emit(self)
                type_name._emit_nullable(self)
            elif part == '%M':
                code_block.args[arg_index]._emit(self)
                arg_index += 1
            elif part == '%%':
                self.emit('%')
            elif part == '⇥':
                self.indent()
            elif part == '⇤':
                self.unindent()
            elif part == '«':
                if self.statement_line != -1:
                    raise EmitStateError(
                        "Can't open a new statement until the current statement is closed (opening « followed by "
                        f"another « without a closing »). Current code block: {_describe(code_block)}"
                    )
                self.statement_line = 0
            elif part == '»':
                if self.statement_line == -1:
                    raise EmitStateError(
                        "Can't close a statement that hasn't been opened (closing » is not preceded by an opening "
                        f"«). Current code block: {_describe(code_block)}"
                    )
                if self.statement_line > 0:
                    self.unindent(2)  # End a multi-line statement
                self.statement_line = -1
            else:
                if deferred_type_name is not None:
                    if not (part.startswith('.') and self._emit_static_import_member(deferred_type_name, part)):
                        deferred_type_name._emit(self)
                        self.emit(part)
                    deferred_type_name = None
                else:
                    self.emit(part)

        if deferred_type_name is not None:
            deferred_type_name._emit(self)

        if ensure_trailing_newline and self._out.has_pending_segments:
            self.emit('\n')

        return self

    def _emit_static_import_member(self, type_name: ClassName, part: str) -> bool:
        rest = part[1:]
        if (rest == '') or not is_identifier_start(rest[0]):
            return False

        member_name = _extract_member_name(rest)
        explicit = self.imports.get(type_name.canonical_name + '.' + member_name)
        if explicit is None:
            return False

        self.emit(rest.replace(member_name, explicit.alias, 1) if explicit.alias is not None else rest)

        return True

    def _emit_literal(self, value, constant_context: bool):
        if isinstance(value, CodeBlock):
            self.emit_code(value, constant_context=constant_context)
            return

        emit_as_literal = getattr(value, '_emit_as_literal', None)
        if emit_as_literal is not None:
            emit_as_literal(self, constant_context)
        else:
            self.emit(str(value))

    def _emit_string(self, value, template: bool, constant_context: bool):
        if isinstance(value, CodeBlock):
            value = self.render_to_string(lambda writer: writer.emit_code(value))

        if value is None:
            literal = 'null'
        else:
            literal = string_literal_with_quotes(value, template=template, constant_context=constant_context)

        self.emit(literal, non_wrapping=True)

    def lookup_name(self, name: Union[ClassName, MemberName]) -> str:
        """
        Returns the best name to identify a class or member in the current context. This uses the available imports
        and the current scope to find the shortest name available. It does not honor names visible due to inheritance.
        """
        if isinstance(name, MemberName):
            return self._lookup_member_name(name)

        return self._lookup_class_name(name)

    def _lookup_class_name(self, class_name: ClassName) -> str:
        # Find the shortest suffix of the class name that resolves to the class itself. This uses both local type
        # names (so that `Entry` in `Map` refers to `Map.Entry`) and imports.
        name_resolved = False
        candidate = class_name
        while candidate is not None:
            alias = self._resolver.alias_for(candidate.canonical_name)
            simple_name = alias or candidate.simple_name
            resolved = self._resolve(simple_name)
            name_resolved = resolved is not None

            if resolved == candidate.copy(nullable=False, annotations=()):
                if alias is None:
                    self._resolver.mark_referenced(class_name.top_level_class_name().simple_name)

                nested_names = class_name.simple_names[len(candidate.simple_names):]

                return '.'.join((simple_name,) + nested_names)

            candidate = candidate.enclosing_class_name()

        # If the name resolved to something else, we're stuck with the fully qualified name
        if name_resolved:
            return class_name.canonical_name

        if (self._package_name == class_name.package_name) and (
            self._resolver.alias_for(class_name.canonical_name) is None
        ):
            self._resolver.mark_referenced(class_name.top_level_class_name().simple_name)
            return '.'.join(class_name.simple_names)

        # We'll have to use the fully qualified name. Mark the type as importable for a future pass.
        if not self._kdoc:
            self._resolver.register_type(class_name)

        return class_name.canonical_name

    def _lookup_member_name(self, member_name: MemberName) -> str:
        simple_name = self._resolver.alias_for(member_name.canonical_name) or member_name.simple_name

        imported_member = self._imported_members.get(simple_name)
        if imported_member == member_name:
            return simple_name
        if (imported_member is not None) and (member_name.enclosing_class_name is not None):
            return self._lookup_class_name(member_name.enclosing_class_name) + '.' + member_name.simple_name

        if (self._package_name == member_name.package_name) and (member_name.enclosing_class_name is None):
            self._resolver.mark_referenced(member_name.simple_name)
            return member_name.simple_name

        # Members that clash with a function in the current type cannot be imported, except for extensions
        if not self._kdoc and (
            member_name.is_extension or not self._is_method_name_used_in_current_context(member_name.simple_name)
        ):
            self._resolver.register_member(member_name)

        return member_name.canonical_name

    def _is_method_name_used_in_current_context(self, simple_name: str) -> bool:
        for type_spec in reversed(self._type_stack):
            if any(fun_spec.name == simple_name for fun_spec in type_spec.fun_specs):
                return True
            if KModifier.INNER not in type_spec.modifiers:
                break

        return False

    def _resolve(self, simple_name: str) -> Optional[ClassName]:
        """Returns the class or enum value that a simple name refers to, given the current nesting and imports"""
        for depth in range(len(self._type_stack) - 1, -1, -1):
            if simple_name in self._type_stack[depth].nested_type_names:
                return self._stack_class_name(depth, simple_name)

        if len(self._type_stack) > 0:
            top_type = self._type_stack[0]
            if top_type.name == simple_name:
                return ClassName(self._package_or_default(), simple_name)
            # Enum values are not proper classes, but they can still be modeled using ClassName
            if top_type.is_enum and (simple_name in top_type.enum_constants):
                return ClassName(self._package_or_default(), top_type.name, simple_name)

        return self._imported_types.get(simple_name)

    def _stack_class_name(self, depth: int, simple_name: str) -> ClassName:
        names = [type_spec.name for type_spec in self._type_stack[:depth + 1]]

        return ClassName(self._package_or_default(), *names, simple_name)

    def emit(self, text: str, non_wrapping: bool = False) -> 'CodeWriter':
        """
        Emits text, with indentation as required. All code that writes to the output must go through here, since
        indentation is emitted lazily in order to avoid trailing whitespace.
        """
        first = True
        for line in text.split('\n'):
            # Emit a newline character. Make sure blank lines in KDoc and comments look good.
            if not first:
                if (self._kdoc or self._comment) and self._trailing_newline:
                    self._emit_indentation()
                    self._out.append_non_wrapping(' *' if self._kdoc else '//')
                self._out.newline()
                self._trailing_newline = True
                self._kdoc_tail = ''
                if self.statement_line != -1:
                    if self.statement_line == 0:
                        self.indent(2)  # Begin a multi-line statement
                    self.statement_line += 1

            first = False
            if line == '':
                continue  # Don't indent empty lines

            # Emit indentation and comment prefix if necessary
            if self._trailing_newline:
                self._emit_indentation()
                if self._kdoc:
                    self._out.append_non_wrapping(' * ')
                elif self._comment:
                    self._out.append_non_wrapping('// ')

            if self._kdoc:
                line = _neutralize_comment_delimiters(line, self._kdoc_tail)
                self._kdoc_tail = line[-1]

            if non_wrapping:
                self._out.append_non_wrapping(line)
            else:
                self._out.append(
                    line,
                    indent_level=self._indent_level if self._kdoc else self._indent_level + 2,
                    line_prefix=' * ' if self._kdoc else '',
                )
            self._trailing_newline = False

        return self

    def _emit_indentation(self):
        self._out.append_non_wrapping(self._context.indent * self._indent_level)

    def render_to_string(self, action: Callable[['CodeWriter'], None]) -> str:
        """
        Performs emitting actions on this writer, but diverts the output to a string which is returned. The imports
        and scope of the writer are honored.
        """
        buffer = io.StringIO()

        old_out = self._out
        self._out = LineWrapper(buffer, self._context.indent, sys.maxsize)
        try:
            action(self)
            self._out.close()
        finally:
            self._out = old_out

        return buffer.getvalue()

    def close(self):
        self._out.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @staticmethod
    def with_collected_imports(
        out: TextIO, context: CodegenContext, explicit_imports: Mapping[str, Import],
        emit_step: Callable[['CodeWriter'], None],
    ) -> 'CodeWriter':
        """
        Makes a pass to collect imports by executing `emit_step` against a throwaway writer, and returns a writer for
        the real output that is pre-initialized with the decided imports.
        """
        LOG.debug("Starting import collection pass")

        collector = CodeWriter(_NullSink(), context.derive(column_limit=sys.maxsize), explicit_imports)
        emit_step(collector)
        decision = collector.resolver.suggested_imports()
        collector.close()

        LOG.debug("Import collection pass finished, %d imports generated", len(decision.imports))

        imports = dict(explicit_imports)
        for qualified_name, generated in decision.imports.items():
            imports.setdefault(qualified_name, generated)

        return CodeWriter(out, context, imports, decision.types, decision.members)


def build_code_string(action: Callable[[CodeWriter], None]) -> str:
    """Renders code into a string using a standalone writer, with no imports and no column limit"""
    buffer = io.StringIO()

    with CodeWriter(buffer, _UNLIMITED_CONTEXT) as writer:
        action(writer)

    return buffer.getvalue()


def _should_emit_public_modifier(modifiers: Set[KModifier], implicit_modifiers: Set[KModifier]) -> bool:
    if KModifier.PUBLIC in modifiers:
        return True
    if KModifier.PUBLIC not in implicit_modifiers:
        return False
    if KModifier.OVERRIDE in modifiers:
        return False

    return len(modifiers & {KModifier.PRIVATE, KModifier.INTERNAL, KModifier.PROTECTED}) == 0


def _extract_member_name(part: str) -> str:
    end = 0
    while (end < len(part)) and is_identifier_part(part[end]):
        end += 1

    return part[:end]


def _neutralize_comment_delimiters(line: str, preceding: str = '') -> str:
    """
    Escapes comment delimiters in a fragment of KDoc text. `preceding` is the last character already emitted on the same
    line, so that delimiters split across fragments are caught too.
    """
    line = line.replace('*/', '&#42;/').replace('/*', '/&#42;')

    if (preceding == '*') and line.startswith('/'):
        line = '&#47;' + line[1:]
    elif (preceding == '/') and line.startswith('*'):
        line = '&#42;' + line[1:]

    return line


def _describe(code_block: CodeBlock) -> str:
    parts = [escape_character_literals(part) for part in code_block.format_parts]

    return f"format parts: {parts!r}, arguments: {list(code_block.args)!r}"
