"""
Code templates.

A `CodeBlock` is a fragment of Kotlin code, built from a format string with placeholders and a list of arguments.
Placeholders start with ``%`` and are followed by a single character identifying their kind:

- ``%L`` emits a *literal* value with no escaping. Arguments may be strings, numbers, code blocks, or declaration
  specs (which are rendered in full).
- ``%S`` emits a *string*. The value is quoted and escaped, such that it denotes exactly the given text; in
  particular, ``$`` characters are escaped so that no string template interpolation takes place.
- ``%P`` emits a *string template*. The value (a string or a `CodeBlock`) is quoted, but ``$`` is left live so that
  it can introduce Kotlin string templates.
- ``%T`` emits a *type* reference, importing it if possible.
- ``%N`` emits a *name*, escaping it with backticks if necessary. Arguments may be strings or declaration specs.
- ``%M`` emits a *member* reference (see `MemberName`), importing it if possible.
- ``%%`` emits a percent sign.

The following single-character markers are also recognized:

- ``⇥`` increases the indentation level
- ``⇤`` decreases the indentation level
- ``«`` begins a statement. For multiline statements, every line after the first line is double-indented.
- ``»`` ends a statement
- ``♢`` marks a place where the line may be wrapped (see `LineWrapper`)

Placeholders may be positional (``%L``) or indexed (``%1L``, 1-based), but the two styles cannot be mixed in the same
format string. Named placeholders (``%name:L``) are supported via `CodeBlockBuilder.add_named`.
"""

import math
import re

from decimal import Decimal
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from atmfjstc.lib.kotlin_codegen.errors import TemplateFormatError
from atmfjstc.lib.kotlin_codegen.lexical import escape_if_necessary
from atmfjstc.lib.kotlin_codegen.typenames import TypeName
from atmfjstc.lib.kotlin_codegen.MemberName import MemberName


INDENT = '⇥'
UNINDENT = '⇤'
STATEMENT_OPEN = '«'
STATEMENT_CLOSE = '»'

_SINGLE_CHAR_NO_ARG_PLACEHOLDERS = frozenset((INDENT, UNINDENT, STATEMENT_OPEN, STATEMENT_CLOSE))
_NO_ARG_PLACEHOLDERS = _SINGLE_CHAR_NO_ARG_PLACEHOLDERS
_ARG_KINDS = frozenset('LSPTNM')

_POTENTIAL_PLACEHOLDER = re.compile('[%«»⇥⇤]')
_NAMED_ARGUMENT = re.compile(r'%([\w_]+):([\w]).*', re.DOTALL)
_LOWERCASE = re.compile(r'[a-z]+[\w_]*')


def _is_placeholder(part: str) -> bool:
    return (part in _SINGLE_CHAR_NO_ARG_PLACEHOLDERS) or ((len(part) == 2) and (part[0] == '%'))


def _takes_argument(part: str) -> bool:
    return (len(part) == 2) and (part[0] == '%') and (part[1] != '%')


def _next_potential_placeholder(text: str, start: int) -> int:
    match = _POTENTIAL_PLACEHOLDER.search(text, start)

    return match.start() if match is not None else -1


class CodeBlock:
    """
    An immutable fragment of code: a sequence of format parts (literal text and placeholders) plus the arguments for
    the placeholders, already converted and validated.

    Two code blocks are equal if they render to the same text.
    """

    __slots__ = ('_format_parts', '_args')

    _format_parts: Tuple[str, ...]
    _args: Tuple[Any, ...]

    def __init__(self, format_parts: Iterable[str], args: Iterable[Any]):
        object.__setattr__(self, '_format_parts', tuple(format_parts))
        object.__setattr__(self, '_args', tuple(args))

    def __setattr__(self, name, value):
        raise AttributeError("CodeBlock is immutable. Use to_builder()")

    @staticmethod
    def of(format_string: str, *args) -> 'CodeBlock':
        return CodeBlockBuilder().add(format_string, *args).build()

    @staticmethod
    def builder() -> 'CodeBlockBuilder':
        return CodeBlockBuilder()

    @property
    def format_parts(self) -> Tuple[str, ...]:
        return self._format_parts

    @property
    def args(self) -> Tuple[Any, ...]:
        return self._args

    def is_empty(self) -> bool:
        return len(self._format_parts) == 0

    def __bool__(self):
        return not self.is_empty()

    def has_statements(self) -> bool:
        return any(STATEMENT_OPEN in part for part in self._format_parts)

    def has_unmatched_closing_statement(self) -> bool:
        open_count = 0
        for part in self._format_parts:
            if part == STATEMENT_OPEN:
                open_count += 1
            elif part == STATEMENT_CLOSE:
                if open_count == 0:
                    return True
                open_count -= 1

        return False

    def trim(self) -> 'CodeBlock':
        """Removes leading and trailing indent and statement markers"""
        start = 0
        end = len(self._format_parts)
        while (start < end) and (self._format_parts[start] in _NO_ARG_PLACEHOLDERS):
            start += 1
        while (start < end) and (self._format_parts[end - 1] in _NO_ARG_PLACEHOLDERS):
            end -= 1

        if (start == 0) and (end == len(self._format_parts)):
            return self

        return CodeBlock(self._format_parts[start:end], self._args)

    def without_prefix(self, prefix: 'CodeBlock') -> Optional['CodeBlock']:
        """
        Returns the remainder of this code block after the given prefix, or None if this block does not start with
        that prefix. The last format part of the prefix may match the start of a longer literal part of this block.
        """
        if (len(self._format_parts) < len(prefix._format_parts)) or (len(self._args) < len(prefix._args)):
            return None

        prefix_arg_count = 0
        first_format_part = None

        for index, part in enumerate(prefix._format_parts):
            if self._format_parts[index] != part:
                if (index == len(prefix._format_parts) - 1) and self._format_parts[index].startswith(part):
                    first_format_part = self._format_parts[index][len(part):]
                else:
                    return None

            if _takes_argument(part):
                if self._args[prefix_arg_count] != prefix._args[prefix_arg_count]:
                    return None
                prefix_arg_count += 1

        result_parts = [] if first_format_part is None else [first_format_part]
        result_parts.extend(self._format_parts[len(prefix._format_parts):])

        return CodeBlock(result_parts, self._args[len(prefix._args):])

    def replace_all(self, old: str, new: str) -> 'CodeBlock':
        return CodeBlock((part.replace(old, new) for part in self._format_parts), self._args)

    def trim_trailing_newline(self, replace_with: Optional[str] = None) -> 'CodeBlock':
        """
        Removes the newlines at the end of this code block, optionally replacing them with the given text. Trailing
        indent and statement markers are skipped over when looking for the end of the code, and are preserved.
        """
        index = len(self._format_parts) - 1
        while (index >= 0) and (self._format_parts[index] in _NO_ARG_PLACEHOLDERS):
            index -= 1

        if index < 0:
            return self

        builder = self.to_builder()
        last_part = builder.format_parts[index]

        if not _is_placeholder(last_part):
            trimmed = last_part.rstrip('\n') + (replace_with or '')
            if trimmed != '':
                builder.format_parts[index] = trimmed
            else:
                del builder.format_parts[index]
        elif (last_part == '%L') and isinstance(builder.args[-1], str) and builder.args[-1].endswith('\n'):
            builder.args[-1] = builder.args[-1].rstrip('\n') + (replace_with or '')
        elif replace_with is not None:
            builder.format_parts.insert(index + 1, replace_with)

        return builder.build()

    def ensure_ends_with_newline(self) -> 'CodeBlock':
        return self.trim_trailing_newline('\n')

    def to_builder(self) -> 'CodeBlockBuilder':
        builder = CodeBlockBuilder()
        builder.format_parts.extend(self._format_parts)
        builder.args.extend(self._args)

        return builder

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, CodeBlock):
            return False

        return str(self) == str(other)

    def __hash__(self):
        return hash(str(self))

    def __str__(self):
        from atmfjstc.lib.kotlin_codegen.CodeWriter import build_code_string

        return build_code_string(lambda writer: writer.emit_code(self))

    def __repr__(self):
        return f"CodeBlock({str(self)!r})"


EMPTY_CODE_BLOCK = CodeBlock((), ())


class CodeBlockBuilder:
    """
    Accumulates a `CodeBlock`. All ``add*`` methods return the builder itself, so calls can be chained.
    """

    format_parts: List[str]
    args: List[Any]

    def __init__(self):
        self.format_parts = []
        self.args = []

    def is_empty(self) -> bool:
        return len(self.format_parts) == 0

    def add(self, format_string: str, *args) -> 'CodeBlockBuilder':
        """
        Adds code using a format string with positional (``%L``) or indexed (``%1L``) placeholders.

        Raises:
            TemplateFormatError: If the placeholders are malformed or do not match the arguments
        """
        has_relative = False
        has_indexed = False
        relative_count = 0
        indexed_counts = [0] * len(args)

        def fail(message):
            raise TemplateFormatError(message, format_string)

        new_parts = []
        new_args = []

        p = 0
        while p < len(format_string):
            char = format_string[p]

            if char in _SINGLE_CHAR_NO_ARG_PLACEHOLDERS:
                new_parts.append(char)
                p += 1
                continue

            if char != '%':
                next_p = _next_potential_placeholder(format_string, p + 1)
                if next_p == -1:
                    next_p = len(format_string)
                new_parts.append(format_string[p:next_p])
                p = next_p
                continue

            p += 1  # '%'

            # Consume zero or more digits, leaving 'kind' as the first non-digit char after the '%'
            index_start = p
            while True:
                if p >= len(format_string):
                    fail(f"dangling format characters in '{format_string}'")
                kind = format_string[p]
                p += 1
                if not ('0' <= kind <= '9'):
                    break
            index_end = p - 1

            if kind == '%':
                if index_start != index_end:
                    fail("%% may not have an index")
                new_parts.append('%%')
                continue

            if kind not in _ARG_KINDS:
                fail(f"unknown format %{kind} at {p - 1} in '{format_string}'")

            if index_start < index_end:
                index = int(format_string[index_start:index_end]) - 1
                has_indexed = True
                if len(args) > 0:
                    indexed_counts[index % len(args)] += 1
            else:
                index = relative_count
                has_relative = True
                relative_count += 1

            if not (0 <= index < len(args)):
                fail(
                    f"index {index + 1} for '{format_string[index_start - 1:index_end + 1]}' not in range "
                    f"(received {len(args)} arguments)"
                )
            if has_indexed and has_relative:
                fail("cannot mix indexed and positional parameters")

            new_args.append(_convert_argument(format_string, kind, args[index]))
            new_parts.append('%' + kind)

        if has_relative and (relative_count < len(args)):
            fail(f"unused arguments: expected {relative_count}, received {len(args)}")

        if has_indexed:
            unused = [f"%{i + 1}" for i, count in enumerate(indexed_counts) if count == 0]
            if len(unused) > 0:
                fail(f"unused argument{'' if len(unused) == 1 else 's'}: {', '.join(unused)}")

        self.format_parts.extend(new_parts)
        self.args.extend(new_args)

        return self

    def add_named(self, format_string: str, arguments: Mapping[str, Any]) -> 'CodeBlockBuilder':
        """
        Adds code using a format string with named placeholders of the form ``%name:K``, where ``K`` is the
        placeholder kind. Argument names must start with a lowercase letter.
        """
        for name in arguments.keys():
            if _LOWERCASE.fullmatch(name) is None:
                raise TemplateFormatError(f"argument '{name}' must start with a lowercase character", format_string)

        new_parts = []
        new_args = []

        p = 0
        while p < len(format_string):
            next_p = _next_potential_placeholder(format_string, p)
            if next_p == -1:
                new_parts.append(format_string[p:])
                break

            if p != next_p:
                new_parts.append(format_string[p:next_p])
                p = next_p

            match = None
            colon = format_string.find(':', p)
            if colon != -1:
                end_index = min(colon + 2, len(format_string))
                match = _NAMED_ARGUMENT.fullmatch(format_string[p:end_index])

            if match is not None:
                name = match.group(1)
                if name not in arguments:
                    raise TemplateFormatError(f"Missing named argument for %{name}", format_string)
                kind = match.group(2)
                if kind not in _ARG_KINDS:
                    raise TemplateFormatError(f"unknown format %{kind} in '{format_string}'", format_string)

                new_args.append(_convert_argument(format_string, kind, arguments[name]))
                new_parts.append('%' + kind)
                p = end_index
            elif format_string[p] in _SINGLE_CHAR_NO_ARG_PLACEHOLDERS:
                new_parts.append(format_string[p])
                p += 1
            else:
                if p >= len(format_string) - 1:
                    raise TemplateFormatError("dangling % at end", format_string)
                if format_string[p + 1] != '%':
                    raise TemplateFormatError(
                        f"unknown format %{format_string[p + 1]} at {p + 1} in '{format_string}'", format_string
                    )
                new_parts.append('%%')
                p += 2

        self.format_parts.extend(new_parts)
        self.args.extend(new_args)

        return self

    def add_code(self, code_block: CodeBlock) -> 'CodeBlockBuilder':
        self.format_parts.extend(code_block.format_parts)
        self.args.extend(code_block.args)

        return self

    def begin_control_flow(self, control_flow: str, *args) -> 'CodeBlockBuilder':
        """
        Opens a braced block, like ``if (x) {``, and indents. The `` {`` is added automatically unless the control
        flow text already ends with an opening brace (e.g. a lambda with parameters, ``list.forEach { item ->``).
        """
        self.add(_with_opening_brace(control_flow), *args)
        self.indent()

        return self

    def next_control_flow(self, control_flow: str, *args) -> 'CodeBlockBuilder':
        """Closes the current block and opens another, like ``} else if (y) {``"""
        self.unindent()
        self.add('} ' + control_flow + ' {\n', *args)
        self.indent()

        return self

    def end_control_flow(self) -> 'CodeBlockBuilder':
        self.unindent()
        self.add('}\n')

        return self

    def add_statement(self, format_string: str, *args) -> 'CodeBlockBuilder':
        """Adds a statement, i.e. a line of code whose wrapped continuation lines are double-indented"""
        self.add(STATEMENT_OPEN)
        self.add(format_string, *args)
        self.add('\n' + STATEMENT_CLOSE)

        return self

    def indent(self) -> 'CodeBlockBuilder':
        self.format_parts.append(INDENT)
        return self

    def unindent(self) -> 'CodeBlockBuilder':
        self.format_parts.append(UNINDENT)
        return self

    def clear(self) -> 'CodeBlockBuilder':
        self.format_parts.clear()
        self.args.clear()

        return self

    def build(self) -> CodeBlock:
        return CodeBlock(self.format_parts, self.args)


def _with_opening_brace(control_flow: str) -> str:
    for char in reversed(control_flow):
        if char == '{':
            return control_flow + '\n'
        if char == '}':
            break

    return control_flow + ' {\n'


def _convert_argument(format_string: str, kind: str, arg: Any) -> Any:
    if kind == 'N':
        return escape_if_necessary(_arg_to_name(format_string, arg))
    if kind == 'L':
        return _arg_to_literal(format_string, arg)
    if kind == 'S':
        return None if arg is None else str(arg)
    if kind == 'P':
        return arg if (arg is None) or isinstance(arg, CodeBlock) else str(arg)
    if kind == 'T':
        if not isinstance(arg, TypeName):
            raise TemplateFormatError(f"expected type but was {arg!r}", format_string)
        return arg
    if kind == 'M':
        if not isinstance(arg, MemberName):
            raise TemplateFormatError(f"expected member but was {arg!r}", format_string)
        return arg

    raise TemplateFormatError(f"invalid format string: '{format_string}'", format_string)


def _arg_to_name(format_string: str, arg: Any) -> str:
    if isinstance(arg, str):
        return arg
    if isinstance(arg, MemberName):
        return arg.simple_name

    from atmfjstc.lib.kotlin_codegen.ParameterSpec import ParameterSpec
    from atmfjstc.lib.kotlin_codegen.PropertySpec import PropertySpec
    from atmfjstc.lib.kotlin_codegen.FunSpec import FunSpec
    from atmfjstc.lib.kotlin_codegen.TypeSpec import TypeSpec

    if isinstance(arg, (ParameterSpec, PropertySpec, FunSpec)):
        return arg.name
    if isinstance(arg, TypeSpec) and (arg.name is not None):
        return arg.name

    raise TemplateFormatError(f"expected name but was {arg!r}", format_string)


def _arg_to_literal(format_string: str, arg: Any) -> Any:
    from atmfjstc.lib.kotlin_codegen.FileSpec import FileSpec

    if isinstance(arg, FileSpec):
        raise TemplateFormatError(f"a whole file cannot be used as a literal: {arg.relative_path}", format_string)
    if isinstance(arg, bool):
        return 'true' if arg else 'false'
    if isinstance(arg, int):
        return _group_digits(str(arg))
    if isinstance(arg, float) and math.isfinite(arg):
        text = format(Decimal(repr(arg)).normalize(), 'f')
        whole, _, fraction = text.partition('.')
        return _group_digits(whole) + '.' + (fraction if fraction != '' else '0')

    return arg


def _group_digits(digits: str) -> str:
    sign = '-' if digits.startswith('-') else ''
    digits = digits.lstrip('-')

    return sign + '{:,}'.format(int(digits)).replace(',', '_')


def join_to_code(
    code_blocks: Sequence[CodeBlock], separator: str = ', ', prefix: str = '', suffix: str = ''
) -> CodeBlock:
    """Joins code blocks into a single block, like ``str.join`` but with an optional prefix and suffix"""
    format_string = prefix + separator.replace('%', '%%').join('%L' for _ in code_blocks) + suffix

    return CodeBlock.of(format_string, *code_blocks)


def build_code_block(callback: Callable[[CodeBlockBuilder], Any]) -> CodeBlock:
    """Runs a callback against a fresh builder and returns the built block"""
    builder = CodeBlockBuilder()
    callback(builder)

    return builder.build()
