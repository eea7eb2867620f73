"""
Lexical rules of the Kotlin language: reserved words, identifier characters, identifier escaping and the encoding of
string and character literals.
"""

import unicodedata

from typing import FrozenSet

from atmfjstc.lib.kotlin_codegen.errors import InvalidIdentifierError


# https://kotlinlang.org/docs/reference/keyword-reference.html
KEYWORDS: FrozenSet[str] = frozenset((
    # Hard keywords
    'as', 'break', 'class', 'continue', 'do', 'else', 'false', 'for', 'fun', 'if', 'in', 'interface', 'is', 'null',
    'object', 'package', 'return', 'super', 'this', 'throw', 'true', 'try', 'typealias', 'typeof', 'val', 'var',
    'when', 'while',

    # Soft keywords
    'by', 'catch', 'constructor', 'delegate', 'dynamic', 'field', 'file', 'finally', 'get', 'import', 'init', 'param',
    'property', 'receiver', 'set', 'setparam', 'where',

    # Modifier keywords
    'actual', 'abstract', 'annotation', 'companion', 'const', 'crossinline', 'data', 'enum', 'expect', 'external',
    'final', 'infix', 'inline', 'inner', 'internal', 'lateinit', 'noinline', 'open', 'operator', 'out', 'override',
    'private', 'protected', 'public', 'reified', 'sealed', 'suspend', 'tailrec', 'value', 'vararg',

    # No longer keywords, but they still break some code if left unescaped
    'header', 'impl',

    # Other reserved words
    'yield',
))

_ILLEGAL_CHARACTERS_TO_ESCAPE = frozenset('.;[]/<>:\\')


def is_identifier_start(char: str) -> bool:
    """Checks whether a single codepoint may start a JVM identifier (letters, ``_``, ``$`` and currency symbols)"""
    return char.isidentifier() or (char == '$') or (unicodedata.category(char) == 'Sc')


def is_identifier_part(char: str) -> bool:
    """Checks whether a single codepoint may appear after the first character of a JVM identifier"""
    return is_identifier_start(char) or ('_' + char).isidentifier()


def is_keyword(name: str) -> bool:
    return name in KEYWORDS


def escape_if_necessary(name: str, validate: bool = True) -> str:
    """
    Wraps a name in backticks if it could not otherwise be used as a Kotlin identifier.

    Escaping is needed when the name contains characters that are not valid in an identifier, is a keyword, contains a
    ``$``, or consists solely of underscores. Names that are already escaped are returned unchanged.

    Args:
        name: The name to escape
        validate: If True, check that the name does not contain characters that even backticks cannot make legal
            on the JVM.

    Returns:
        The escaped name.

    Raises:
        InvalidIdentifierError: If `validate` is set and the name contains illegal characters.
    """
    escaped = name

    if not _already_escaped(name) and _needs_escaping(name):
        escaped = f"`{name}`"

    if validate and not _already_escaped(name):
        illegal = _ILLEGAL_CHARACTERS_TO_ESCAPE.intersection(name)
        if len(illegal) > 0:
            raise InvalidIdentifierError(name, ''.join(sorted(illegal)))

    return escaped


def escape_segments_if_necessary(name: str, delimiter: str = '.') -> str:
    """Escapes each segment of a qualified name separately, dropping empty segments"""
    return delimiter.join(escape_if_necessary(segment) for segment in name.split(delimiter) if segment != '')


def _already_escaped(name: str) -> bool:
    return (len(name) >= 2) and name.startswith('`') and name.endswith('`')


def _needs_escaping(name: str) -> bool:
    if name == '':
        return False
    if not is_identifier_start(name[0]) or not all(is_identifier_part(c) for c in name[1:]):
        return True

    return is_keyword(name) or ('$' in name) or all(c == '_' for c in name)


def is_iso_control(char: str) -> bool:
    code = ord(char)
    return (code <= 0x1F) or (0x7F <= code <= 0x9F)


_CHAR_ESCAPES = {
    '\b': '\\b',
    '\t': '\\t',
    '\n': '\\n',
    '\r': '\\r',
    '"': '"',
    "'": "\\'",
    '\\': '\\\\',
}


def character_literal_without_single_quotes(char: str) -> str:
    """Encodes a single character the way it would appear inside a Kotlin ``'c'`` literal"""
    escape = _CHAR_ESCAPES.get(char)
    if escape is not None:
        return escape
    if is_iso_control(char):
        return f"\\u{ord(char):04x}"

    return char


def escape_character_literals(text: str) -> str:
    return ''.join(character_literal_without_single_quotes(c) for c in text)


_ESCAPED_DOLLAR = "${'$'}"


def string_literal_with_quotes(value: str, template: bool = False, constant_context: bool = False) -> str:
    """
    Encodes a string value as a Kotlin string literal, quotes included.

    There are two modes:

    - Plain (``template=False``, used by ``%S``): every ``$`` in the value is escaped, so that the literal denotes
      exactly `value` and no string interpolation can take place.
    - Template (``template=True``, used by ``%P``): ``$`` is left live, so that the caller can use Kotlin string
      templates inside the value. The literal is delimited with triple quotes.

    A value containing a newline is rendered as a ``trimMargin()`` raw string (unless in a constant context, where
    function calls are not allowed).

    Escaping is applied exactly once: text in the value that happens to look like an escape sequence is escaped again
    like any other text.
    """
    if not constant_context and '\n' in value:
        parts = ['"""\n|']

        i = 0
        while i < len(value):
            char = value[i]
            if value.startswith('"""', i):
                # Don't inadvertently end the raw string too early
                parts.append('""' + "${'\"'}")
                i += 3
                continue

            if char == '\n':
                parts.append('\n|')
            elif (char == '$') and not template:
                parts.append(_ESCAPED_DOLLAR)
            else:
                parts.append(char)
            i += 1

        if not value.endswith('\n'):
            parts.append('\n')
        parts.append('""".trimMargin()')

        return ''.join(parts)

    if template:
        return '"""' + value + '"""'

    parts = ['"']
    for char in value:
        if char == "'":
            parts.append("'")
        elif char == '"':
            parts.append('\\"')
        elif char == '$':
            parts.append(_ESCAPED_DOLLAR)
        else:
            parts.append(character_literal_without_single_quotes(char))
    parts.append('"')

    return ''.join(parts)
