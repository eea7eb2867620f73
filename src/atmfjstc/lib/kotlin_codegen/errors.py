from typing import Any, Hashable


class KotlinCodegenError(Exception):
    """
    Base class for all exceptions raised by the Kotlin code generator.
    """


class TemplateFormatError(KotlinCodegenError, ValueError):
    """
    Raised when a code template is malformed or does not agree with the arguments supplied for it.
    """
    format_string: str

    def __init__(self, message: str, format_string: str):
        super().__init__(message)

        self.format_string = format_string


class TagAlreadyBoundError(KotlinCodegenError, ValueError):
    tag: Hashable
    bound_name: str
    new_name: str

    def __init__(self, tag: Hashable, bound_name: str, new_name: str):
        super().__init__(f"tag {tag!r} cannot be used for both '{bound_name}' and '{new_name}'")

        self.tag = tag
        self.bound_name = bound_name
        self.new_name = new_name


class UnknownTagError(KotlinCodegenError, LookupError):
    tag: Any

    def __init__(self, tag: Any):
        super().__init__(f"unknown tag: {tag!r}")

        self.tag = tag


class InvalidIdentifierError(KotlinCodegenError, ValueError):
    name: str

    def __init__(self, name: str, illegal_chars: str):
        super().__init__(f"Can't escape identifier {name} because it contains illegal characters: {illegal_chars}")

        self.name = name


class ModelValidationError(KotlinCodegenError, ValueError):
    """
    Raised by a builder's ``build()`` when the accumulated declaration violates a rule of the Kotlin language (e.g. an
    incompatible set of modifiers).
    """


class EmitStateError(KotlinCodegenError, RuntimeError):
    """
    Raised when the writer is driven into an inconsistent state during rendering (unbalanced statement markers,
    unindenting past zero, writing to a closed sink etc.)
    """
