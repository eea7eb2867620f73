"""
A library for generating well-formatted Kotlin source code from Python.

Rationale
---------

Generating Kotlin by gluing strings together works for small snippets, but quickly breaks down for real files. Lines
must be wrapped to a column limit, but only at places where a break doesn't change the meaning of the code. Names must
be imported, but only when the import doesn't clash with another name of the same spelling. Identifiers that happen to
be keywords must be backtick-escaped, and string literals need escaping for both quotes and ``$`` templates. KDoc must
remain a single well-formed comment no matter what text is embedded in it.

This library handles all of that. You describe the code as a tree of immutable *specs* (files, types, functions,
properties...) whose bodies are *code blocks*: small templates in which placeholders stand for types, names, literals
and strings. Rendering a file walks the tree twice: the first pass only discovers which names are referenced, so that
the second can decide imports and shorten names accordingly.

Example
-------

::

    from atmfjstc.lib.kotlin_codegen.typenames import ClassName, STRING
    from atmfjstc.lib.kotlin_codegen.FunSpec import FunSpec
    from atmfjstc.lib.kotlin_codegen.TypeSpec import TypeSpec
    from atmfjstc.lib.kotlin_codegen.FileSpec import FileSpec

    greeter = TypeSpec.class_builder('Greeter').add_function(
        FunSpec.builder('greet')
        .add_parameter('name', STRING)
        .add_statement('println(%P)', 'Hello, $name')
        .build()
    ).build()

    print(FileSpec.get('com.example', greeter))

which renders::

    package com.example

    import kotlin.String

    public class Greeter {
      public fun greet(name: String) {
        println(\"\"\"Hello, $name\"\"\")
      }
    }

Modules
-------

- `CodeBlock`: code templates and the placeholders they support
- `typenames`, `MemberName`: references to types and members, which are shortened and imported automatically
- `AnnotationSpec`, `ParameterSpec`, `PropertySpec`, `FunSpec`, `TypeSpec`, `TypeAliasSpec`, `FileSpec`: the
  declaration model and its builders
- `NameAllocator`: allocation of unique, valid identifiers for generated variables
- `CodegenContext`: rendering options (indent, column limit)
- `CodeWriter`, `LineWrapper`, `imports`: the rendering machinery
- `errors`: the exceptions raised by the library

Specs are immutable, and builders never share state with the specs they build, so a builder can be reused as a
template for several similar declarations.
"""
