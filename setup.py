from setuptools import setup

setup(
    name='atmfjstc-kotlin-codegen',
    version='1.0.0',

    author_email='atmfjstc@protonmail.com',

    package_dir={'': 'src'},
    packages=['atmfjstc.lib.kotlin_codegen'],

    extras_require={
        'test': ['pytest'],
    },

    zip_safe=True,

    description="A library for generating well-formatted Kotlin source code, with automatic imports and line wrapping",

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: Software Development :: Code Generators"
    ],
    python_requires='>=3.9',
)
