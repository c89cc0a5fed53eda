from setuptools import setup

setup(
    name='atmfjstc-fluent-codegen',
    version='1.0.0',

    author_email='atmfjstc@protonmail.com',

    package_dir={'': 'src'},
    packages=[
        'atmfjstc.lib.fluent_codegen',
        'atmfjstc.lib.fluent_codegen.ast',
        'atmfjstc.lib.fluent_codegen.builders',
    ],

    install_requires=[
        'atmfjstc-py-lang-utils>=1.3, <2',
        'atmfjstc-ast>=1.1, <2',
        'atmfjstc-text-utils>=1.3, <2',
    ],

    extras_require={
        'test': ['pytest'],
    },

    zip_safe=True,

    description="A fluent builder API and layout engine for generating readably wrapped C-family source code",

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: Software Development :: Code Generators"
    ],
    python_requires='>=3.7',
)
