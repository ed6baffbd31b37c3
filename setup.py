from setuptools import setup, find_packages

setup(
    name="udiff_writer",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyyaml",
        "textual",
        # Advisory syntax check of written files
        "tree-sitter>=0.22",
        "tree-sitter-python",
        "tree-sitter-javascript",
        "tree-sitter-typescript",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "udiff-writer=udiff_writer.cli:main",
        ],
    },
    description="Applies model-written unified diffs and flags truncated output.",
)
