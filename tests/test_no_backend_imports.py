"""Tripwire test: keep the package closed under its own imports.

Walks the installed package source tree and fails on:
- sys.path manipulation, hosted frameworks or settings layers anywhere
- any rendering backend reaching into the kernel

Goal: prevent "one tiny import" from sneaking back.
"""

import re
from pathlib import Path

import rulegraph

FORBIDDEN_EVERYWHERE = [
    (re.compile(r"sys\.path"), "sys.path manipulation"),
    (re.compile(r"\bfastapi\b"), "fastapi (hosted web framework)"),
    (re.compile(r"\buvicorn\b"), "uvicorn (hosted ASGI server)"),
    (re.compile(r"\bpydantic_settings\b"), "pydantic_settings (hosted config smell)"),
]

FORBIDDEN_IN_KERNEL = [
    (re.compile(r"\badapters\b"), "rendering adapter"),
    (re.compile(r"\bgraphviz\b"), "graphviz"),
    (re.compile(r"\bsubprocess\b"), "subprocess"),
    (re.compile(r"\basyncio\b"), "asyncio"),
]


def _package_dir() -> Path:
    return Path(rulegraph.__file__).parent


def _import_lines(path: Path):
    for line_num, line in enumerate(path.read_text(encoding="utf-8").split("\n"), 1):
        stripped = line.strip()
        if stripped.startswith("from ") or stripped.startswith("import "):
            yield line_num, stripped


def _scan(paths, patterns):
    violations = []
    for path in paths:
        for line_num, line in _import_lines(path):
            for pattern, description in patterns:
                if pattern.search(line):
                    violations.append(f"{path}:{line_num}: {description} - {line}")
    return violations


def test_no_forbidden_imports_in_installed_package():
    files = [p for p in _package_dir().rglob("*.py") if "__pycache__" not in p.parts]
    violations = _scan(files, FORBIDDEN_EVERYWHERE)

    assert not violations, "Forbidden imports found:\n" + "\n".join(violations)


def test_kernel_has_no_rendering_backend_imports():
    kernel = _package_dir() / "kernel"
    files = [p for p in kernel.rglob("*.py") if "__pycache__" not in p.parts]
    assert files
    violations = _scan(files, FORBIDDEN_IN_KERNEL)

    assert not violations, "Kernel imports a rendering backend:\n" + "\n".join(violations)
