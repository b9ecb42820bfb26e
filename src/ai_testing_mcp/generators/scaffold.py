"""
Testing framework scaffolding.

Writes a framework's config file and a passing example test into a project.
Existing files are never overwritten, and dependencies are never installed;
the install command is returned for the caller to run.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ai_testing_mcp.errors import ToolExecutionError
from ai_testing_mcp.filesystem import FilesystemAdapter

logger = logging.getLogger(__name__)

_JEST_CONFIG = """\
module.exports = {
  testEnvironment: 'node',
  testMatch: ['**/tests/**/*.test.js'],
  collectCoverageFrom: ['src/**/*.js'],
};
"""

_JEST_EXAMPLE = """\
describe('example', () => {
  test('adds numbers', () => {
    expect(1 + 1).toBe(2);
  });
});
"""

_MOCHA_CONFIG = """\
{
  "spec": "test/**/*.spec.js",
  "reporter": "spec"
}
"""

_MOCHA_EXAMPLE = """\
const { expect } = require('chai');

describe('example', () => {
  it('adds numbers', () => {
    expect(1 + 1).to.equal(2);
  });
});
"""

_VITEST_CONFIG = """\
import { defineConfig } from 'vitest/config';

export default defineConfig({
  test: {
    include: ['tests/**/*.test.{js,ts}'],
  },
});
"""

_VITEST_EXAMPLE = """\
import { describe, it, expect } from 'vitest';

describe('example', () => {
  it('adds numbers', () => {
    expect(1 + 1).toBe(2);
  });
});
"""

_PYTEST_INI = """\
[pytest]
testpaths = tests
addopts = -ra
"""

_PYTEST_EXAMPLE = """\
def test_adds_numbers():
    assert 1 + 1 == 2
"""

_UNITTEST_EXAMPLE = """\
import unittest


class TestExample(unittest.TestCase):
    def test_adds_numbers(self):
        self.assertEqual(1 + 1, 2)


if __name__ == "__main__":
    unittest.main()
"""

_GO_EXAMPLE = """\
package main

import "testing"

func TestAddsNumbers(t *testing.T) {
\tif 1+1 != 2 {
\t\tt.Fatal("expected 1+1 to equal 2")
\t}
}
"""


@dataclass(frozen=True)
class FrameworkTemplate:
    """Files and commands that set up one framework.

    Attributes:
        files: Project-relative path -> file content
        install_command: Command the user should run, None if nothing to install
        run_command: Command that runs the example test
    """

    files: dict[str, str] = field(default_factory=dict)
    install_command: str | None = None
    run_command: str = ""


_JS_TEMPLATES = {
    "jest": FrameworkTemplate(
        {"jest.config.js": _JEST_CONFIG, "tests/example.test.js": _JEST_EXAMPLE},
        "npm install --save-dev jest",
        "npx jest",
    ),
    "mocha": FrameworkTemplate(
        {".mocharc.json": _MOCHA_CONFIG, "test/example.spec.js": _MOCHA_EXAMPLE},
        "npm install --save-dev mocha chai",
        "npx mocha",
    ),
    "vitest": FrameworkTemplate(
        {"vitest.config.js": _VITEST_CONFIG, "tests/example.test.js": _VITEST_EXAMPLE},
        "npm install --save-dev vitest",
        "npx vitest run",
    ),
}

TEMPLATES: dict[tuple[str, str], FrameworkTemplate] = {
    **{("javascript", name): t for name, t in _JS_TEMPLATES.items()},
    **{("typescript", name): t for name, t in _JS_TEMPLATES.items()},
    ("python", "pytest"): FrameworkTemplate(
        {
            "pytest.ini": _PYTEST_INI,
            "tests/__init__.py": "",
            "tests/test_example.py": _PYTEST_EXAMPLE,
        },
        "pip install pytest pytest-cov",
        "python -m pytest",
    ),
    ("python", "unittest"): FrameworkTemplate(
        {"tests/__init__.py": "", "tests/test_example.py": _UNITTEST_EXAMPLE},
        None,
        "python -m unittest discover tests",
    ),
    ("go", "go"): FrameworkTemplate({"example_test.go": _GO_EXAMPLE}, None, "go test ./..."),
    ("go", "testing"): FrameworkTemplate({"example_test.go": _GO_EXAMPLE}, None, "go test ./..."),
}


def setup_testing_framework(
    fs: FilesystemAdapter, root: Path, framework: str, language: str
) -> dict[str, Any]:
    """Scaffold a testing framework inside a project directory.

    Args:
        fs: Filesystem adapter used for existence checks and writes.
        root: Project directory. Must exist.
        framework: Framework name (jest, mocha, vitest, pytest, unittest, go).
        language: Project language (javascript, typescript, python, go).

    Returns:
        Dict with ``framework``, ``language``, ``created`` and ``skipped``
        (project-relative paths), ``installCommand`` and ``runCommand``.

    Raises:
        ToolExecutionError: If the project directory is missing or the
            language/framework combination is not supported.

    Example:
        >>> setup_testing_framework(fs, Path("app"), "pytest", "python")["created"]
        ['pytest.ini', 'tests/__init__.py', 'tests/test_example.py']
    """
    key = (language.strip().lower(), framework.strip().lower())
    template = TEMPLATES.get(key)
    if template is None:
        supported = ", ".join(f"{lang}/{fw}" for lang, fw in TEMPLATES)
        raise ToolExecutionError(
            f"Unsupported framework '{framework}' for language '{language}'. "
            f"Supported: {supported}"
        )
    if not fs.is_dir(root):
        raise ToolExecutionError(f"Project path does not exist: {root}")

    created: list[str] = []
    skipped: list[str] = []
    for relative, content in template.files.items():
        target = root / relative
        if fs.exists(target):
            skipped.append(relative)
            continue
        fs.write_text(target, content)
        created.append(relative)

    logger.info(f"Scaffolded {key[1]} in {root}: {len(created)} created, {len(skipped)} skipped")
    return {
        "framework": key[1],
        "language": key[0],
        "created": created,
        "skipped": skipped,
        "installCommand": template.install_command,
        "runCommand": template.run_command,
    }
