"""
Project analysis: language, framework and test-suite discovery.

Reads manifest files (package.json, requirements.txt, pyproject.toml, go.mod)
to identify the stack, then walks the project to collect endpoints, source
files and existing tests.
"""

import json
import logging
from pathlib import Path

from ai_testing_mcp.analyzers.patterns import (
    JS_EXTENSIONS,
    PYTHON_EXTENSIONS,
    SOURCE_EXTENSIONS,
    extract_endpoints,
    is_source_file,
    is_test_file,
)
from ai_testing_mcp.filesystem import FilesystemAdapter
from ai_testing_mcp.models import CodeAnalysis

logger = logging.getLogger(__name__)

# Checked in order; first dependency present wins
JS_TEST_FRAMEWORKS = ("jest", "mocha", "vitest")
JS_APP_FRAMEWORKS = ("react", "vue", "express", "fastify")

PYTHON_MANIFESTS = ("requirements.txt", "pyproject.toml")

DEFAULT_TEST_FRAMEWORK = "jest"


def _package_dependencies(fs: FilesystemAdapter, root: Path) -> dict[str, object] | None:
    """Merged dependencies/devDependencies of package.json, None if absent."""
    manifest = root / "package.json"
    if not fs.exists(manifest):
        return None
    try:
        pkg = fs.read_json(manifest)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Unreadable package.json at {manifest}: {e}")
        return None
    if not isinstance(pkg, dict):
        return None

    deps: dict[str, object] = {}
    for key in ("dependencies", "devDependencies"):
        section = pkg.get(key)
        if isinstance(section, dict):
            deps.update(section)
    return deps


def detect_stack(fs: FilesystemAdapter, root: Path) -> tuple[str, str | None, str | None]:
    """Identify a project's language, app framework and test framework.

    A Python manifest takes precedence over package.json for the language,
    since mixed repositories usually keep JavaScript only for tooling.
    Go is reported only when nothing else is detected.

    Args:
        fs: Filesystem adapter.
        root: Project directory.

    Returns:
        Tuple of (language, framework, test_framework); language is "" and
        the others None when nothing is recognised.

    Example:
        >>> detect_stack(fs, Path('express-app'))
        ('javascript', 'express', 'jest')
    """
    language = ""
    framework: str | None = None
    test_framework: str | None = None

    deps = _package_dependencies(fs, root)
    if deps is not None:
        language = "javascript"
        test_framework = next((f for f in JS_TEST_FRAMEWORKS if f in deps), None)
        framework = next((f for f in JS_APP_FRAMEWORKS if f in deps), None)

    if any(fs.exists(root / name) for name in PYTHON_MANIFESTS):
        language = "python"
        test_framework = "pytest"

    if not language and fs.exists(root / "go.mod"):
        language = "go"
        test_framework = "go"

    return language, framework, test_framework


def detect_test_framework(fs: FilesystemAdapter, root: Path) -> str:
    """Pick the test framework to run for a project.

    Unlike ``detect_stack``, a JavaScript test dependency wins over a
    Python manifest here, because it names the runner explicitly.
    Falls back to jest when nothing is recognised.
    """
    deps = _package_dependencies(fs, root)
    if deps:
        for name in JS_TEST_FRAMEWORKS:
            if name in deps:
                return name
    if any(fs.exists(root / name) for name in PYTHON_MANIFESTS):
        return "pytest"
    if fs.exists(root / "go.mod"):
        return "go"
    return DEFAULT_TEST_FRAMEWORK


def collect_endpoints(
    fs: FilesystemAdapter, root: Path, files: list[Path], max_file_size: int
) -> list[str]:
    """Scan JavaScript and Python files for HTTP endpoints.

    Files over ``max_file_size`` bytes are skipped (minified bundles, data).
    """
    endpoints: list[str] = []
    for path in files:
        suffix = path.suffix
        if suffix not in JS_EXTENSIONS and suffix not in PYTHON_EXTENSIONS:
            continue
        if is_test_file(path.relative_to(root)):
            continue
        if fs.file_size(path) > max_file_size:
            logger.debug(f"Skipping large file {path}")
            continue
        endpoints.extend(extract_endpoints(fs.read_text(path), suffix))
    return endpoints


def analyze_project(fs: FilesystemAdapter, root: Path, max_file_size: int) -> CodeAnalysis:
    """Build the full CodeAnalysis for a project directory.

    Walks every file under root (skipping hidden and dependency
    directories) and classifies each as source or test using its
    project-relative path, so the location of the project itself never
    affects classification.

    Args:
        fs: Filesystem adapter.
        root: Project directory. Must exist.
        max_file_size: Byte limit for endpoint scanning.

    Returns:
        CodeAnalysis dict ready for JSON serialization.

    Raises:
        FileNotFoundError: If root does not exist.
        NotADirectoryError: If root is not a directory.

    Example:
        >>> analysis = analyze_project(DefaultFilesystemAdapter(), Path('app'), 1 << 20)
        >>> analysis['language']
        'python'
    """
    files = fs.walk_files(root)
    language, framework, test_framework = detect_stack(fs, root)

    analysis: CodeAnalysis = {
        "language": language,
        "apiEndpoints": collect_endpoints(fs, root, files, max_file_size),
        "testableComponents": [],
        "existingTests": [],
    }
    if framework:
        analysis["framework"] = framework
    if test_framework:
        analysis["testFramework"] = test_framework

    for path in files:
        relative = path.relative_to(root)
        if is_source_file(relative):
            analysis["testableComponents"].append(str(path))
        elif relative.suffix in SOURCE_EXTENSIONS and is_test_file(relative):
            analysis["existingTests"].append(str(path))

    logger.info(
        f"Analyzed {root}: {len(files)} files, "
        f"{len(analysis['testableComponents'])} source, "
        f"{len(analysis['existingTests'])} tests"
    )
    return analysis
