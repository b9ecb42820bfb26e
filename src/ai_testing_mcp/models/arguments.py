"""
Typed argument records for each tool.

Callers send camelCase JSON objects; handlers receive one of the frozen
dataclasses below. ``decode_arguments`` is the only path from the untyped
mapping to a record, and it validates against the tool's descriptor first,
so a handler never sees a missing required field or a value of the wrong type.
"""

import re
from dataclasses import dataclass, fields
from typing import Any, TypeAlias, TypeVar

from ai_testing_mcp.errors import ArgumentValidationError
from ai_testing_mcp.models.protocol import ToolDescriptor

_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "boolean": (bool,),
    "integer": (int,),
    "object": (dict,),
}

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake_case(name: str) -> str:
    """Convert a camelCase wire name to its snake_case field name.

    Example:
        >>> to_snake_case("projectPath")
        'project_path'
    """
    return _CAMEL_BOUNDARY.sub("_", name).lower()


@dataclass(frozen=True)
class AnalyzeCodebaseArgs:
    project_path: str


@dataclass(frozen=True)
class GenerateUnitTestsArgs:
    file_path: str
    function_name: str | None = None
    test_framework: str | None = None


@dataclass(frozen=True)
class GenerateIntegrationTestsArgs:
    project_path: str
    api_spec: str | None = None


@dataclass(frozen=True)
class RunTestsArgs:
    project_path: str
    test_pattern: str | None = None
    framework: str | None = None


@dataclass(frozen=True)
class AnalyzeTestResultsArgs:
    test_output: str
    project_path: str | None = None


@dataclass(frozen=True)
class SuggestFixesArgs:
    failure_output: str
    source_code: str | None = None
    test_code: str | None = None


@dataclass(frozen=True)
class SetupTestingFrameworkArgs:
    project_path: str
    framework: str
    language: str


ToolArguments: TypeAlias = (
    AnalyzeCodebaseArgs
    | GenerateUnitTestsArgs
    | GenerateIntegrationTestsArgs
    | RunTestsArgs
    | AnalyzeTestResultsArgs
    | SuggestFixesArgs
    | SetupTestingFrameworkArgs
)


T = TypeVar("T")


def decode_arguments(
    descriptor: ToolDescriptor, record_type: type[T], arguments: Any
) -> T:
    """Validate raw arguments against a descriptor and build a typed record.

    Required parameters must be present and non-null; every supplied
    declared parameter must match its JSON type. Undeclared keys are ignored
    so that clients sending extra metadata are not rejected.

    Args:
        descriptor: Tool descriptor whose params define the schema.
        record_type: Dataclass to instantiate; its field names are the
            snake_case forms of the descriptor's parameter names.
        arguments: Raw ``params.arguments`` value from the request.

    Returns:
        Instance of ``record_type`` populated from the arguments.

    Raises:
        ArgumentValidationError: If arguments is not an object, a required
            parameter is missing, or a value has the wrong type.

    Example:
        >>> from ai_testing_mcp.registry import REGISTRY, ToolName
        >>> binding = REGISTRY.binding(ToolName.RUN_TESTS)
        >>> decode_arguments(binding.descriptor, RunTestsArgs, {"projectPath": "."})
        RunTestsArgs(project_path='.', test_pattern=None, framework=None)
    """
    if arguments is None:
        raise ArgumentValidationError("Missing arguments")
    if not isinstance(arguments, dict):
        raise ArgumentValidationError("Arguments must be an object")

    field_names = {f.name for f in fields(record_type)}  # type: ignore[arg-type]
    values: dict[str, Any] = {}

    for param in descriptor.params:
        value = arguments.get(param.name)
        if value is None:
            if param.required:
                raise ArgumentValidationError(
                    f"'{param.name}' is required", field=param.name
                )
            continue

        expected = _JSON_TYPES[param.type]
        # bool is an int subclass; keep the JSON types disjoint
        if not isinstance(value, expected) or (
            param.type == "integer" and isinstance(value, bool)
        ):
            raise ArgumentValidationError(
                f"'{param.name}' must be a {param.type}", field=param.name
            )

        field_name = to_snake_case(param.name)
        if field_name not in field_names:
            raise ArgumentValidationError(
                f"'{param.name}' has no field on {record_type.__name__}",
                field=param.name,
            )
        values[field_name] = value

    return record_type(**values)
