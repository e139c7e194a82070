"""
Schema validation utilities for the tutoring core.

Analysis responses from the language model are free text that should contain
one JSON object. This module pulls that object out and validates it:

- First balanced {...} extraction, tolerant of surrounding prose and code fences
- JSON Schema validation with clear error messages
- Deep copy to prevent mutations
- Type coercion (numeric strings to numbers)
- Removal of unknown keys where a schema forbids them
- Transparent repair tracking
"""

import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft7Validator, FormatChecker, ValidationError

from ..config import config


class ValidationResult:
    """
    Result of a validation attempt.

    Attributes:
        valid: Whether data passed validation
        errors: List of error messages
        data: The validated data (may be modified if repair was attempted)
        repairs: List of repairs applied (for transparency)
    """

    def __init__(
        self,
        valid: bool,
        errors: list[str],
        data: Any = None,
        repairs: Optional[list[str]] = None,
    ):
        self.valid = valid
        self.errors = errors
        self.data = data
        self.repairs = repairs or []

    def __bool__(self) -> bool:
        """Allow using result in boolean context."""
        return self.valid

    def __str__(self) -> str:
        """Human-readable representation."""
        if self.valid:
            msg = "✓ Validation passed"
            if self.repairs:
                msg += f" (with {len(self.repairs)} repair(s))"
            return msg
        return f"✗ Validation failed with {len(self.errors)} error(s):\n" + "\n".join(
            f"  - {error}" for error in self.errors
        )


def extract_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced {...} block in `text`, or None.

    Braces inside JSON strings (including escaped quotes) are ignored.

    Example:
        extract_json_object('Sure! {"level": "A1"} Hope this helps')
        -> '{"level": "A1"}'
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]
        # Unbalanced from this brace; try the next one
        start = text.find("{", start + 1)
    return None


def parse_json_object(text: str) -> dict:
    """
    Extract and decode the first JSON object in a model response.

    Raises:
        ValueError: If no object is found or it does not decode to a dict
    """
    block = extract_json_object(text or "")
    if block is None:
        raise ValueError("No JSON object found in response")
    try:
        data = json.loads(block)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in response: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Response JSON is not an object")
    return data


class SchemaValidator:
    """
    JSON Schema validator with auto-repair capabilities.

    Usage:
        validator = SchemaValidator("path/to/schema.json")
        result = validator.validate(data)
        if result:
            print("Valid!")
            print("Repairs applied:", result.repairs)
        else:
            print(result.errors)
    """

    def __init__(self, schema_path: Path | str):
        """
        Initialize validator with a schema file.

        Args:
            schema_path: Path to JSON Schema file
        """
        self.schema_path = Path(schema_path)
        with open(self.schema_path, "r", encoding="utf-8") as f:
            self.schema = json.load(f)
        # Use FormatChecker to validate datetime etc.
        self.validator = Draft7Validator(self.schema, format_checker=FormatChecker())

    def validate(self, data: Any, auto_repair: bool = False) -> ValidationResult:
        """
        Validate data against schema.

        Args:
            data: Data to validate
            auto_repair: If True, attempt to fix common validation errors

        Returns:
            ValidationResult with validation status and any errors
        """
        errors = [self._format_error(error) for error in self.validator.iter_errors(data)]

        if errors:
            if auto_repair and isinstance(data, dict):
                repaired_data, repairs = self._attempt_repair(data)
                result = self.validate(repaired_data, auto_repair=False)
                result.repairs = repairs
                return result
            return ValidationResult(valid=False, errors=errors, data=data)

        return ValidationResult(valid=True, errors=[], data=data)

    def _format_error(self, error: ValidationError) -> str:
        """
        Convert ValidationError to human-readable message with details.

        Args:
            error: jsonschema ValidationError

        Returns:
            Formatted error message with validator and schema path
        """
        path = " -> ".join(str(p) for p in error.path) if error.path else "root"
        validator_name = getattr(error, "validator", "unknown")
        schema_path = "/".join(str(p) for p in error.schema_path)
        return (
            f"At '{path}': {error.message} "
            f"[validator={validator_name}, schema_path=/{schema_path}]"
        )

    def _attempt_repair(self, data: dict) -> tuple[dict, list[str]]:
        """
        Attempt to automatically fix common validation errors.

        Args:
            data: Original data

        Returns:
            Tuple of (repaired data, list of repairs applied)
        """
        # Deep copy to prevent mutation of original
        repaired = deepcopy(data)
        repairs: list[str] = []

        self._strip_additional_props(repaired, self.schema, repairs)
        self._coerce_types(repaired, self.schema, repairs)

        return repaired, repairs

    def _strip_additional_props(
        self, obj: Any, schema: dict, repairs: list[str], path: str = "root"
    ):
        """
        Recursively remove keys not allowed by schema (additionalProperties: false).
        Handles both objects and arrays.
        """
        if not isinstance(schema, dict):
            return

        if isinstance(obj, dict) and "properties" in schema:
            allowed = set(schema.get("properties", {}).keys())
            if schema.get("additionalProperties") is False:
                extra_keys = [k for k in list(obj.keys()) if k not in allowed]
                for k in extra_keys:
                    obj.pop(k, None)
                    repairs.append(f"Removed unknown key '{k}' at {path}")

            for k, subschema in schema.get("properties", {}).items():
                if k in obj:
                    self._strip_additional_props(obj[k], subschema, repairs, f"{path}.{k}")

        if isinstance(obj, list) and "items" in schema:
            for i, item in enumerate(obj):
                self._strip_additional_props(item, schema["items"], repairs, f"{path}[{i}]")

    def _coerce_types(self, data: dict, schema: dict, repairs: list[str]):
        """
        Coerce numeric strings (e.g. "0.75" -> 0.75) where the schema expects a number.
        """

        def safe_float(x):
            try:
                return float(x)
            except (ValueError, TypeError):
                return x

        for key, subschema in schema.get("properties", {}).items():
            value = data.get(key)
            if not isinstance(value, str) or not isinstance(subschema, dict):
                continue
            expected = subschema.get("type")
            expected = expected if isinstance(expected, list) else [expected]
            if "number" in expected and "string" not in expected:
                coerced = safe_float(value.strip())
                if coerced != value:
                    data[key] = coerced
                    repairs.append(f"Coerced {key}: '{value}' → {coerced}")


class SessionAnalysisValidator(SchemaValidator):
    """Validator for session-analysis responses."""

    def __init__(self, schema_path: Optional[Path] = None):
        super().__init__(schema_path or config.paths.session_analysis_schema)


class PlacementAnalysisValidator(SchemaValidator):
    """
    Validator for placement-analysis responses.

    Numeric sub-scores returned as strings are repaired by default.
    """

    def __init__(self, schema_path: Optional[Path] = None):
        super().__init__(schema_path or config.paths.placement_analysis_schema)

    def validate(self, data: Any, auto_repair: bool = True) -> ValidationResult:
        return super().validate(data, auto_repair=auto_repair)


class StoreSnapshotValidator(SchemaValidator):
    """Validator for on-disk store snapshots."""

    def __init__(self, schema_path: Optional[Path] = None):
        super().__init__(schema_path or config.paths.store_schema)


# Convenience functions for quick validation
def validate_session_analysis(data: dict, auto_repair: bool = False) -> ValidationResult:
    """
    Quick validation of a session-analysis payload.

    Example:
        result = validate_session_analysis(payload)
        if not result:
            print("Errors:", result.errors)
    """
    return SessionAnalysisValidator().validate(data, auto_repair=auto_repair)


def validate_placement_analysis(data: dict, auto_repair: bool = True) -> ValidationResult:
    """Quick validation of a placement-analysis payload."""
    return PlacementAnalysisValidator().validate(data, auto_repair=auto_repair)
