"""
Turn a decoded request body into a validated Assumption.

Expected payload:

    {
      "assumption": {
        "osc_payment_contract.OXSTATE": "committed",
        "where": {"OXID": "contract-123"},
        "operator": "=="
      }
    }

Exactly one key besides `operator` and `where` is allowed; it names the
`table.field` to read and maps to the expected value.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple

from shopwatch.domain.errors import ValidationError
from shopwatch.domain.models import SCALAR_TYPES, Assumption
from shopwatch.operators.registry import OperatorRegistry, default_registry
from shopwatch.security.identifiers import validate_identifier

RESERVED_KEYS = ("operator", "where")
DEFAULT_OPERATOR = "=="


class AssumptionParser:
    """
    Validating parser for assumption payloads.

    Parameters
    ----------
    registry : OperatorRegistry, optional
        Source of the accepted operator tokens. Defaults to the process registry.
    """

    def __init__(self, registry: Optional[OperatorRegistry] = None) -> None:
        self._registry = registry or default_registry()

    def parse(self, payload: Any) -> Assumption:
        """
        Validate `payload` and build an Assumption.

        Raises
        ------
        ValidationError
            Describing the first rule the payload violates.
        """
        if not isinstance(payload, Mapping):
            raise ValidationError("Request body must be a JSON object")
        assumption = payload.get("assumption")
        if not isinstance(assumption, Mapping):
            raise ValidationError('Missing or invalid "assumption" field')

        field_path, expected_value = self._extract_field_path(assumption)
        table, field = self._split_field_path(field_path)
        validate_identifier(table, "table name")
        validate_identifier(field, "field name")

        if not isinstance(expected_value, SCALAR_TYPES):
            raise ValidationError(f'Expected value for "{field_path}" must be a scalar or null')

        operator = assumption.get("operator")
        if operator is None:
            operator = DEFAULT_OPERATOR
        self._validate_operator(operator)

        where = self._validate_where(assumption.get("where", {}))

        return Assumption(
            table=table,
            field=field,
            expected_value=expected_value,
            operator=operator,
            filter=where,
        )

    @staticmethod
    def _extract_field_path(assumption: Mapping[str, Any]) -> Tuple[str, Any]:
        field_keys = [key for key in assumption if key not in RESERVED_KEYS]
        if not field_keys:
            raise ValidationError("No field path specified in assumption")
        if len(field_keys) > 1:
            raise ValidationError("Only one field path allowed per assumption")
        field_path = field_keys[0]
        if not isinstance(field_path, str):
            raise ValidationError('Field path must be in format "table.field"')
        return field_path, assumption[field_path]

    @staticmethod
    def _split_field_path(field_path: str) -> Tuple[str, str]:
        if "." not in field_path:
            raise ValidationError('Field path must be in format "table.field"')
        parts = field_path.split(".")
        if len(parts) != 2:
            raise ValidationError("Field path must contain exactly one dot (table.field)")
        table, field = parts
        if not table or not field:
            raise ValidationError("Both table name and field name must be non-empty")
        return table, field

    def _validate_operator(self, operator: Any) -> None:
        if not isinstance(operator, str):
            raise ValidationError("Operator must be a string")
        if not self._registry.is_supported(operator):
            raise ValidationError(
                f'Invalid operator: "{operator}". Allowed: {", ".join(self._registry.tokens())}'
            )

    @staticmethod
    def _validate_where(where: Any) -> Dict[str, Any]:
        if where is None:
            return {}
        if not isinstance(where, Mapping):
            raise ValidationError("WHERE clause must be an object")
        for key, value in where.items():
            if not isinstance(key, str):
                raise ValidationError("WHERE clause keys must be strings")
            validate_identifier(key, "WHERE clause field")
            if not isinstance(value, SCALAR_TYPES):
                raise ValidationError(f'WHERE clause value for "{key}" must be a scalar or null')
        return dict(where)


__all__ = ["RESERVED_KEYS", "DEFAULT_OPERATOR", "AssumptionParser"]
