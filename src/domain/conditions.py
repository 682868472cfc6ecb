"""
Condition builder - Filter criteria to abstract predicates.

Turns a criteria dataclass (UserCriteria, TokenCriteria) into an ordered
list of Condition objects. Storage adapters join the conditions with OR:
several present fields mean "match any of these identifying attributes",
never a conjunctive filter.

Presence rules:
- None is absent and contributes nothing.
- A str is always a scalar and yields an equality condition.
- A non-empty collection yields a membership condition.
- An empty collection contributes nothing (it can never match).

An empty result means the criteria carried nothing usable. Callers must
report that as INVALID, never as "match everything".
"""

from collections.abc import Collection
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any


class Operator(str, Enum):
    """Comparison applied by a single condition."""

    EQ = "="
    IN = "IN"


@dataclass(frozen=True)
class Condition:
    """One atomic comparison contributed by one present filter field."""

    field: str
    operator: Operator
    value: Any


def build_conditions(criteria: Any) -> list[Condition]:
    """
    Build predicates from a criteria dataclass.

    Conditions follow the field declaration order of the criteria class.

    Args:
        criteria: Dataclass instance whose fields are filter values

    Returns:
        List of conditions, empty when no field is usable
    """
    conditions: list[Condition] = []
    for criteria_field in fields(criteria):
        value = getattr(criteria, criteria_field.name)
        if value is None:
            continue
        if _is_collection(value):
            values = tuple(value)
            if not values:
                continue
            conditions.append(Condition(criteria_field.name, Operator.IN, values))
        else:
            conditions.append(Condition(criteria_field.name, Operator.EQ, value))
    return conditions


def _is_collection(value: Any) -> bool:
    return isinstance(value, Collection) and not isinstance(value, (str, bytes))
