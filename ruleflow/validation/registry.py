"""Rule Registry

Maps stable names to predicates so chains and schemas can refer to rules by
name. Registries are ordinary instances: build one, fill it, inject it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Mapping

from ruleflow.core.errors import RuleNotFoundError
from ruleflow.core.logging import engine_logger

from .contract import Predicate
from .rules import basic, format as format_rules

log = engine_logger()


@dataclass(frozen=True, slots=True)
class RegistryStats:
    total_rules: int
    rule_names: tuple[str, ...]


class RuleRegistry:
    """Name -> predicate table."""

    def __init__(self, rules: Mapping[str, Predicate] | None = None):
        self._rules: dict[str, Predicate] = {}
        if rules:
            self.register_many(rules)

    def register(self, name: str, validator: Predicate) -> None:
        if not callable(validator):
            raise TypeError(f'Rule "{name}" must be callable, got {type(validator).__name__}')
        if name in self._rules:
            log.warning("rule_overwritten", rule=name)
        self._rules[name] = validator

    def register_many(self, rules: Mapping[str, Predicate]) -> None:
        for name, validator in rules.items():
            self.register(name, validator)

    def get(self, name: str) -> Predicate | None:
        return self._rules.get(name)

    def require(self, name: str) -> Predicate:
        """Like get(), but raises RuleNotFoundError for unknown names."""
        try:
            return self._rules[name]
        except KeyError:
            log.warning("rule_not_found", rule=name, known=len(self._rules))
            raise RuleNotFoundError(name) from None

    def has(self, name: str) -> bool:
        return name in self._rules

    def unregister(self, name: str) -> bool:
        return self._rules.pop(name, None) is not None

    def clear(self) -> None:
        self._rules.clear()

    def names(self) -> list[str]:
        return list(self._rules)

    def get_stats(self) -> RegistryStats:
        return RegistryStats(total_rules=len(self._rules), rule_names=tuple(self._rules))

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)


def create_default_registry() -> RuleRegistry:
    """Registry pre-loaded with the parameterless built-in rules.

    Type names ("string", "number", ...) map to runtime type checks.
    """
    registry = RuleRegistry({
        "required": basic.required,
        "email": format_rules.email,
        "url": format_rules.url,
        "numeric": format_rules.numeric,
        "integer": format_rules.integer,
        "date": format_rules.date,
    })
    for type_label in ("string", "number", "boolean", "array", "object"):
        registry.register(type_label, basic.type_of(type_label))
    return registry
