"""Turn raw route or form input into validated parameter sets."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterator, Sequence, Union

import voluptuous as vol

from .const import MAX_YEAR, MIN_YEAR

CODE_MISSING = "missing"
CODE_PARSE = "parse"
CODE_DOMAIN = "domain"


class ParameterSet(Mapping):
    """Immutable, hashable mapping of validated parameters."""

    __slots__ = ("_items", "_data")

    def __init__(self, values: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        data = dict(values or {}, **kwargs)
        self._items = tuple(sorted(data.items()))
        self._data = data

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return (k for k, _ in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __hash__(self) -> int:
        return hash(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ParameterSet):
            return self._items == other._items
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in self._items)
        return f"ParameterSet({inner})"

    def as_dict(self) -> dict[str, Any]:
        return dict(self._items)


@dataclass(frozen=True)
class InvalidReason:
    field: str
    code: str
    message: str


@dataclass(frozen=True)
class Valid:
    params: ParameterSet
    defaulted: bool = False


@dataclass(frozen=True)
class Invalid:
    reason: InvalidReason


ValidationResult = Union[Valid, Invalid]


@dataclass(frozen=True)
class ParamRule:
    """Rule for one named parameter.

    ``parse`` converts the raw string, ``domain`` checks the parsed value.
    Both are voluptuous validators (or plain callables raising ``ValueError``).
    """

    name: str
    parse: Any
    domain: Any = None
    required: bool = True
    default: Any = None


def _is_absent(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _error_message(err: vol.Invalid) -> str:
    return err.msg if err.msg else str(err)


class ParamValidator:
    """Validate a raw mapping against a fixed sequence of rules."""

    def __init__(
        self,
        rules: Sequence[ParamRule],
        defaults: Mapping[str, Any] | None = None,
    ) -> None:
        self._rules = tuple(rules)
        self._defaults = ParameterSet(defaults) if defaults is not None else None
        self._parsers = {rule.name: vol.Schema(rule.parse) for rule in self._rules}
        self._domains = {
            rule.name: vol.Schema(rule.domain)
            for rule in self._rules
            if rule.domain is not None
        }

    @property
    def rules(self) -> tuple[ParamRule, ...]:
        return self._rules

    @property
    def defaults(self) -> ParameterSet | None:
        return self._defaults

    def _present(self, raw: Mapping[str, Any] | None) -> dict[str, Any]:
        raw = raw or {}
        return {
            rule.name: raw.get(rule.name)
            for rule in self._rules
            if not _is_absent(raw.get(rule.name))
        }

    def has_input(self, raw: Mapping[str, Any] | None) -> bool:
        """Return True when at least one ruled field is present in ``raw``."""
        return bool(self._present(raw))

    def validate(self, raw: Mapping[str, Any] | None) -> ValidationResult:
        """Return ``Valid`` or ``Invalid``; never raises for bad input."""
        present = self._present(raw)

        # No input at all for a resource with a documented default
        if not present and self._defaults is not None:
            return Valid(self._defaults, defaulted=True)

        values: dict[str, Any] = {}
        for rule in self._rules:
            if rule.name not in present:
                if rule.required:
                    return Invalid(
                        InvalidReason(rule.name, CODE_MISSING, f"{rule.name} is required")
                    )
                if rule.default is not None:
                    values[rule.name] = rule.default
                continue

            try:
                parsed = self._parsers[rule.name](present[rule.name])
            except vol.Invalid as err:
                return Invalid(InvalidReason(rule.name, CODE_PARSE, _error_message(err)))

            domain = self._domains.get(rule.name)
            if domain is not None:
                try:
                    parsed = domain(parsed)
                except vol.Invalid as err:
                    return Invalid(
                        InvalidReason(rule.name, CODE_DOMAIN, _error_message(err))
                    )
            values[rule.name] = parsed

        return Valid(ParameterSet(values))


def _strict_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("not an integer")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    # int() would also accept "1_000"
    if not text.lstrip("+-").isdecimal():
        raise ValueError("not an integer")
    return int(text, 10)


def year_rule(
    min_year: int = MIN_YEAR,
    max_year: int = MAX_YEAR,
    *,
    required: bool = True,
) -> ParamRule:
    return ParamRule(
        "year",
        parse=vol.Coerce(_strict_int, msg="year is not an integer"),
        domain=vol.Range(
            min=min_year,
            max=max_year,
            msg=f"year must be between {min_year} and {max_year}",
        ),
        required=required,
    )


def round_rule(*, required: bool = True) -> ParamRule:
    return ParamRule(
        "round",
        parse=vol.Coerce(_strict_int, msg="round is not an integer"),
        domain=vol.Range(min=1, msg="round must be at least 1"),
        required=required,
    )
