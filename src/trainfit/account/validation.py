"""Declarative form validation.

A schema is an ordered list of ``FieldRules``. Each rule is a plain function
``(value, values) -> message | None``; the first rule that returns a message
wins for its field, so at most one message per field is reported. A field
with a ``when`` predicate is skipped entirely unless the predicate holds for
the whole form.

Validation is synchronous, deterministic and never raises.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from trainfit.account.models import ProfileFormState, SignInForm, SignUpForm, ValidationResult
from trainfit.config import get_settings

Rule = Callable[[str, Mapping[str, str]], str | None]
Condition = Callable[[Mapping[str, str]], bool]

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class FieldRules:
    """Ordered rules for one field, optionally gated by a condition."""

    name: str
    rules: tuple[Rule, ...]
    when: Condition | None = None


@dataclass
class Schema:
    fields: list[FieldRules] = field(default_factory=list)

    def validate(self, values: Mapping[str, Any]) -> ValidationResult:
        normalized = {k: "" if v is None else str(v) for k, v in values.items()}
        errors: dict[str, str] = {}
        for field_rules in self.fields:
            if field_rules.when is not None and not field_rules.when(normalized):
                continue
            value = normalized.get(field_rules.name, "")
            for rule in field_rules.rules:
                message = rule(value, normalized)
                if message:
                    errors[field_rules.name] = message
                    break
        return ValidationResult(errors=errors)


# -- rules --


def required(message: str, *, strip: bool = False) -> Rule:
    def rule(value: str, values: Mapping[str, str]) -> str | None:
        check = value.strip() if strip else value
        return None if check else message

    return rule


def min_length(limit: int, message: str) -> Rule:
    def rule(value: str, values: Mapping[str, str]) -> str | None:
        return message if value and len(value) < limit else None

    return rule


def max_length(limit: int, message: str) -> Rule:
    def rule(value: str, values: Mapping[str, str]) -> str | None:
        return message if len(value) > limit else None

    return rule


def equals_field(other: str, message: str) -> Rule:
    def rule(value: str, values: Mapping[str, str]) -> str | None:
        return None if value == values.get(other, "") else message

    return rule


def email_address(message: str) -> Rule:
    def rule(value: str, values: Mapping[str, str]) -> str | None:
        return None if not value or _EMAIL_RE.match(value.strip()) else message

    return rule


def present(field_name: str) -> Condition:
    """Condition: *field_name* is non-empty."""

    def condition(values: Mapping[str, str]) -> bool:
        return bool(values.get(field_name))

    return condition


# -- schemas --


def _length_bounds(min_len: int | None, max_len: int | None) -> tuple[int, int]:
    settings = get_settings()
    return (
        min_len if min_len is not None else settings.password_min_length,
        max_len if max_len is not None else settings.password_max_length,
    )


def profile_schema(min_len: int | None = None, max_len: int | None = None) -> Schema:
    """Profile edit: name required, password rotation optional but cascading."""
    lo, hi = _length_bounds(min_len, max_len)
    rotating = present("new_password")
    return Schema(
        [
            FieldRules("name", (required("Please fill in the Name!", strip=True),)),
            FieldRules(
                "old_password",
                (required("Please fill in the old password to set a new one!"),),
                when=rotating,
            ),
            FieldRules(
                "new_password",
                (
                    min_length(lo, f"The password must be at least {lo} characters long!"),
                    max_length(hi, f"The password cannot exceed {hi} characters!"),
                ),
                when=rotating,
            ),
            FieldRules(
                "confirm_password",
                (
                    required("Please, re-enter the new password to update!"),
                    equals_field(
                        "new_password",
                        "The password confirmation does not match the entered new password!",
                    ),
                ),
                when=rotating,
            ),
        ]
    )


def sign_in_schema(max_len: int | None = None) -> Schema:
    _, hi = _length_bounds(None, max_len)
    return Schema(
        [
            FieldRules(
                "email",
                (
                    required("Please fill in the E-mail!", strip=True),
                    email_address("Invalid E-mail!"),
                ),
            ),
            FieldRules(
                "password",
                (
                    required("Please fill in the Password!"),
                    max_length(hi, f"The password cannot exceed {hi} characters!"),
                ),
            ),
        ]
    )


def sign_up_schema(min_len: int | None = None, max_len: int | None = None) -> Schema:
    lo, hi = _length_bounds(min_len, max_len)
    too_short = f"The password must be at least {lo} characters long!"
    too_long = f"The password cannot exceed {hi} characters!"
    return Schema(
        [
            FieldRules("name", (required("Please fill in the Name!", strip=True),)),
            FieldRules(
                "email",
                (
                    required("Please fill in the E-mail!", strip=True),
                    email_address("Invalid E-mail!"),
                ),
            ),
            FieldRules(
                "password",
                (
                    required("Please fill in the Password"),
                    min_length(lo, too_short),
                    max_length(hi, too_long),
                ),
            ),
            FieldRules(
                "password_confirm",
                (
                    required("Please fill in the Password"),
                    min_length(lo, too_short),
                    max_length(hi, too_long),
                    equals_field(
                        "password",
                        "The password confirmation does not match the entered password!",
                    ),
                ),
            ),
        ]
    )


def validate_profile(form: ProfileFormState) -> ValidationResult:
    return profile_schema().validate(asdict(form))


def validate_sign_in(form: SignInForm) -> ValidationResult:
    return sign_in_schema().validate(asdict(form))


def validate_sign_up(form: SignUpForm) -> ValidationResult:
    return sign_up_schema().validate(asdict(form))
