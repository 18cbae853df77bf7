"""Submission validation: field rules plus a table of cross-field rules.

`validate` is the single entry point used by the API and by the wizard.
It never raises for malformed input; it returns a `ValidationResult`
that either carries the parsed `SubmissionIn` or the list of
field-scoped problems. Every rule contributes its first failure per
path, so callers see all offending fields at once.

Cross-field rules are data, not code: each `ConditionalRule` names the
field that triggers it, the field that becomes required, and the
predicate on the trigger value. Errors are attached to the dependent
field because that is the one the user has to fill in.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from .schemas import FIELD_MESSAGES, JOURNEY_FIELDS, OTHER, SubmissionIn

Path = Tuple[Union[str, int], ...]


@dataclass(frozen=True)
class ValidationIssue:
    """One violated rule, scoped to a field path."""
    path: Path
    message: str

    def as_dict(self) -> dict:
        return {"path": list(self.path), "message": self.message}


@dataclass
class ValidationResult:
    """Tagged outcome of `validate`: a parsed value or a list of issues."""
    value: Optional[SubmissionIn] = None
    errors: List[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def details(self) -> str:
        """All messages in one human-readable line."""
        if self.ok:
            return ""
        parts = [f'{e.message} at "{".".join(str(p) for p in e.path)}"' for e in self.errors]
        return "Validation error: " + "; ".join(parts)

    def by_field(self) -> dict:
        """Map each top-level field name to its message."""
        return {str(e.path[0]) if e.path else "": e.message for e in self.errors}


def is_true(value: Any) -> bool:
    return value is True


def selects_other(value: Any) -> bool:
    """True when a selector, or any element of a multi-select, is "Other"."""
    if isinstance(value, str):
        return value == OTHER
    if isinstance(value, (list, tuple)):
        return OTHER in value
    return False


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass(frozen=True)
class ConditionalRule:
    trigger: str
    dependent: str
    predicate: Callable[[Any], bool]
    message: str

    def applies(self, data: Mapping) -> bool:
        return self.predicate(data.get(self.trigger))

    def check(self, data: Mapping) -> Optional[ValidationIssue]:
        if self.applies(data) and is_blank(data.get(self.dependent)):
            return ValidationIssue((self.dependent,), self.message)
        return None


CONDITIONAL_RULES = [
    ConditionalRule("openToContact", "contactMethod", is_true, "Please select a contact method"),
    ConditionalRule("educationLevel", "educationLevelOther", selects_other, "Please specify your education level"),
    ConditionalRule("programType", "programTypeOther", selects_other, "Please specify your program type"),
    ConditionalRule("studyReasons", "studyReasonsOther", selects_other, "Please specify your reasons"),
    ConditionalRule("fundingMethod", "fundingMethodOther", selects_other, "Please specify your funding method"),
    ConditionalRule("challenges", "challengesOther", selects_other, "Please specify your challenges"),
    ConditionalRule("contactMethod", "contactMethodOther", selects_other, "Please specify your contact method"),
]

# dependent field -> rule, used to decide which sub-fields are visible
RULES_BY_DEPENDENT = {rule.dependent: rule for rule in CONDITIONAL_RULES}


def _pydantic_issues(exc: PydanticValidationError) -> List[ValidationIssue]:
    issues = []
    for err in exc.errors():
        loc = tuple(err.get("loc", ()))
        name = str(loc[0]) if loc else ""
        if err.get("type") == "value_error" and "error" in err.get("ctx", {}):
            message = str(err["ctx"]["error"])
        else:
            message = FIELD_MESSAGES.get(name, err.get("msg", "Invalid value"))
        issues.append(ValidationIssue(loc, message))
    return issues


def _cross_field_issues(data: Mapping) -> List[ValidationIssue]:
    return [issue for issue in (rule.check(data) for rule in CONDITIONAL_RULES) if issue]


def _journey_issues(data: Mapping) -> List[ValidationIssue]:
    """The study-abroad section is all-or-nothing."""
    if not any(data.get(name) is not None for name in JOURNEY_FIELDS):
        return []
    return [ValidationIssue((name,), FIELD_MESSAGES[name]) for name in JOURNEY_FIELDS if data.get(name) is None]


def _first_per_path(issues: Iterable[ValidationIssue]) -> List[ValidationIssue]:
    seen = set()
    out = []
    for issue in issues:
        key = issue.path[:1]
        if key in seen:
            continue
        seen.add(key)
        out.append(issue)
    return out


def validate(raw: Any) -> ValidationResult:
    """Validate an untrusted submission body.

    Field-level and cross-field rules are always both evaluated so the
    caller gets the full set of problems in one pass.
    """
    if not isinstance(raw, Mapping):
        return ValidationResult(errors=[ValidationIssue((), "Expected a JSON object")])
    value = None
    issues: List[ValidationIssue] = []
    try:
        value = SubmissionIn.model_validate(dict(raw))
    except PydanticValidationError as exc:
        issues.extend(_pydantic_issues(exc))
    checked = dict(raw)
    if value is not None:
        # rules see parsed values, e.g. "true" coerced to True
        checked.update(value.model_dump(by_alias=True))
    issues.extend(_cross_field_issues(checked))
    issues.extend(_journey_issues(checked))
    issues = _first_per_path(issues)
    if issues:
        return ValidationResult(errors=issues)
    return ValidationResult(value=value)


def validate_fields(raw: Mapping, fields: Iterable[str]) -> ValidationResult:
    """Run the full rule set but keep only problems on `fields`.

    Used for step-by-step validation: fields the user has not reached yet
    never block progress.
    """
    wanted = set(fields)
    result = validate(raw)
    if result.ok:
        return result
    return ValidationResult(errors=[e for e in result.errors if e.path and e.path[0] in wanted])
