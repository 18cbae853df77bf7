"""Step-by-step questionnaire controller.

`WizardForm` holds the answers a user has typed so far and moves
between steps. Moving forward validates only the fields of the current
step, using the same rule set the server applies, so nobody is blocked
by a section they have not reached yet. Submitting validates the whole
form and posts it through an `httpx.Client`; the reference number in the
server's reply is the only one the wizard ever shows.

Two layouts exist: "standard" (4 steps) and "extended" (6 steps, adding
the study-abroad journey and language test scores).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from .schemas import FORM_STEPS
from .validation import RULES_BY_DEPENDENT, validate, validate_fields

logger = logging.getLogger("questionnaire.wizard")

SUBMIT_FAILED_MESSAGE = "There was an error submitting your form. Please try again."

LIST_FIELDS = {"challenges", "studyReasons"}
BOOL_FIELDS = {"openToContact"}
# radio groups start unselected
UNSET_FIELDS = {"gender"}


def default_values(variant: str) -> Dict[str, Any]:
    """Initial form state for a layout."""
    values: Dict[str, Any] = {}
    for _label, fields in FORM_STEPS[variant]:
        for name in fields:
            if name in LIST_FIELDS:
                values[name] = []
            elif name in BOOL_FIELDS:
                values[name] = False
            elif name in UNSET_FIELDS:
                values[name] = None
            else:
                values[name] = ""
    return values


@dataclass
class SubmitOutcome:
    ok: bool
    reference_number: Optional[str] = None
    redirect_to: Optional[str] = None
    retryable: bool = False
    message: Optional[str] = None
    errors: Dict[str, str] = field(default_factory=dict)


class WizardForm:
    """Client-side state machine over the questionnaire steps."""

    def __init__(self, client: httpx.Client, variant: str = "standard", endpoint: str = "/api/submissions"):
        if variant not in FORM_STEPS:
            raise ValueError(f"unknown form variant: {variant}")
        self.client = client
        self.variant = variant
        self.endpoint = endpoint
        self.steps = FORM_STEPS[variant]
        self.current_step = 1
        self.data = default_values(variant)
        self.errors: Dict[str, str] = {}
        self.scroll_to_top = False
        self.submitting = False
        self.notification: Optional[str] = None
        self.reference_number: Optional[str] = None
        self.redirect_to: Optional[str] = None

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def step_label(self) -> str:
        return self.steps[self.current_step - 1][0]

    @property
    def is_last_step(self) -> bool:
        return self.current_step == self.total_steps

    def set(self, name: str, value: Any) -> None:
        self.data[name] = value
        self.errors.pop(name, None)

    def update(self, **values: Any) -> None:
        for name, value in values.items():
            self.set(name, value)

    def toggle(self, name: str, option: str) -> None:
        """Add or remove `option` from a multi-select field."""
        selected = list(self.data.get(name) or [])
        if option in selected:
            selected.remove(option)
        else:
            selected.append(option)
        self.set(name, selected)

    def is_visible(self, name: str) -> bool:
        """Conditional sub-fields show only while their trigger holds."""
        rule = RULES_BY_DEPENDENT.get(name)
        return rule is None or rule.applies(self.data)

    def visible_fields(self, step: Optional[int] = None) -> List[str]:
        step = step or self.current_step
        return [name for name in self.steps[step - 1][1] if self.is_visible(name)]

    def validate_step(self, step: Optional[int] = None) -> bool:
        result = validate_fields(self.data, self.visible_fields(step))
        self.errors = result.by_field()
        return result.ok

    def next(self) -> bool:
        """Advance if the current step is valid; otherwise stay and expose errors."""
        self.scroll_to_top = False
        if not self.validate_step():
            return False
        self.current_step = min(self.current_step + 1, self.total_steps)
        self.scroll_to_top = True
        return True

    def previous(self) -> None:
        self.current_step = max(self.current_step - 1, 1)
        self.scroll_to_top = True

    def payload(self) -> Dict[str, Any]:
        """The body sent to the server.

        Unanswered radio groups and hidden "Other" sub-fields are left out.
        """
        return {
            name: value for name, value in self.data.items()
            if value is not None and self.is_visible(name)
        }

    def submit(self) -> SubmitOutcome:
        """Validate everything and post the form.

        Whatever happens, `data` is left untouched so a failed attempt can
        simply be retried.
        """
        if not self.is_last_step:
            raise RuntimeError("submit is only available on the last step")
        if not self.validate_step():
            return SubmitOutcome(ok=False, errors=dict(self.errors))
        full = validate(self.payload())
        if not full.ok:
            self.errors = full.by_field()
            return SubmitOutcome(ok=False, errors=dict(self.errors))

        self.submitting = True
        self.notification = None
        try:
            resp = self.client.post(self.endpoint, json=self.payload())
        except httpx.HTTPError as exc:
            logger.warning("submission request failed: %s", exc)
            return self._failed()
        finally:
            self.submitting = False

        if resp.status_code == 200:
            try:
                reference_number = resp.json()["referenceNumber"]
            except (ValueError, KeyError, TypeError):
                logger.warning("unreadable success reply: %r", resp.text[:200])
                return self._failed()
            self.reference_number = reference_number
            self.redirect_to = f"/success?ref={self.reference_number}"
            return SubmitOutcome(ok=True, reference_number=self.reference_number, redirect_to=self.redirect_to)
        if resp.status_code == 400:
            try:
                body = resp.json()
                errors = {
                    str(e["path"][0]): e["message"] for e in body.get("errors", []) if e.get("path")
                }
            except (ValueError, KeyError, TypeError, AttributeError):
                logger.warning("unreadable validation reply: %r", resp.text[:200])
                return self._failed()
            self.errors = errors
            self.notification = body.get("details")
            return SubmitOutcome(ok=False, message=self.notification, errors=dict(self.errors))
        logger.warning("submission rejected with status %s", resp.status_code)
        return self._failed()

    def _failed(self) -> SubmitOutcome:
        self.notification = SUBMIT_FAILED_MESSAGE
        return SubmitOutcome(ok=False, retryable=True, message=SUBMIT_FAILED_MESSAGE)
