"""Business logic used by the HTTP controllers.

`SubmissionService` is the trust boundary: it re-validates every raw
body regardless of what the client checked, persists valid submissions
through the repository, and converts rows into response schemas.
"""

import logging
from typing import List, Optional, Union
from sqlmodel import Session
from . import models, repositories
from .config import settings
from .schemas import SubmissionCreated, SubmissionOut
from .validation import ValidationResult, validate

logger = logging.getLogger("questionnaire.services")


class SubmissionService:
    """Create and read questionnaire submissions."""
    def __init__(self, session: Session, max_attempts: Optional[int] = None):
        self.session = session
        self.repo = repositories.SubmissionRepository(session)
        self.max_attempts = max_attempts or settings.REFERENCE_MAX_ATTEMPTS

    def create(self, raw) -> Union[SubmissionCreated, ValidationResult]:
        """Validate `raw` and store it.

        Returns the new `{id, referenceNumber}` on success or the failed
        `ValidationResult`. A reference number supplied by the client is
        used as-is and a collision raises `DuplicateReferenceError`; a
        server-generated one is regenerated on collision up to
        `max_attempts` times.
        """
        result = validate(raw)
        if not result.ok:
            return result
        payload = result.value
        supplied = payload.reference_number
        data = payload.model_dump(exclude={"reference_number"})
        attempts = 1 if supplied else self.max_attempts
        for attempt in range(1, attempts + 1):
            submission = models.Submission(**data)
            try:
                created = self.repo.create(submission, reference_number=supplied)
            except repositories.DuplicateReferenceError as exc:
                if supplied or attempt == attempts:
                    raise
                logger.warning("reference collision on %s, retrying (%d/%d)", exc.reference_number, attempt, attempts)
                continue
            logger.info("submission stored id=%s reference=%s", created.id, created.reference_number)
            return SubmissionCreated(id=str(created.id), reference_number=created.reference_number)
        # unreachable: the final attempt either returns or re-raises
        raise RuntimeError("reference number allocation exhausted")

    def get_by_reference(self, reference_number: str) -> Optional[SubmissionOut]:
        row = self.repo.get_by_reference(reference_number)
        if row is None:
            return None
        return SubmissionOut.model_validate(row)

    def list_all(self) -> List[SubmissionOut]:
        return [SubmissionOut.model_validate(row) for row in self.repo.list_all()]
