"""Repository encapsulating submission storage.

`SubmissionRepository` is the only code that talks to the database. It
returns SQLModel objects, commits on create, and translates driver
errors into the two failures callers are expected to handle:
`DuplicateReferenceError` and `StoreUnavailableError`.
"""

from typing import List, Optional
from sqlmodel import Session, select
from sqlalchemy import func
from sqlalchemy.exc import DBAPIError, IntegrityError
from . import models
from .utils.reference import generate_reference_number


class DuplicateReferenceError(Exception):
    """The reference number is already taken by another submission."""
    def __init__(self, reference_number: str):
        super().__init__(f"reference number already exists: {reference_number}")
        self.reference_number = reference_number


class StoreUnavailableError(Exception):
    """The database could not be reached or refused the operation."""


class SubmissionRepository:
    """Create and read `Submission` rows. Rows are never updated or deleted."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, submission: models.Submission, reference_number: Optional[str] = None) -> models.Submission:
        """Persist a new submission and return the managed instance.

        A reference number is generated when neither the argument nor
        the object carries one. The unique index on `reference_number`
        is the authority on collisions.
        """
        submission.reference_number = (
            reference_number or getattr(submission, "reference_number", None) or generate_reference_number()
        )
        submission.created_at = models.utcnow()
        self.session.add(submission)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            if self._is_reference_conflict(exc):
                raise DuplicateReferenceError(submission.reference_number) from exc
            raise StoreUnavailableError(str(exc.orig)) from exc
        except DBAPIError as exc:
            self.session.rollback()
            raise StoreUnavailableError(str(exc.orig)) from exc
        self.session.refresh(submission)
        return submission

    def get_by_reference(self, reference_number: str) -> Optional[models.Submission]:
        """Return a `Submission` by exact reference number or `None` if not found."""
        stmt = select(models.Submission).where(models.Submission.reference_number == reference_number)
        try:
            return self.session.exec(stmt).first()
        except DBAPIError as exc:
            raise StoreUnavailableError(str(exc.orig)) from exc

    def list_all(self) -> List[models.Submission]:
        """Return every submission, newest first."""
        stmt = select(models.Submission).order_by(models.Submission.created_at.desc(), models.Submission.id.desc())
        try:
            return list(self.session.exec(stmt).all())
        except DBAPIError as exc:
            raise StoreUnavailableError(str(exc.orig)) from exc

    def count(self) -> int:
        try:
            return self.session.exec(select(func.count()).select_from(models.Submission)).one()
        except DBAPIError as exc:
            raise StoreUnavailableError(str(exc.orig)) from exc

    @staticmethod
    def _is_reference_conflict(exc: IntegrityError) -> bool:
        text = str(exc.orig).lower()
        return "reference_number" in text or "unique" in text
