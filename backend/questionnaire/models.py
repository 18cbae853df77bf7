"""SQLModel data models.

This module defines the single `submission` table. List-valued answers
(`challenges`, `study_reasons`) are stored in JSON columns so one row
holds one complete questionnaire, the way a document store would.
"""

from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from datetime import datetime, timezone
from typing import List


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Submission(SQLModel, table=True):
    """A completed study-abroad questionnaire.

    Fields:
    - `reference_number`: public `EDU-XXXXXX` identifier, unique and never changed
    - `created_at`: set once when the row is first persisted
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    reference_number: str = Field(index=True, nullable=False, unique=True)

    # Personal details
    full_name: str
    date_of_birth: str
    gender: str
    email: str
    phone_number: str
    nationality: str
    current_country: str
    passport_number: str

    # Educational background
    education_level: str
    education_level_other: Optional[str] = None
    institution_name: str
    field_of_study: str
    graduation_year: str

    # Study-abroad journey
    institutions_preference: Optional[str] = None
    program_type: Optional[str] = None
    program_type_other: Optional[str] = None
    field_of_study_abroad: Optional[str] = None
    study_reasons: Optional[List[str]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    study_reasons_other: Optional[str] = None
    funding_method: Optional[str] = None
    funding_method_other: Optional[str] = None

    # Challenges & insights
    challenges: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    challenges_other: Optional[str] = None

    # Additional information
    open_to_contact: bool = False
    contact_method: Optional[str] = None
    contact_method_other: Optional[str] = None

    # Emergency contact
    emergency_name: str
    emergency_contact: str
    emergency_address: str
    emergency_email: str
    emergency_country: str
    emergency_relationship: str
    emergency_province: str
    emergency_city: str

    # Language test scores
    ielts_score: Optional[str] = None
    sat_score: Optional[str] = None
    pte_score: Optional[str] = None
    gre_score: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow, index=True)
