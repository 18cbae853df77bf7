"""Pydantic request/response schemas used by the API.

`SubmissionIn` is the canonical shape of an inbound questionnaire. Its
field-level rules (required strings, lengths, email format, enumerated
multi-selects) live here; rules that depend on more than one field live
in `questionnaire.validation`. JSON uses camelCase names, Python code
uses snake_case attributes.
"""

from datetime import datetime
from typing import Dict, List, Optional, Union

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from .utils.reference import REFERENCE_PATTERN

OTHER = "Other"

GENDERS = ["Male", "Female"]

EDUCATION_LEVELS = [
    "High school/Secondary School",
    "Diploma",
    "Bachelor's Degree",
    "Master's Degree",
    "PhD/Doctorate",
    OTHER,
]

PROGRAM_TYPES = [
    "Undergraduate",
    "Postgraduate (Master's)",
    "PhD/Doctorate",
    "Diploma/Certificate",
    "Language Course",
    OTHER,
]

STUDY_REASONS = [
    "Quality of education",
    "Career opportunities",
    "International exposure",
    "Scholarship availability",
    "Immigration prospects",
    OTHER,
]

FUNDING_METHODS = [
    "Self-funded",
    "Family support",
    "Scholarship",
    "Student loan",
    "Employer sponsorship",
    OTHER,
]

CHALLENGES = [
    "Visa process",
    "Financial difficulties",
    "Language barrier",
    "Cultural adjustment",
    "Academic pressure",
    "Homesickness",
    "Finding accommodation",
    OTHER,
]

CONTACT_METHODS = [
    "Email",
    "Phone/WhatsApp",
    OTHER,
]

# Shown next to a field whenever it fails a field-level rule.
FIELD_MESSAGES = {
    "referenceNumber": "Reference number must look like EDU-XXXXXX",
    "fullName": "Full name is required",
    "dateOfBirth": "Date of birth is required",
    "gender": "Please select your gender",
    "email": "Invalid email address",
    "phoneNumber": "Phone number must include country code",
    "nationality": "Nationality is required",
    "currentCountry": "Current country is required",
    "passportNumber": "Passport number is required",
    "educationLevel": "Please select your education level",
    "institutionName": "Institution name is required",
    "fieldOfStudy": "Field of study is required",
    "graduationYear": "Graduation year must be 4 characters, e.g. 2022",
    "institutionsPreference": "Institutions preference is required",
    "programType": "Program type is required",
    "fieldOfStudyAbroad": "Field of study abroad is required",
    "studyReasons": "Please select at least one reason",
    "fundingMethod": "Funding method is required",
    "challenges": "Please select at least one challenge",
    "openToContact": "Please answer whether we may contact you",
    "emergencyName": "Emergency contact name is required",
    "emergencyContact": "Emergency contact number is required",
    "emergencyAddress": "Emergency contact address is required",
    "emergencyEmail": "Invalid emergency email",
    "emergencyCountry": "Emergency contact country is required",
    "emergencyRelationship": "Relationship is required",
    "emergencyProvince": "Province/State is required",
    "emergencyCity": "City is required",
}

# All-or-nothing section: present only on the extended form.
JOURNEY_FIELDS = [
    "institutionsPreference",
    "programType",
    "fieldOfStudyAbroad",
    "studyReasons",
    "fundingMethod",
]

PERSONAL_STEP = ("Personal Details", [
    "fullName", "dateOfBirth", "gender", "email", "phoneNumber",
    "nationality", "currentCountry", "passportNumber",
])
EDUCATION_STEP = ("Educational Background", [
    "educationLevel", "educationLevelOther", "institutionName", "fieldOfStudy", "graduationYear",
])
JOURNEY_STEP = ("Study Abroad Journey", [
    "institutionsPreference", "programType", "programTypeOther", "fieldOfStudyAbroad",
    "studyReasons", "studyReasonsOther", "fundingMethod", "fundingMethodOther",
])
CHALLENGES_STEP = ("Challenges & Insights", [
    "challenges", "challengesOther", "openToContact", "contactMethod", "contactMethodOther",
])
EMERGENCY_STEP = ("Emergency Contact", [
    "emergencyName", "emergencyContact", "emergencyAddress", "emergencyEmail",
    "emergencyCountry", "emergencyRelationship", "emergencyProvince", "emergencyCity",
])
LANGUAGE_STEP = ("Language Test Scores", ["ieltsScore", "satScore", "pteScore", "greScore"])

FORM_STEPS = {
    "standard": [PERSONAL_STEP, EDUCATION_STEP, CHALLENGES_STEP, EMERGENCY_STEP],
    "extended": [PERSONAL_STEP, EDUCATION_STEP, JOURNEY_STEP, CHALLENGES_STEP, EMERGENCY_STEP, LANGUAGE_STEP],
}


class SubmissionFields(BaseModel):
    """Questionnaire fields shared by the inbound and stored shapes."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    reference_number: Optional[str] = Field(default=None, pattern=REFERENCE_PATTERN.pattern)

    # Section 1: Personal Details
    full_name: str = Field(min_length=1)
    date_of_birth: str = Field(min_length=1)
    gender: str = Field(min_length=1)
    email: str
    phone_number: str = Field(min_length=5)
    nationality: str = Field(min_length=1)
    current_country: str = Field(min_length=1)
    passport_number: str = Field(min_length=3)

    # Section 2: Educational Background
    education_level: str = Field(min_length=1)
    education_level_other: Optional[str] = None
    institution_name: str = Field(min_length=1)
    field_of_study: str = Field(min_length=1)
    graduation_year: str = Field(min_length=4, max_length=4)

    # Section 3: Study Abroad Journey
    institutions_preference: Optional[str] = Field(default=None, min_length=1)
    program_type: Optional[str] = Field(default=None, min_length=1)
    program_type_other: Optional[str] = None
    field_of_study_abroad: Optional[str] = Field(default=None, min_length=1)
    study_reasons: Optional[List[str]] = Field(default=None, min_length=1)
    study_reasons_other: Optional[str] = None
    funding_method: Optional[str] = Field(default=None, min_length=1)
    funding_method_other: Optional[str] = None

    # Section 4: Challenges & Insights
    challenges: List[str] = Field(min_length=1)
    challenges_other: Optional[str] = None

    # Section 5: Additional Information
    open_to_contact: bool = False
    contact_method: Optional[str] = None
    contact_method_other: Optional[str] = None

    # Emergency Contact Details
    emergency_name: str = Field(min_length=1)
    emergency_contact: str = Field(min_length=1)
    emergency_address: str = Field(min_length=1)
    emergency_email: str
    emergency_country: str = Field(min_length=1)
    emergency_relationship: str = Field(min_length=1)
    emergency_province: str = Field(min_length=1)
    emergency_city: str = Field(min_length=1)

    # Language Test Scores
    ielts_score: Optional[str] = None
    sat_score: Optional[str] = None
    pte_score: Optional[str] = None
    gre_score: Optional[str] = None


class SubmissionIn(SubmissionFields):
    """Payload accepted by `POST /api/submissions`.

    `reference_number` is optional: the server assigns one when absent
    and a client replaying an earlier attempt may send it back. Option
    membership and email format are checked here only, so stored rows
    stay readable if an option list changes later.
    """

    @field_validator("email", "emergency_email")
    @classmethod
    def _check_email(cls, value: str, info):
        # stored verbatim; email-validator would normalise the domain
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            raise ValueError(FIELD_MESSAGES[to_camel(info.field_name)])
        return value

    @field_validator("challenges")
    @classmethod
    def _check_challenges(cls, value: List[str]):
        unknown = [v for v in value if v not in CHALLENGES]
        if unknown:
            raise ValueError(f"Unknown challenge: {unknown[0]}")
        return value

    @field_validator("study_reasons")
    @classmethod
    def _check_study_reasons(cls, value: Optional[List[str]]):
        if value is None:
            return value
        unknown = [v for v in value if v not in STUDY_REASONS]
        if unknown:
            raise ValueError(f"Unknown study reason: {unknown[0]}")
        return value


class SubmissionOut(SubmissionFields):
    """A stored submission as returned by the read endpoints."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    reference_number: str
    created_at: datetime

    @field_serializer("id")
    def _id_as_string(self, value: int) -> str:
        return str(value)


class SubmissionCreated(BaseModel):
    """Response of a successful create: never echoes the payload back."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    reference_number: str


class ErrorDetail(BaseModel):
    """A single field-scoped validation problem."""
    path: List[Union[str, int]]
    message: str


class ErrorOut(BaseModel):
    """Error body shared by all failing endpoints."""
    error: str
    details: Optional[str] = None
    errors: Optional[List[ErrorDetail]] = None


class FormStep(BaseModel):
    number: int
    label: str
    fields: List[str]


class OptionsOut(BaseModel):
    """Choice lists and wizard layouts so clients render what the server accepts."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    genders: List[str]
    education_levels: List[str]
    program_types: List[str]
    study_reasons: List[str]
    funding_methods: List[str]
    challenges: List[str]
    contact_methods: List[str]
    steps: Dict[str, List[FormStep]]
