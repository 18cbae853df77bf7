"""CSV export of stored submissions for the admin listing.

Rows are the camelCase JSON objects returned by `GET /api/submissions`.
Every cell is quoted, list answers are joined with ", " and booleans are
rendered as Yes/No.
"""

from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable, Mapping

COLUMNS = [
    ("Reference Number", "referenceNumber"),
    ("Full Name", "fullName"),
    ("Email", "email"),
    ("Phone Number", "phoneNumber"),
    ("Date of Birth", "dateOfBirth"),
    ("Gender", "gender"),
    ("Nationality", "nationality"),
    ("Current Country", "currentCountry"),
    ("Passport Number", "passportNumber"),
    ("Education Level", "educationLevel"),
    ("Institution", "institutionName"),
    ("Field of Study", "fieldOfStudy"),
    ("Graduation Year", "graduationYear"),
    ("Institutions Preference", "institutionsPreference"),
    ("Program Type", "programType"),
    ("Field of Study Abroad", "fieldOfStudyAbroad"),
    ("Study Reasons", "studyReasons"),
    ("Funding Method", "fundingMethod"),
    ("Challenges", "challenges"),
    ("Open to Contact", "openToContact"),
    ("Contact Method", "contactMethod"),
    ("Emergency Name", "emergencyName"),
    ("Emergency Contact", "emergencyContact"),
    ("Emergency Email", "emergencyEmail"),
    ("Emergency Country", "emergencyCountry"),
    ("Emergency City", "emergencyCity"),
    ("IELTS", "ieltsScore"),
    ("SAT", "satScore"),
    ("PTE", "pteScore"),
    ("GRE", "greScore"),
    ("Submitted At", "createdAt"),
]


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def submissions_to_csv(rows: Iterable[Mapping]) -> str:
    """Render submissions as CSV text with a header row."""
    sio = io.StringIO()
    writer = csv.writer(sio, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([header for header, _ in COLUMNS])
    for row in rows:
        writer.writerow([_cell(row.get(key)) for _, key in COLUMNS])
    return sio.getvalue()


def export_filename(today: date | None = None) -> str:
    today = today or date.today()
    return f"edustar-submissions-{today.isoformat()}.csv"
