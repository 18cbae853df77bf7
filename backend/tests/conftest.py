import copy
import pytest
from fastapi.testclient import TestClient
from questionnaire.database import Database
from questionnaire.main import create_app

JANE = {
    "fullName": "Jane Doe",
    "dateOfBirth": "2000-01-01",
    "gender": "Female",
    "email": "jane@example.com",
    "phoneNumber": "+233200000000",
    "nationality": "Ghanaian",
    "currentCountry": "Ghana",
    "passportNumber": "G1234567",
    "educationLevel": "Bachelor's Degree",
    "institutionName": "X University",
    "fieldOfStudy": "CS",
    "graduationYear": "2022",
    "challenges": ["Visa process"],
    "openToContact": False,
    "emergencyName": "John Doe",
    "emergencyContact": "+233200000001",
    "emergencyAddress": "123 St",
    "emergencyEmail": "john@example.com",
    "emergencyCountry": "Ghana",
    "emergencyRelationship": "Father",
    "emergencyProvince": "Greater Accra",
    "emergencyCity": "Accra",
}

JOURNEY = {
    "institutionsPreference": "University of Toronto, McGill",
    "programType": "Postgraduate (Master's)",
    "fieldOfStudyAbroad": "Data Science",
    "studyReasons": ["Career opportunities", "Quality of education"],
    "fundingMethod": "Scholarship",
}


@pytest.fixture
def payload():
    """A fresh copy of a valid standard-form submission."""
    return copy.deepcopy(JANE)


@pytest.fixture
def extended_payload():
    data = copy.deepcopy(JANE)
    data.update(copy.deepcopy(JOURNEY))
    data["ieltsScore"] = "7.5"
    return data


@pytest.fixture
def database(tmp_path):
    """A fresh SQLite database per test."""
    db = Database(f"sqlite:///{tmp_path / 'test.db'}")
    db.open()
    yield db
    db.close()


@pytest.fixture
def session(database):
    with database.session() as s:
        yield s


@pytest.fixture
def client(tmp_path):
    app = create_app(Database(f"sqlite:///{tmp_path / 'api.db'}"))
    with TestClient(app) as c:
        yield c
