from officegeo.pipeline.validate import (
    Invalid,
    Valid,
    ValidatedEmployee,
    ValidatedOffice,
    validate_employee,
    validate_office,
)


def test_office_valid_payload_is_trimmed():
    outcome = validate_office({"name": "  Berlin Office ", "postcode": " 10117", "street": " ", "city": "Berlin "})

    assert isinstance(outcome, Valid)
    assert outcome.payload == ValidatedOffice(name="Berlin Office", postcode="10117", street=None, city="Berlin")


def test_office_reports_every_violation():
    outcome = validate_office({"name": "", "postcode": "123"})

    assert isinstance(outcome, Invalid)
    assert outcome.errors == ["name: Name is required", "postcode: Postcode must be exactly 5 digits"]


def test_missing_postcode_has_its_own_message():
    outcome = validate_office({"name": "A", "postcode": None})
    assert outcome == Invalid(errors=["postcode: Postcode is required"])


def test_employee_requires_team():
    outcome = validate_employee({"name": "Max", "postcode": "10115", "team": "   "})
    assert outcome == Invalid(errors=["team: Team is required"])


def test_employee_optional_fields():
    outcome = validate_employee(
        {
            "name": "Max",
            "postcode": "10115",
            "team": "Data",
            "department": "Engineering",
            "role": "",
            "assigned_office": "Berlin Office",
        }
    )

    assert isinstance(outcome, Valid)
    assert outcome.payload == ValidatedEmployee(
        name="Max",
        postcode="10115",
        team="Data",
        department="Engineering",
        role=None,
        assigned_office="Berlin Office",
    )


def test_postcode_with_inner_space_is_rejected():
    outcome = validate_employee({"name": "Max", "postcode": "10 115", "team": "Data"})
    assert isinstance(outcome, Invalid)
    assert outcome.errors == ["postcode: Postcode must be exactly 5 digits"]
