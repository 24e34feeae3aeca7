"""Unit tests for the profile upsert payload schema."""

import pytest
from pydantic import ValidationError

from devconnector.api.schemas.profile import ProfileIn, profile_violations


def _violations(payload: dict) -> list[dict]:
    with pytest.raises(ValidationError) as exc_info:
        ProfileIn.model_validate(payload)
    return profile_violations(exc_info.value)


class TestProfileIn:
    def test_valid_payload(self) -> None:
        data = ProfileIn.model_validate({"status": "Dev", "skills": "a,b", "twitter": "t", "unknown": 1})

        assert data.model_dump(exclude_none=True) == {"status": "Dev", "skills": "a,b", "twitter": "t"}

    def test_skills_may_be_a_list(self) -> None:
        assert ProfileIn.model_validate({"status": "Dev", "skills": ["go", "rust"]}).skills == ["go", "rust"]

    def test_empty_optional_strings_pass_the_schema(self) -> None:
        data = ProfileIn.model_validate({"status": "Dev", "skills": "a", "company": ""})
        assert data.company == ""


class TestProfileViolations:
    def test_missing_required_fields_in_field_order(self) -> None:
        violations = _violations({})

        assert [v["param"] for v in violations] == ["status", "skills"]
        assert violations[0]["msg"] == "El estado es obligatorio"
        assert violations[1]["msg"] == "Las habilidades son obligatorias"
        assert all(v["location"] == "body" and v["value"] is None for v in violations)

    def test_empty_string_status(self) -> None:
        violations = _violations({"status": "", "skills": "a"})

        assert violations == [{"param": "status", "msg": "El estado es obligatorio", "location": "body", "value": ""}]

    def test_empty_skills_list(self) -> None:
        violations = _violations({"status": "Dev", "skills": []})

        assert [v["param"] for v in violations] == ["skills"]
        assert violations[0]["msg"] == "Las habilidades son obligatorias"

    def test_null_status(self) -> None:
        violations = _violations({"status": None, "skills": "a"})
        assert violations[0]["msg"] == "El estado es obligatorio"

    def test_non_string_social_link_is_rejected(self) -> None:
        violations = _violations({"status": "Dev", "skills": "a", "twitter": 123})

        assert [v["param"] for v in violations] == ["twitter"]
        assert violations[0]["value"] == 123

    def test_non_string_scalar_is_rejected(self) -> None:
        violations = _violations({"status": "Dev", "skills": "a", "company": {"name": "Acme"}})
        assert [v["param"] for v in violations] == ["company"]

    def test_numeric_status_is_rejected(self) -> None:
        violations = _violations({"status": 0, "skills": "a"})
        assert [v["param"] for v in violations] == ["status"]

    def test_skills_of_wrong_type_reported_once(self) -> None:
        violations = _violations({"status": "Dev", "skills": 42})
        assert [v["param"] for v in violations] == ["skills"]
