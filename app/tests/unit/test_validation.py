import pytest
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import ValidationError
from app.core.response_builders import format_validation_errors
from app.schemas.user import UserCreate
from app.services.users import validate_batch


class StaticEmailRepository:
    def __init__(self, *emails):
        self.emails = {e.lower() for e in emails}

    async def existing_emails(self, emails):
        return {e.lower() for e in emails} & self.emails


def record(name="Jane", email="jane@example.com", role="Developer", password="123456", **overrides):
    data = {
        "name": name,
        "email": email,
        "role": role,
        "password": password,
        "password_confirmation": password,
    }
    data.update(overrides)
    return data


class TestFormatValidationErrors:

    def test_strips_location_prefix(self):
        errors = [{"type": "missing", "loc": ("body", "email"), "msg": "Field required"}]
        assert format_validation_errors(errors) == {"email": ["The email field is required."]}

    def test_groups_messages_per_field(self):
        errors = [
            {"type": "string_too_short", "loc": ("password",), "msg": "", "ctx": {"min_length": 6}},
            {"type": "value_error", "loc": ("password",), "msg": "Value error, Does not match."},
        ]
        assert format_validation_errors(errors) == {
            "password": [
                "The password field must be at least 6 characters.",
                "Does not match.",
            ]
        }

    def test_nested_locations_are_dotted(self):
        errors = [{"type": "int_parsing", "loc": ("body", "ids", 2), "msg": ""}]
        assert format_validation_errors(errors) == {"ids.2": ["The ids.2 field must be an integer."]}

    def test_whole_body_missing(self):
        errors = [{"type": "missing", "loc": ("body",), "msg": "Field required"}]
        assert format_validation_errors(errors) == {"body": ["The body field is required."]}

    def test_unknown_type_falls_back_to_pydantic_message(self):
        errors = [{"type": "bool_parsing", "loc": ("flag",), "msg": "Input should be a valid boolean"}]
        assert format_validation_errors(errors) == {"flag": ["Input should be a valid boolean"]}


class TestUserCreate:

    def test_confirmation_must_match(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            UserCreate.model_validate(record(password_confirmation="nope"))
        assert format_validation_errors(exc_info.value.errors()) == {
            "password": ["The password field confirmation does not match."]
        }

    def test_missing_confirmation_is_a_mismatch(self):
        data = record()
        del data["password_confirmation"]
        with pytest.raises(PydanticValidationError):
            UserCreate.model_validate(data)

    def test_valid_record(self):
        user = UserCreate.model_validate(record(role="Team Lead"))
        assert user.role.value == "Team Lead"


class TestValidateBatch:

    @pytest.mark.asyncio
    async def test_all_valid(self):
        records = [record(name="A", email="a@example.com"), record(name="B", email="b@example.com")]
        users = await validate_batch(StaticEmailRepository(), records)
        assert [u.name for u in users] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_first_occurrence_wins_within_batch(self):
        records = [
            record(name="A", email="same@example.com"),
            record(name="B", email="other@example.com"),
            record(name="C", email="SAME@example.com"),
        ]
        with pytest.raises(ValidationError) as exc_info:
            await validate_batch(StaticEmailRepository(), records)
        assert exc_info.value.errors == {"2": {"email": ["The email has already been taken."]}}

    @pytest.mark.asyncio
    async def test_stored_email_flags_every_occurrence(self):
        records = [record(email="taken@example.com"), record(email="taken@example.com")]
        with pytest.raises(ValidationError) as exc_info:
            await validate_batch(StaticEmailRepository("taken@example.com"), records)
        assert set(exc_info.value.errors) == {"0", "1"}

    @pytest.mark.asyncio
    async def test_uniqueness_is_checked_alongside_other_errors(self):
        records = [record(email="taken@example.com", password="1", password_confirmation="1")]
        with pytest.raises(ValidationError) as exc_info:
            await validate_batch(StaticEmailRepository("taken@example.com"), records)
        assert exc_info.value.errors["0"] == {
            "password": ["The password field must be at least 6 characters."],
            "email": ["The email has already been taken."],
        }

    @pytest.mark.asyncio
    async def test_errors_are_ordered_by_index(self):
        records = [record(email=f"user{i}@example.com", name="") for i in range(12)]
        with pytest.raises(ValidationError) as exc_info:
            await validate_batch(StaticEmailRepository(), records)
        assert list(exc_info.value.errors) == [str(i) for i in range(12)]
        assert exc_info.value.message == "Validation failed for some records."
