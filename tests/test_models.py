import pytest

from highscores.errors import ValidationError
from highscores.models import PlayerRecord, ScoreSubmission


def test_valid_payload():
    submission = ScoreSubmission.from_payload({"name": "Ann", "time": 120})

    assert submission == ScoreSubmission(name="Ann", time=120)


def test_extra_fields_are_ignored():
    submission = ScoreSubmission.from_payload({"name": "Ann", "time": 5, "level": 3})

    assert submission.time == 5


@pytest.mark.parametrize(
    "payload, field, message",
    [
        ({"time": 40}, "name", "Required"),
        ({"name": "", "time": 40}, "name", "Required"),
        ({"name": 7, "time": 40}, "name", "Must be a string"),
        ({"name": "X"}, "time", "Required"),
        ({"name": "X", "time": None}, "time", "Required"),
        ({"name": "X", "time": 0}, "time", "Required"),
        ({"name": "X", "time": "90"}, "time", "Must be an integer"),
        ({"name": "X", "time": 90.5}, "time", "Must be an integer"),
        ({"name": "X", "time": True}, "time", "Must be an integer"),
        ({"name": "X", "time": 10**20}, "time", "Must be an integer"),
        ({"name": "X", "time": -(2**63) - 1}, "time", "Must be an integer"),
    ],
)
def test_invalid_fields(payload, field, message):
    with pytest.raises(ValidationError) as exc_info:
        ScoreSubmission.from_payload(payload)

    assert exc_info.value.status == 422
    assert exc_info.value.errors[field] == message


def test_all_missing_fields_are_reported():
    with pytest.raises(ValidationError) as exc_info:
        ScoreSubmission.from_payload({})

    assert set(exc_info.value.errors) == {"name", "time"}


@pytest.mark.parametrize("payload", [[1, 2], "Ann", 42, None])
def test_non_object_body_is_a_bad_request(payload):
    with pytest.raises(ValidationError) as exc_info:
        ScoreSubmission.from_payload(payload)

    assert exc_info.value.status == 400


def test_to_record_carries_request_metadata():
    record = ScoreSubmission(name="Ann", time=90).to_record(
        source_ip="1.2.3.4", country="US", city="boston"
    )

    assert record.best_time == 90
    assert record.country == "US"
    assert record.city == "boston"
    assert record.region == ""
    assert record.identity_key == "Ann1.2.3.4"


def test_to_dict_uses_wire_names():
    record = PlayerRecord(
        name="Ann",
        best_time=90,
        created_at="2026-10-19T17:04:00+00:00",
        country="US",
        region="ma",
        city="boston",
        city_lat_long="42.36,-71.05",
        source_ip="1.2.3.4",
    )

    assert record.to_dict() == {
        "name": "Ann",
        "bestTime": 90,
        "createdAt": "2026-10-19T17:04:00+00:00",
        "country": "US",
        "region": "ma",
        "city": "boston",
        "cityLatLong": "42.36,-71.05",
        "sourceIP": "1.2.3.4",
    }


def test_time_at_integer_column_bounds_is_accepted():
    assert ScoreSubmission.from_payload({"name": "X", "time": 2**63 - 1}).time == 2**63 - 1
    assert ScoreSubmission.from_payload({"name": "X", "time": -(2**63)}).time == -(2**63)
