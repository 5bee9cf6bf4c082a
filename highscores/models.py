"""
Record types and submission payload validation.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping

from .errors import ValidationError

# Range of a stored INTEGER column
TIME_MIN = -(2**63)
TIME_MAX = 2**63 - 1


@dataclass(frozen=True)
class PlayerRecord:
    """
    A single score entry.

    Used both for the best score per identity (``players``) and for the
    append-only submission history (``results``), which share one shape.
    """

    name: str
    best_time: int
    created_at: str = ""
    country: str = ""
    region: str = ""
    city: str = ""
    city_lat_long: str = ""
    source_ip: str = ""

    @property
    def identity_key(self) -> str:
        # name + IP, no separator: same name behind different IPs ranks twice
        return self.name + self.source_ip

    def stamped(self, created_at: str) -> "PlayerRecord":
        return replace(self, created_at=created_at)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the JSON wire form.

        @return: Dictionary with camelCase keys
        """
        return {
            "name": self.name,
            "bestTime": self.best_time,
            "createdAt": self.created_at,
            "country": self.country,
            "region": self.region,
            "city": self.city,
            "cityLatLong": self.city_lat_long,
            "sourceIP": self.source_ip,
        }


# Submissions are stored with the same fields as player records.
SubmissionRecord = PlayerRecord


@dataclass(frozen=True)
class ScoreSubmission:
    """Validated body of a ``POST /`` request."""

    name: str
    time: int

    @classmethod
    def from_payload(
        cls,
        payload: Any,
    ) -> "ScoreSubmission":
        """
        Validate a decoded JSON body.

        Zero values count as missing: an empty name or a time of 0 is
        rejected the same way as an absent field.

        @param payload: Decoded JSON value from the request body
        @return: ScoreSubmission with the validated fields
        @raise ValidationError: If the body is not an object or a field is invalid
        """
        if not isinstance(payload, Mapping):
            raise ValidationError({"body": "Expected a JSON object"}, status=400)

        errors: Dict[str, str] = {}

        name = payload.get("name")
        if name is None or name == "":
            errors["name"] = "Required"
        elif not isinstance(name, str):
            errors["name"] = "Must be a string"

        time = payload.get("time")
        if isinstance(time, bool) or (
            time is not None
            and (not isinstance(time, int) or not TIME_MIN <= time <= TIME_MAX)
        ):
            errors["time"] = "Must be an integer"
        elif not time:
            errors["time"] = "Required"

        if errors:
            raise ValidationError(errors)

        return cls(name=name, time=time)

    def to_record(
        self,
        source_ip: str = "",
        country: str = "",
        region: str = "",
        city: str = "",
        city_lat_long: str = "",
    ) -> PlayerRecord:
        """
        Enrich the submission with request metadata.

        @param source_ip: Peer IP address without the port
        @return: PlayerRecord ready to be stored (created_at is set by the store)
        """
        return PlayerRecord(
            name=self.name,
            best_time=self.time,
            country=country,
            region=region,
            city=city,
            city_lat_long=city_lat_long,
            source_ip=source_ip,
        )
