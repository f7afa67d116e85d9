"""Record schemas stored in the world state.

Pure data model: no I/O. Each schema is a dataclass whose fields carry
their on-ledger JSON name in ``metadata["json"]``. Decoding follows the
ledger's unmarshal rules: missing fields keep their zero value, unknown
fields are ignored, and a field of the wrong JSON type is an error.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from typing import Any, TypeVar

from ledgerstore.errors import DeserializationError

R = TypeVar("R", bound="Record")

# Accepted JSON value types per annotated field type.
_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "str": (str,),
    "int": (int,),
    "float": (int, float),
    "bool": (bool,),
}


def json_field(name: str, default: Any = "") -> Any:
    """Dataclass field stored under ``name`` in the serialized record."""
    return field(default=default, metadata={"json": name})


def _type_name(annotation: Any) -> str:
    return annotation if isinstance(annotation, str) else annotation.__name__


def _record_key(data: dict[str, Any]) -> str | None:
    key = data.get("id", data.get("ID"))
    return key if isinstance(key, str) else None


# ---------------------------------------------------------------------------
# Record base
# ---------------------------------------------------------------------------


class Record:
    """Serialize/deserialize capability shared by every record schema."""

    id: str

    @property
    def key(self) -> str:
        return self.id

    def to_dict(self) -> dict[str, Any]:
        return {f.metadata["json"]: getattr(self, f.name) for f in fields(self)}

    def to_json(self) -> str:
        """Compact JSON in declared field order."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls: type[R], data: Any) -> R:
        if not isinstance(data, dict):
            raise DeserializationError(
                f"{cls.__name__} must be a JSON object, got {type(data).__name__}"
            )

        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            name = f.metadata["json"]
            value = data.get(name)
            if value is None:
                continue
            type_name = _type_name(f.type)
            allowed = _JSON_TYPES[type_name]
            # bool is an int subclass; JSON true is never a number.
            if (isinstance(value, bool) and type_name != "bool") or not isinstance(value, allowed):
                raise DeserializationError(
                    f"{cls.__name__}.{name}: expected {type_name}, "
                    f"got {type(value).__name__}",
                    key=_record_key(data),
                )
            kwargs[f.name] = float(value) if type_name == "float" else value
        return cls(**kwargs)

    @classmethod
    def from_json(cls: type[R], data: str | bytes) -> R:
        try:
            obj = json.loads(data)
        except (json.JSONDecodeError, TypeError, UnicodeDecodeError) as e:
            raise DeserializationError(f"{cls.__name__} is not valid JSON: {e}") from e
        return cls.from_dict(obj)


# ---------------------------------------------------------------------------
# Asset
# ---------------------------------------------------------------------------


@dataclass
class Asset(Record):
    """Basic transferable asset."""

    id: str = json_field("ID")
    color: str = json_field("Color")
    size: int = json_field("Size", 0)
    owner: str = json_field("Owner")
    appraised_value: int = json_field("AppraisedValue", 0)


# ---------------------------------------------------------------------------
# LoanApplication
# ---------------------------------------------------------------------------


@dataclass
class LoanApplication(Record):
    id: str = json_field("id")
    applicant: str = json_field("applicant")
    amount: int = json_field("amount", 0)
    term: int = json_field("term", 0)  # months
    interest_rate: float = json_field("interestRate", 0.0)
    status: str = json_field("status")


# ---------------------------------------------------------------------------
# Pokemon
# ---------------------------------------------------------------------------


@dataclass
class Pokemon(Record):
    id: str = json_field("id")
    name: str = json_field("name")
    type: str = json_field("type")
    power: int = json_field("power", 0)
    trainer: str = json_field("trainer")
    evolved: bool = json_field("evolved", False)
    location: str = json_field("location")


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


@dataclass
class Identity(Record):
    """Personal identity details. Every field besides ``id`` is optional text."""

    id: str = json_field("id")
    title: str = json_field("title")
    first_name: str = json_field("firstName")
    middle_name: str = json_field("middleName")
    last_name: str = json_field("lastName")
    name_on_card: str = json_field("nameOnCard")
    eleven_char_name: str = json_field("elevenCharName")
    cnic: str = json_field("cnic")
    cnic_issue_date: str = json_field("cnicIssueDate")
    cnic_expiry_date: str = json_field("cnicExpiryDate")
    old_nic: str = json_field("oldNIC")
    passport_number: str = json_field("passportNumber")
    nationality: str = json_field("nationality")
    passport_issue_date: str = json_field("passportIssueDate")
    passport_expiry_date: str = json_field("passportExpiryDate")
    date_of_birth: str = json_field("dateOfBirth")
    place_of_birth: str = json_field("placeOfBirth")
    gender: str = json_field("gender")
    father_or_husband_name: str = json_field("fatherOrHusbandName")
    mother_maiden_name: str = json_field("motherMaidenName")
    marital_status: str = json_field("maritalStatus")
    education: str = json_field("education")
    political_affiliation: str = json_field("politicalAffiliation")
    tax_payer: str = json_field("taxPayer")
    address: str = json_field("address")
    landline: str = json_field("landline")
    postal_code: str = json_field("postalCode")
    no_of_dependents: str = json_field("noOfDependents")
    ntn: str = json_field("ntn")
    residence_type: str = json_field("residenceType")
    apartment_or_house: str = json_field("apartmentOrHouse")
    residence_nature: str = json_field("residenceNature")
    mobile_number: str = json_field("mobileNumber")
