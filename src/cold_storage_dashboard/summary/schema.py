from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Literal, Optional, Tuple, Type


FieldKind = Literal["int", "str", "decimal", "float", "datetime"]

# Source column names, verbatim from the survey export.
SURVEY_ID = "Survey ID"
STATE = "State"
DISTRICT = "District"
CITY = "City"
QC_STATUS = "QC Status"
QC_DATE = "QC Date"
OBSERVATION_DATE = "Observation Date"
LATITUDE = "Latitude"
LONGITUDE = "Longitude"
FACILITY_TYPE = "What type of cold storage facility is this?"
OWNER_NAME = "Name of the owner / operator"
CONTACT_NUMBER = "Contact number of the owner / operator"
ACTUAL_CAPACITY = "What is the actual capacity of your facility (in metric tonnes)?"
TOTAL_AREA = "What is the total area of this facility (in sq# mt)"
NUMBER_OF_CHAMBERS = "How many chambers does the facility have?"
YEAR_ESTABLISHED = "In which year was the facility established?"
USED_CAPACITY = "How much of the capacity is currently utilised (in metric tonnes)?"
AVAILABLE_CAPACITY = "How much capacity is currently available (in metric tonnes)?"
TEMPERATURE = "What temperature is maintained in the chambers (in degree Celsius)?"

# Candidate date columns, highest precedence first.
EFFECTIVE_DATE_SOURCES: Tuple[str, ...] = (QC_DATE, OBSERVATION_DATE)

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class FieldSpec:
    """One projected output column.

    `name` is both the SQL alias and the record attribute. `sources` are
    coalesced in order. `computed` marks projections that are not a plain
    coalesce ("row_number", "location", "effective_date").

    Optional sources are only referenced when the table is known to carry
    them; otherwise the projection emits `fallback` as a literal.
    """

    name: str
    kind: FieldKind
    sources: Tuple[str, ...] = ()
    fallback: Optional[str] = None
    blank_as_null: bool = False
    as_text: bool = False
    optional: bool = False
    computed: Optional[str] = None


@dataclass(frozen=True)
class RegistryStorageSummary:
    id: int = 0
    survey_id: str = ""
    state: str = ""
    district: str = ""
    city: str = ""
    location: str = ""
    facility_type: str = ""
    owner_name: str = ""
    contact_number: str = ""
    actual_capacity: Decimal = Decimal(0)
    total_area: Decimal = Decimal(0)
    number_of_chambers: int = 0
    year_established: str = ""
    qc_status: str = ""
    qc_date: datetime = field(default_factory=datetime.now)
    latitude: float = 0.0
    longitude: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class UtilizationStorageSummary:
    id: int = 0
    survey_id: str = ""
    state: str = ""
    city: str = ""
    location: str = ""
    total_capacity: Decimal = Decimal(0)
    used_capacity: Decimal = Decimal(0)
    available_capacity: Decimal = Decimal(0)
    temperature: float = 0.0
    status: str = ""
    last_updated: datetime = field(default_factory=datetime.now)
    latitude: float = 0.0
    longitude: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RecordSchema:
    name: str
    record_type: Type[Any]
    fields: Tuple[FieldSpec, ...]

    @property
    def date_field(self) -> str:
        for spec in self.fields:
            if spec.computed == "effective_date":
                return spec.name
        raise LookupError(f"{self.name} has no effective date field")


_ID = FieldSpec(name="id", kind="int", computed="row_number")
_SURVEY_ID = FieldSpec(name="survey_id", kind="str", sources=(SURVEY_ID,), as_text=True)
_STATE = FieldSpec(
    name="state", kind="str", sources=(STATE,), fallback=f"'{UNKNOWN}'", blank_as_null=True
)
_CITY = FieldSpec(
    name="city", kind="str", sources=(CITY,), fallback=f"'{UNKNOWN}'", blank_as_null=True
)
_LOCATION = FieldSpec(name="location", kind="str", computed="location")
_LATITUDE = FieldSpec(name="latitude", kind="float", sources=(LATITUDE,))
_LONGITUDE = FieldSpec(name="longitude", kind="float", sources=(LONGITUDE,))


REGISTRY = RecordSchema(
    name="registry",
    record_type=RegistryStorageSummary,
    fields=(
        _ID,
        _SURVEY_ID,
        _STATE,
        FieldSpec(name="district", kind="str", sources=(DISTRICT, CITY), fallback="''", optional=True),
        _CITY,
        _LOCATION,
        FieldSpec(name="facility_type", kind="str", sources=(FACILITY_TYPE,), fallback="''", optional=True),
        FieldSpec(name="owner_name", kind="str", sources=(OWNER_NAME,), fallback="''", optional=True),
        FieldSpec(
            name="contact_number",
            kind="str",
            sources=(CONTACT_NUMBER,),
            fallback="''",
            as_text=True,
            optional=True,
        ),
        FieldSpec(name="actual_capacity", kind="decimal", sources=(ACTUAL_CAPACITY,)),
        FieldSpec(name="total_area", kind="decimal", sources=(TOTAL_AREA,)),
        FieldSpec(
            name="number_of_chambers", kind="int", sources=(NUMBER_OF_CHAMBERS,), fallback="0", optional=True
        ),
        FieldSpec(
            name="year_established",
            kind="str",
            sources=(YEAR_ESTABLISHED,),
            fallback="''",
            as_text=True,
            optional=True,
        ),
        FieldSpec(name="qc_status", kind="str", sources=(QC_STATUS,), fallback="''"),
        FieldSpec(name="qc_date", kind="datetime", sources=EFFECTIVE_DATE_SOURCES, computed="effective_date"),
        _LATITUDE,
        _LONGITUDE,
    ),
)

UTILIZATION = RecordSchema(
    name="utilization",
    record_type=UtilizationStorageSummary,
    fields=(
        _ID,
        _SURVEY_ID,
        _STATE,
        _CITY,
        _LOCATION,
        FieldSpec(name="total_capacity", kind="decimal", sources=(ACTUAL_CAPACITY,)),
        FieldSpec(name="used_capacity", kind="decimal", sources=(USED_CAPACITY,), optional=True),
        FieldSpec(name="available_capacity", kind="decimal", sources=(AVAILABLE_CAPACITY,), optional=True),
        FieldSpec(name="temperature", kind="float", sources=(TEMPERATURE,), optional=True),
        FieldSpec(name="status", kind="str", sources=(QC_STATUS,), fallback="''"),
        FieldSpec(
            name="last_updated", kind="datetime", sources=EFFECTIVE_DATE_SOURCES, computed="effective_date"
        ),
        _LATITUDE,
        _LONGITUDE,
    ),
)


RECORD_SCHEMAS: Dict[str, RecordSchema] = {
    REGISTRY.name: REGISTRY,
    UTILIZATION.name: UTILIZATION,
}


def get_schema(name: str) -> RecordSchema:
    schema = RECORD_SCHEMAS.get((name or "").strip().lower())
    if schema is None:
        raise ValueError(f"Unknown record schema: {name}")
    return schema
