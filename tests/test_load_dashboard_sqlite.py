import sqlite3
from datetime import date, datetime
from decimal import Decimal

import pytest

from cold_storage_dashboard.db import open_conn
from cold_storage_dashboard.summary import FilterCriteria, load_dashboard
from cold_storage_dashboard.summary import schema as s


NOW = datetime(2025, 1, 2, 3, 4, 5)


def _facility(state, city, **extra):
    row = {s.SURVEY_ID: f"CS-{state}-{city}", s.STATE: state, s.CITY: city}
    row.update(extra)
    return row


def _load(path, criteria=None, schema="registry"):
    with open_conn(str(path)) as conn:
        return load_dashboard(conn, criteria, schema, now=NOW)


def test_three_rows_sorted_by_state_then_city(make_db):
    path = make_db(
        [
            _facility("MH", "Pune"),
            _facility("MH", "Nagpur"),
            _facility("UP", "Lucknow"),
        ]
    )
    result = _load(path)

    assert result.facets.states == ("MH", "UP")
    assert result.facets.cities == ("Lucknow", "Nagpur", "Pune")
    assert [(r.state, r.city) for r in result.records] == [
        ("MH", "Nagpur"),
        ("MH", "Pune"),
        ("UP", "Lucknow"),
    ]
    assert [r.id for r in result.records] == [1, 2, 3]


def test_state_and_city_filters(make_db):
    path = make_db(
        [
            _facility("Gujarat", "Rajkot"),
            _facility("Gujarat", "Ahmedabad"),
            _facility("Punjab", "Ludhiana"),
        ]
    )

    gujarat = _load(path, FilterCriteria(state="Gujarat"))
    assert [r.city for r in gujarat.records] == ["Ahmedabad", "Rajkot"]
    assert gujarat.facets.states == ("Gujarat",)

    rajkot = _load(path, FilterCriteria(state="Gujarat", city="Rajkot"))
    assert [r.city for r in rajkot.records] == ["Rajkot"]

    nothing = _load(path, FilterCriteria(state="gujarat"))
    assert nothing.records == ()


def test_blank_state_reported_as_unknown_and_filterable(make_db):
    path = make_db(
        [
            _facility("", "Agra"),
            _facility(None, "Hooghly"),
            _facility("   ", None),
            _facility("UP", "Lucknow"),
        ]
    )
    result = _load(path)
    assert result.facets.states == ("UP", "Unknown")
    assert "Unknown" in result.facets.cities

    unknown = _load(path, FilterCriteria(state="Unknown"))
    assert len(unknown.records) == 3
    assert all(r.state == "Unknown" for r in unknown.records)


def test_date_range_uses_qc_date_then_observation_date(make_db):
    path = make_db(
        [
            _facility("MH", "A", **{s.QC_DATE: "2024-02-10", s.OBSERVATION_DATE: "2023-01-01"}),
            _facility("MH", "B", **{s.QC_DATE: None, s.OBSERVATION_DATE: "2024-02-20"}),
            _facility("MH", "C", **{s.QC_DATE: "2024-05-01", s.OBSERVATION_DATE: "2024-02-15"}),
            _facility("MH", "D", **{s.QC_DATE: None, s.OBSERVATION_DATE: None}),
        ]
    )
    result = _load(path, FilterCriteria(start_date=date(2024, 2, 1), end_date=date(2024, 2, 28)))

    assert [r.city for r in result.records] == ["A", "B"]
    assert [r.qc_date for r in result.records] == [datetime(2024, 2, 10), datetime(2024, 2, 20)]

    everything = _load(path)
    undated = [r for r in everything.records if r.city == "D"][0]
    assert undated.qc_date == NOW


def test_open_ended_date_bounds(make_db):
    path = make_db(
        [
            _facility("MH", "A", **{s.QC_DATE: "2024-01-15"}),
            _facility("MH", "B", **{s.QC_DATE: "2024-06-15"}),
        ]
    )
    assert [r.city for r in _load(path, FilterCriteria(start_date=date(2024, 3, 1))).records] == ["B"]
    assert [r.city for r in _load(path, FilterCriteria(end_date=date(2024, 3, 1))).records] == ["A"]


def test_day_first_dates_filter_by_the_date_they_report(make_db):
    path = make_db(
        [
            _facility("MH", "A", **{s.QC_DATE: "15/02/2024"}),
            _facility("MH", "B", **{s.QC_DATE: "01-07-2024 09:30"}),
            _facility("MH", "C", **{s.QC_DATE: "2024-03-05"}),
        ]
    )

    february = _load(path, FilterCriteria(start_date=date(2024, 2, 1), end_date=date(2024, 2, 28)))
    assert [r.city for r in february.records] == ["A"]
    assert february.records[0].qc_date == datetime(2024, 2, 15)

    summer = _load(path, FilterCriteria(start_date=date(2024, 6, 1)))
    assert [r.city for r in summer.records] == ["B"]
    assert summer.records[0].qc_date == datetime(2024, 7, 1, 9, 30)


def test_blank_qc_date_falls_back_to_observation_date(make_db):
    path = make_db(
        [
            _facility("MH", "A", **{s.QC_DATE: "", s.OBSERVATION_DATE: "2024-02-10"}),
            _facility("MH", "B", **{s.QC_DATE: "   ", s.OBSERVATION_DATE: "2023-02-10"}),
        ]
    )

    result = _load(path, FilterCriteria(start_date=date(2024, 2, 1), end_date=date(2024, 2, 28)))
    assert [r.city for r in result.records] == ["A"]
    assert result.records[0].qc_date == datetime(2024, 2, 10)


def test_ids_follow_insertion_order_within_a_state_and_city(make_db):
    path = make_db([{s.SURVEY_ID: f"CS-{i}", s.STATE: "MH", s.CITY: "Pune"} for i in range(1, 6)])

    result = _load(path)
    assert [r.survey_id for r in result.records] == ["CS-1", "CS-2", "CS-3", "CS-4", "CS-5"]
    assert [r.id for r in result.records] == [1, 2, 3, 4, 5]


def test_mixed_storage_types_are_coerced(make_db):
    path = make_db(
        [
            _facility(
                "Maharashtra",
                "Pune",
                **{
                    s.ACTUAL_CAPACITY: "1,200",
                    s.TOTAL_AREA: "n/a",
                    s.CONTACT_NUMBER: 9876543210,
                    s.NUMBER_OF_CHAMBERS: "4",
                    s.YEAR_ESTABLISHED: 1998,
                    s.LATITUDE: 18.52,
                    s.LONGITUDE: "73.85",
                    s.QC_STATUS: "Approved",
                    s.FACILITY_TYPE: "Multi commodity",
                },
            )
        ]
    )
    record = _load(path).records[0]

    assert record.actual_capacity == Decimal("1200")
    assert record.total_area == Decimal(0)
    assert record.contact_number == "9876543210"
    assert record.number_of_chambers == 4
    assert record.year_established == "1998"
    assert record.latitude == pytest.approx(18.52)
    assert record.longitude == pytest.approx(73.85)
    assert record.qc_status == "Approved"
    assert record.facility_type == "Multi commodity"
    assert record.location == "Pune, Maharashtra"
    assert record.district == "Pune"


def test_numeric_survey_id_is_reported_as_text(make_db):
    path = make_db([{s.SURVEY_ID: 10042, s.STATE: "MH", s.CITY: "Pune"}])
    assert _load(path).records[0].survey_id == "10042"


def test_location_skips_missing_parts(make_db):
    path = make_db([_facility("", "Agra"), _facility("UP", None)])
    locations = sorted(r.location for r in _load(path).records)
    assert locations == ["Agra", "UP"]


def test_table_missing_columns_still_renders(make_db):
    path = make_db(
        [{"State": "MH", "City": "Pune"}],
        columns=["State", "City"],
    )
    result = _load(path, FilterCriteria(start_date=date(2024, 1, 1)))
    assert result.records == ()

    result = _load(path)
    record = result.records[0]
    assert (record.state, record.city) == ("MH", "Pune")
    assert record.survey_id == ""
    assert record.actual_capacity == Decimal(0)
    assert record.latitude == 0.0
    assert record.qc_date == NOW


def test_empty_table_is_not_an_error(make_db):
    result = _load(make_db([]))
    assert result.records == ()
    assert result.facets.states == ()
    assert result.facets.cities == ()


def test_missing_table_propagates_storage_error(tmp_path):
    with pytest.raises(sqlite3.OperationalError):
        _load(tmp_path / "empty.sqlite")


def test_utilization_schema_against_sqlite(make_db):
    path = make_db(
        [
            _facility(
                "Punjab",
                "Ludhiana",
                **{
                    s.ACTUAL_CAPACITY: 5000,
                    s.USED_CAPACITY: "3,250.5",
                    s.AVAILABLE_CAPACITY: 1749.5,
                    s.TEMPERATURE: "-18",
                    s.QC_STATUS: "Pending",
                    s.OBSERVATION_DATE: "2024-04-01",
                },
            )
        ]
    )
    result = _load(path, schema="utilization")
    record = result.records[0]

    assert result.schema == "utilization"
    assert record.total_capacity == Decimal(5000)
    assert record.used_capacity == Decimal("3250.5")
    assert record.available_capacity == Decimal("1749.5")
    assert record.temperature == -18.0
    assert record.status == "Pending"
    assert record.last_updated == datetime(2024, 4, 1)


def test_query_debug_logs_sql_without_values(make_db, monkeypatch, caplog):
    from cold_storage_dashboard.feature_flags import reset_flags_cache

    monkeypatch.setenv("CSD_FEATURE_QUERY_DEBUG", "1")
    reset_flags_cache()
    path = make_db([_facility("MH", "Pune")])
    with caplog.at_level("INFO", logger="csd.summary"):
        _load(path, FilterCriteria(state="SecretState"))

    text = "\n".join(r.getMessage() for r in caplog.records)
    assert "summary_query" in text
    assert "dashboard_loaded" in text
    assert "SecretState" not in text
