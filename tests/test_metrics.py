"""Tests for metric CRUD helpers and their consistency rules with ``jrm``."""

import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DB_URL", "sqlite://")

from intake_api.core.errors import DuplicateMetricError, IntakeNotFoundError, MetricNotFoundError
from intake_api.core.metric_fields import METRIC_FIELDS
from intake_api.crud import metrics as metrics_crud
from intake_api.crud.intakes import create_intake, get_intake, list_data
from intake_api.crud.metrics import (
    CREATE_WARNING,
    UPDATE_WARNING,
    create_metric,
    delete_metric,
    get_metric,
    update_metric,
)
from intake_api.db.migrate import run_migrations
from intake_api.models.metric import Metric


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    run_migrations(engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def intake(db_session):
    create_intake(db_session, {"intake_id": "ENT-1", "intake_name": "Claims portal", "status": "New"})
    return "ENT-1"


def _zeros(**overrides):
    values = {field.attribute: 0 for field in METRIC_FIELDS}
    values["intake_name"] = "Claims portal"
    values.update(overrides)
    return values


def _stored(db_session, intake_id="ENT-1"):
    return next(row for row in list_data(db_session)["metrics"] if row["Intake ID"] == intake_id)


def _count(db_session, intake_id="ENT-1"):
    stmt = select(func.count()).select_from(Metric).where(Metric.intake_id == intake_id)
    return db_session.execute(stmt).scalar_one()


def _fail_propagation(*args, **kwargs):
    raise OperationalError("UPDATE jrm", {}, Exception("database is locked"))


def test_create_metric_normalizes_id_and_stamps_intake(db_session, intake):
    outcome = create_metric(db_session, "1", _zeros(contingency=10), approved_date="2025-07-10")

    assert outcome.intake_id == "ENT-1"
    assert outcome.row_id == 1
    assert outcome.warning is None
    assert outcome.approved_date_propagated

    row = _stored(db_session)
    assert row["Contingency"] == 10
    assert row["AO/TO C%"] == 0
    assert row["Intake Name"] == "Claims portal"
    assert get_intake(db_session, "ENT-1").approved_date == "2025-07-10"


def test_create_metric_requires_existing_intake(db_session):
    with pytest.raises(IntakeNotFoundError) as excinfo:
        create_metric(db_session, "ENT-77", _zeros())
    assert str(excinfo.value) == "Intake ID ENT-77 does not exist"
    assert _count(db_session, "ENT-77") == 0


def test_second_create_for_same_intake_conflicts(db_session, intake):
    create_metric(db_session, "ENT-1", _zeros())
    with pytest.raises(DuplicateMetricError) as excinfo:
        create_metric(db_session, " ent-1 ", _zeros(contingency=99))
    assert str(excinfo.value) == "Metrics for ENT-1 already exist"
    assert _count(db_session) == 1
    assert _stored(db_session)["Contingency"] == 0


def test_insert_race_is_reported_as_conflict(db_session, intake, monkeypatch):
    create_metric(db_session, "ENT-1", _zeros())
    # The duplicate check misses the row, as it would for a racing request;
    # the primary key rejects the insert and the re-check finds the winner.
    calls = iter([False, True])
    monkeypatch.setattr(metrics_crud, "metric_exists", lambda db, intake_id: next(calls))
    with pytest.raises(DuplicateMetricError):
        create_metric(db_session, "ENT-1", _zeros())
    assert _count(db_session) == 1


def test_create_keeps_metric_when_propagation_fails(db_session, intake, monkeypatch):
    monkeypatch.setattr(metrics_crud, "set_approved_date", _fail_propagation)

    outcome = create_metric(db_session, "ENT-1", _zeros(), approved_date="2025-07-10")

    assert outcome.warning == CREATE_WARNING
    assert not outcome.approved_date_propagated
    assert _count(db_session) == 1
    assert get_intake(db_session, "ENT-1").approved_date is None


def test_update_metric_merges_only_supplied_keys(db_session, intake):
    create_metric(db_session, "ENT-1", _zeros(pmo_tc=4))
    before = _stored(db_session)

    outcome = update_metric(db_session, "ENT-1", {"contingency": 50, "etQAEPercent": None})

    assert outcome.changes == 1
    after = _stored(db_session)
    assert after["Contingency"] == 50
    assert after["ET-QA E%"] is None
    unchanged = {k: v for k, v in after.items() if k not in ("Contingency", "ET-QA E%")}
    assert unchanged == {k: v for k, v in before.items() if k not in ("Contingency", "ET-QA E%")}


def test_empty_update_still_rewrites_and_keeps_values(db_session, intake):
    create_metric(db_session, "ENT-1", _zeros(lob_sub_total=1234.5, et_dev_tc="TBD"))
    before = _stored(db_session)

    outcome = update_metric(db_session, "ent-1", {})

    assert outcome.changes == 1
    assert outcome.approved_date is None
    assert _stored(db_session) == before


def test_update_with_only_approved_date_touches_intake(db_session, intake):
    create_metric(db_session, "ENT-1", _zeros(), approved_date="2025-01-01")
    before = _stored(db_session)

    outcome = update_metric(db_session, "1", {"approvedDate": "2025-08-15", "unknownKey": 3})

    assert outcome.approved_date_propagated
    assert outcome.approved_date == "2025-08-15"
    assert _stored(db_session) == before
    assert get_intake(db_session, "ENT-1").approved_date == "2025-08-15"


def test_update_warns_when_propagation_fails(db_session, intake, monkeypatch):
    create_metric(db_session, "ENT-1", _zeros())
    monkeypatch.setattr(metrics_crud, "set_approved_date", _fail_propagation)

    outcome = update_metric(db_session, "ENT-1", {"contingency": 5, "approvedDate": "2025-09-01"})

    assert outcome.warning == UPDATE_WARNING
    assert _stored(db_session)["Contingency"] == 5


def test_update_missing_metric_is_not_found(db_session, intake):
    with pytest.raises(MetricNotFoundError) as excinfo:
        update_metric(db_session, "1", {"contingency": 1})
    assert str(excinfo.value) == "Metrics for ENT-1 not found"


def test_delete_metric_normalizes_and_reports_missing(db_session, intake):
    create_metric(db_session, "ENT-1", _zeros())

    assert delete_metric(db_session, "1") == "ENT-1"
    assert get_metric(db_session, "ENT-1") is None
    with pytest.raises(MetricNotFoundError):
        delete_metric(db_session, "ENT-1")
    # The intake itself is untouched.
    assert get_intake(db_session, "ENT-1") is not None
