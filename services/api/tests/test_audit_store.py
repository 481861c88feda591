"""Tests for api.audit.store.SqlAuditRecordStore."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError

from api.audit.store import SqlAuditRecordStore
from dka_common.db.orm_models import AuditRecordORM
from dka_common.models.audit import AuditRecord
from dka_common.models.episode import AuditAmendment


def _record(**overrides) -> AuditRecord:
    defaults = dict(
        audit_id="K7PQ2MZ9XW",
        patient_hash="a" * 64,
        calculation_inputs={"pH": 7.12, "ketones": None},
        calculation_results={"severity": "moderate"},
        imd_decile=2,
        client_ip="198.51.100.4",
    )
    defaults.update(overrides)
    return AuditRecord(**defaults)


def _scalar_result(value) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


class TestLookup:
    async def test_returns_model_for_row(self, mock_db_session, mock_db_session_factory):
        row = AuditRecordORM(
            audit_id="K7PQ2MZ9XW",
            patient_hash="b" * 64,
            calculation_inputs={"pH": 7.2},
            calculation_results={"severity": "mild"},
            preventable_factors=None,
            imd_decile=7,
            client_ip=None,
            created_at=datetime(2026, 10, 1, tzinfo=timezone.utc),
            amended_at=None,
            amendment_count=0,
        )
        mock_db_session.execute.return_value = _scalar_result(row)

        record = await SqlAuditRecordStore(mock_db_session_factory).lookup("K7PQ2MZ9XW")

        assert isinstance(record, AuditRecord)
        assert record.patient_hash == "b" * 64
        assert record.imd_decile == 7

    async def test_missing_row_returns_none(self, mock_db_session, mock_db_session_factory):
        mock_db_session.execute.return_value = _scalar_result(None)
        assert await SqlAuditRecordStore(mock_db_session_factory).lookup("MISSING234") is None


class TestExists:
    async def test_true_when_row_found(self, mock_db_session, mock_db_session_factory):
        mock_db_session.execute.return_value = _scalar_result("K7PQ2MZ9XW")
        assert await SqlAuditRecordStore(mock_db_session_factory).exists("K7PQ2MZ9XW") is True

    async def test_false_when_absent(self, mock_db_session, mock_db_session_factory):
        mock_db_session.execute.return_value = _scalar_result(None)
        assert await SqlAuditRecordStore(mock_db_session_factory).exists("K7PQ2MZ9XW") is False


class TestInsert:
    async def test_adds_and_commits(self, mock_db_session, mock_db_session_factory):
        await SqlAuditRecordStore(mock_db_session_factory).insert(_record())

        mock_db_session.add.assert_called_once()
        orm_obj = mock_db_session.add.call_args[0][0]
        assert isinstance(orm_obj, AuditRecordORM)
        assert orm_obj.audit_id == "K7PQ2MZ9XW"
        assert orm_obj.amendment_count == 0
        mock_db_session.commit.assert_awaited_once()
        mock_db_session.close.assert_awaited_once()

    async def test_rolls_back_and_reraises(self, mock_db_session, mock_db_session_factory):
        mock_db_session.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate"))

        with pytest.raises(IntegrityError):
            await SqlAuditRecordStore(mock_db_session_factory).insert(_record())

        mock_db_session.rollback.assert_awaited_once()
        mock_db_session.close.assert_awaited_once()


class TestUpdate:
    async def test_returns_true_when_row_updated(self, mock_db_session, mock_db_session_factory):
        result = MagicMock()
        result.rowcount = 1
        mock_db_session.execute.return_value = result

        updated = await SqlAuditRecordStore(mock_db_session_factory).update(
            "K7PQ2MZ9XW", AuditAmendment(preventable_factors=["missed insulin"]),
        )

        assert updated is True
        mock_db_session.commit.assert_awaited_once()

    async def test_statement_leaves_identity_columns_alone(self, mock_db_session, mock_db_session_factory):
        result = MagicMock()
        result.rowcount = 1
        mock_db_session.execute.return_value = result

        await SqlAuditRecordStore(mock_db_session_factory).update("K7PQ2MZ9XW", AuditAmendment())

        stmt = mock_db_session.execute.call_args[0][0]
        params = stmt.compile(dialect=postgresql.dialect()).params
        assert {"preventable_factors", "amended_at"} <= set(params)
        assert "patient_hash" not in params
        assert "audit_id" not in params
        assert "calculation_inputs" not in params

    async def test_returns_false_when_no_row(self, mock_db_session, mock_db_session_factory):
        result = MagicMock()
        result.rowcount = 0
        mock_db_session.execute.return_value = result

        assert await SqlAuditRecordStore(mock_db_session_factory).update("NOPE234567", AuditAmendment()) is False

    async def test_rolls_back_on_failure(self, mock_db_session, mock_db_session_factory):
        mock_db_session.execute.side_effect = RuntimeError("connection reset")

        with pytest.raises(RuntimeError):
            await SqlAuditRecordStore(mock_db_session_factory).update("K7PQ2MZ9XW", AuditAmendment())

        mock_db_session.rollback.assert_awaited_once()
        mock_db_session.commit.assert_not_awaited()


class TestImdDecile:
    async def test_returns_decile(self, mock_db_session, mock_db_session_factory):
        mock_db_session.execute.return_value = _scalar_result(4)
        assert await SqlAuditRecordStore(mock_db_session_factory).imd_decile_for_lsoa("E01000001") == 4
