"""
tests/test_admin_service.py — Audited Admin Mutation Tests
===========================================================
"""

from __future__ import annotations

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from conftest import seed_challenge, seed_entry
from pawprint.database.models import AdminLog, ChallengeEntry, ChallengeVote
from pawprint.engine.errors import InvalidAmount
from pawprint.services import admin_service, xp_service


@pytest.fixture
def engine(db_engine):
    seed_challenge(db_engine, "c1")
    return db_engine


class TestDeleteEntry:
    def test_removes_entry_and_votes(self, engine):
        seed_entry(engine, "e1", votes=3)
        seed_entry(engine, "e2", votes=1)

        assert admin_service.delete_entry(engine, "e1", actor_id="admin-1", reason="spam")

        with Session(engine) as session:
            assert session.get(ChallengeEntry, "e1") is None
            remaining = session.scalars(select(ChallengeVote.entry_id)).all()
        assert remaining == ["e2"]

    def test_entry_with_votes_cannot_be_deleted_alone(self, engine):
        seed_entry(engine, "e1", votes=1)

        with Session(engine) as session:
            with pytest.raises(IntegrityError):
                session.execute(delete(ChallengeEntry).where(ChallengeEntry.id == "e1"))

        assert admin_service.delete_entry(engine, "e1", actor_id="admin-1")

    def test_writes_audit_row(self, engine):
        seed_entry(engine, "e1", votes=2)

        admin_service.delete_entry(engine, "e1", actor_id="admin-1", reason="spam")

        with Session(engine) as session:
            log = session.scalar(select(AdminLog))
            assert log.actor_id == "admin-1"
            assert log.action_type == "DELETE"
            assert log.target_table == "challenge_entries"
            assert log.target_id == "e1"
            assert log.before_snapshot["author_id"] == "author-e1"
            assert log.after_snapshot == {"votes_removed": 2}
            assert log.reason == "spam"

    def test_missing_entry(self, engine):
        assert admin_service.delete_entry(engine, "nope", actor_id="admin-1") is False

        with Session(engine) as session:
            assert session.scalar(select(func.count()).select_from(AdminLog)) == 0


class TestAwardManual:
    def test_appends_ledger_and_audit(self, engine):
        total = admin_service.award_manual(
            engine, user_id="u1", amount=25, actor_id="admin-1", reason="contest prize",
        )

        assert total == 25
        assert xp_service.xp_history(engine, "u1")[0]["reason"] == "manual:admin-1"

        entries = admin_service.get_audit_log(engine)
        assert len(entries) == 1
        assert entries[0]["action_type"] == "MANUAL_AWARD"
        assert entries[0]["after_snapshot"]["amount"] == 25
        assert entries[0]["reason"] == "contest prize"

    def test_rejects_bad_amount_without_audit(self, engine):
        with pytest.raises(InvalidAmount):
            admin_service.award_manual(engine, user_id="u1", amount=0, actor_id="admin-1")

        assert admin_service.get_audit_log(engine) == []
        assert xp_service.total_xp(engine, "u1") == 0


class TestAuditLog:
    def test_newest_first(self, engine):
        seed_entry(engine, "e1")
        seed_entry(engine, "e2")
        admin_service.delete_entry(engine, "e1", actor_id="admin-1")
        admin_service.delete_entry(engine, "e2", actor_id="admin-1")

        entries = admin_service.get_audit_log(engine, limit=1)

        assert [e["target_id"] for e in entries] == ["e2"]
