"""Tests for gridillusion.storage.job_ledger — SQLite job tracking."""

from __future__ import annotations

import pytest

from gridillusion.core.errors import NotFound
from gridillusion.core.pipeline import RunStatus
from gridillusion.storage.job_ledger import JobLedger


class TestCreateAndGet:
    def test_new_job_is_pending(self, ledger):
        job_id = ledger.create_job(["a", "b"], "twitter-grid")
        job = ledger.get_job(job_id)
        assert job["status"] == "pending"
        assert job["profile"] == "twitter-grid"
        assert job["raw_files"] == ["a", "b"]
        assert job["processed_files"] == []
        assert job["completed_at"] is None

    def test_explicit_job_id(self, ledger):
        assert ledger.create_job([], "custom-grid", job_id="fixed") == "fixed"
        assert ledger.get_job("fixed")["id"] == "fixed"

    def test_unknown_job_is_none(self, ledger):
        assert ledger.get_job("missing") is None

    def test_persists_across_instances(self, ledger):
        job_id = ledger.create_job(["a"], "twitter-grid")
        reopened = JobLedger(ledger.db_path)
        assert reopened.get_job(job_id)["raw_files"] == ["a"]

    def test_list_jobs_newest_first(self, ledger):
        first = ledger.create_job([], "twitter-grid")
        second = ledger.create_job([], "twitter-grid")
        assert [job["id"] for job in ledger.list_jobs()] == [second, first]
        assert len(ledger.list_jobs(limit=1)) == 1


class TestStatusTransitions:
    def test_completed_stamps_completion_time(self, ledger):
        job_id = ledger.create_job([], "twitter-grid")
        ledger.set_status(job_id, RunStatus.PROCESSING)
        assert ledger.get_job(job_id)["completed_at"] is None

        ledger.set_status(job_id, RunStatus.COMPLETED)
        job = ledger.get_job(job_id)
        assert job["status"] == "completed"
        assert job["completed_at"] is not None

    def test_restarting_clears_completion_time(self, ledger):
        job_id = ledger.create_job([], "twitter-grid")
        ledger.set_status(job_id, RunStatus.COMPLETED)
        ledger.set_status(job_id, RunStatus.PROCESSING)
        assert ledger.get_job(job_id)["completed_at"] is None

    def test_accepts_status_strings(self, ledger):
        job_id = ledger.create_job([], "twitter-grid")
        ledger.set_status(job_id, "failed")
        assert ledger.get_job(job_id)["status"] == "failed"

    def test_set_result(self, ledger):
        job_id = ledger.create_job([], "twitter-grid")
        ledger.set_result(job_id, ["x/result-tl.jpg"])
        assert ledger.get_job(job_id)["processed_files"] == ["x/result-tl.jpg"]

    def test_set_profile(self, ledger):
        job_id = ledger.create_job([], "twitter-grid")
        ledger.set_profile(job_id, "twitter-grid-native")
        assert ledger.get_job(job_id)["profile"] == "twitter-grid-native"

    def test_unknown_job_raises(self, ledger):
        with pytest.raises(NotFound):
            ledger.set_status("missing", RunStatus.PROCESSING)
        with pytest.raises(NotFound):
            ledger.set_result("missing", [])
        with pytest.raises(NotFound):
            ledger.set_profile("missing", "custom-grid")
