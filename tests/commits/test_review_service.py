"""Tests for the review workflow: stage, decide, process."""

import pytest

from commits import CommitStoreError, InvalidTransitionError
from shared_types import ActionType, BatchType, CommitStatus, ExtractionMode


def _approve_all(service, commits):
    for c in commits:
        service.set_status("u1", c.id, CommitStatus.APPROVED)


class TestStaging:
    def test_auto_mode_stages_every_action(self, service, sample_text):
        outcome = service.analyze("u1", sample_text)
        assert outcome.batch is not None
        assert outcome.batch.batch_title == "Conversation Session"
        assert len(outcome.commits) == len(outcome.analysis.actions)
        assert outcome.batch.pending_commits == len(outcome.commits)
        assert all(c.status == CommitStatus.PENDING for c in outcome.commits)

    def test_manual_mode_stages_nothing(self, service, commit_store, sample_text):
        outcome = service.analyze("u1", sample_text, mode=ExtractionMode.MANUAL)
        assert outcome.analysis.actions
        assert outcome.batch is None
        assert outcome.commits == []
        assert commit_store.list_batches("u1") == []

    def test_confirm_stages(self, service):
        batch, staged = service.confirm("u1", "I know Python", batch_title="Voice note",
                                        batch_type=BatchType.VOICE_SESSION)
        assert batch.batch_title == "Voice note"
        assert batch.batch_type == BatchType.VOICE_SESSION
        assert [c.extraction_type for c in staged] == [ActionType.SKILL]

    def test_target_types_filter(self, service, sample_text):
        outcome = service.analyze("u1", sample_text, target_types=["company"])
        assert [c.extraction_type for c in outcome.commits] == [ActionType.COMPANY]

    def test_nothing_extracted_creates_no_batch(self, service, commit_store):
        outcome = service.analyze("u1", "The weather was lovely.")
        assert outcome.batch is None
        assert commit_store.list_batches("u1") == []

    def test_existing_batch_is_reused(self, service, commit_store):
        batch = commit_store.create_batch("u1", "Ongoing")
        service.confirm("u1", "I know Python", batch_id=batch.id)
        updated, _ = service.confirm("u1", "I know Rust", batch_id=batch.id)
        assert updated.id == batch.id
        assert updated.total_commits == 2

    def test_commit_fields(self, service):
        _, (commit,) = service.confirm("u1", "I have 5 years of experience with Python")
        assert commit.ai_summary == "Add skill: Python (intermediate level, 5+ years)"
        assert commit.target_layer == "surface"
        assert 0.7 <= commit.confidence <= 0.95
        assert "Python" in commit.original_text
        assert "commitment_insight" not in commit.extracted_data


class TestReview:
    def test_cannot_set_committed_directly(self, service):
        _, (commit,) = service.confirm("u1", "I know Python")
        with pytest.raises(InvalidTransitionError):
            service.set_status("u1", commit.id, CommitStatus.COMMITTED)

    def test_rejected_is_final(self, service):
        _, (commit,) = service.confirm("u1", "I know Python")
        service.set_status("u1", commit.id, CommitStatus.REJECTED)
        with pytest.raises(InvalidTransitionError):
            service.set_status("u1", commit.id, CommitStatus.APPROVED)

    def test_invalid_edits_rejected(self, service, commit_store):
        _, (commit,) = service.confirm("u1", "I know Python")
        with pytest.raises(ValueError):
            service.set_status(
                "u1", commit.id, CommitStatus.APPROVED, suggested_edits={"proficiency": "godlike"}
            )
        assert commit_store.get_commit("u1", commit.id).status == CommitStatus.PENDING


class TestProcessing:
    def test_approved_commit_is_committed_and_broadcast(self, service, profile_store, publisher):
        _, staged = service.confirm("u1", "I'm skilled in JavaScript and React")
        _approve_all(service, staged)

        report = service.process_approved("u1")
        assert sorted(report.committed) == sorted(c.id for c in staged)
        assert {s["name"] for s in profile_store.get_profile("u1")["skills"]} == {"JavaScript", "React"}
        for c in staged:
            assert service.commits.get_commit("u1", c.id).status == CommitStatus.COMMITTED
        assert publisher.types("u1") == [
            "node_added", "relationship_added", "conversation_update",
        ] * 2

    def test_pending_and_rejected_are_skipped(self, service, profile_store):
        _, (a, b) = service.confirm("u1", "I'm skilled in Go and Rust")
        service.set_status("u1", b.id, CommitStatus.REJECTED)
        report = service.process_approved("u1", commit_ids=[a.id, b.id, "missing"])
        assert report.committed == []
        assert report.skipped == [a.id, b.id, "missing"]
        assert profile_store.get_profile("u1")["skills"] == []

    def test_duplicate_stays_approved(self, service, publisher):
        _, (first,) = service.confirm("u1", "I work at Google")
        _approve_all(service, [first])
        service.process_approved("u1")

        _, (second,) = service.confirm("u1", "I worked at Google")
        _approve_all(service, [second])
        events_before = len(publisher.events)
        report = service.process_approved("u1", commit_ids=[second.id])

        assert report.duplicates == [second.id]
        assert report.results[0]["message"] == "Work experience already exists"
        assert service.commits.get_commit("u1", second.id).status == CommitStatus.APPROVED
        assert len(publisher.events) == events_before

    def test_failure_is_recorded_and_rest_continue(self, service, profile_store):
        _, staged = service.confirm("u1", "Increase revenue to $50k. I know Python.")
        _approve_all(service, staged)
        report = service.process_approved("u1")

        by_type = {c.extraction_type: c.id for c in staged}
        assert report.failed == [by_type[ActionType.KEY_RESULT]]
        assert report.committed == [by_type[ActionType.SKILL]]
        failed = next(r for r in report.results if r["commit_id"] == by_type[ActionType.KEY_RESULT])
        assert failed["error"] == "Objective not found"
        kr = service.commits.get_commit("u1", by_type[ActionType.KEY_RESULT])
        assert kr.status == CommitStatus.APPROVED

    def test_reviewer_edits_are_applied(self, service, profile_store):
        _, (commit,) = service.confirm("u1", "I know Pyhton")
        service.set_status(
            "u1", commit.id, CommitStatus.APPROVED,
            suggested_edits={"entity": "Python", "proficiency": "advanced"},
        )
        service.process_approved("u1")
        skills = profile_store.get_profile("u1")["skills"]
        assert [(s["name"], s["proficiency"]) for s in skills] == [("Python", "advanced")]

    def test_batch_scope(self, service):
        batch_a, (a,) = service.confirm("u1", "I know Python")
        _, (b,) = service.confirm("u1", "I know Rust")
        _approve_all(service, [a, b])
        report = service.process_approved("u1", batch_id=batch_a.id)
        assert report.committed == [a.id]
        assert service.commits.get_commit("u1", b.id).status == CommitStatus.APPROVED

    def test_processing_twice_commits_once(self, service):
        _, (commit,) = service.confirm("u1", "I know Python")
        _approve_all(service, [commit])
        first = service.process_approved("u1", commit_ids=[commit.id])
        second = service.process_approved("u1", commit_ids=[commit.id])
        assert first.committed == [commit.id]
        assert second.skipped == [commit.id]


class TestStoreFailures:
    def _flaky_commit_write(self, monkeypatch, commit_store, fail_ids):
        real = commit_store.transition

        def transition(user_id, commit_id, status, *args, **kwargs):
            if status == CommitStatus.COMMITTED and commit_id in fail_ids:
                fail_ids.discard(commit_id)
                raise CommitStoreError("database is locked")
            return real(user_id, commit_id, status, *args, **kwargs)

        monkeypatch.setattr(commit_store, "transition", transition)

    def test_status_write_failure_does_not_abort_run(self, service, commit_store, profile_store, monkeypatch):
        _, staged = service.confirm("u1", "I'm skilled in JavaScript and React")
        _approve_all(service, staged)
        by_name = {c.to_action().entity: c.id for c in staged}
        self._flaky_commit_write(monkeypatch, commit_store, {by_name["JavaScript"]})

        report = service.process_approved("u1")

        assert report.uncommitted == [by_name["JavaScript"]]
        assert report.committed == [by_name["React"]]
        entry = next(r for r in report.results if r["commit_id"] == by_name["JavaScript"])
        assert entry["outcome"] == "uncommitted"
        assert entry["error"] == "database is locked"
        assert commit_store.get_commit("u1", by_name["JavaScript"]).status == CommitStatus.APPROVED
        assert commit_store.get_commit("u1", by_name["React"]).status == CommitStatus.COMMITTED
        assert {s["name"] for s in profile_store.get_profile("u1")["skills"]} == {"JavaScript", "React"}

    def test_retry_commits_without_duplicate(self, service, commit_store, profile_store, publisher, monkeypatch):
        _, (commit,) = service.confirm("u1", "I know Python")
        _approve_all(service, [commit])
        self._flaky_commit_write(monkeypatch, commit_store, {commit.id})
        first = service.process_approved("u1")
        assert first.uncommitted == [commit.id]
        assert publisher.events == []

        second = service.process_approved("u1")

        assert second.committed == [commit.id]
        assert second.duplicates == []
        assert second.results[0]["outcome"] == "recovered"
        assert commit_store.get_commit("u1", commit.id).status == CommitStatus.COMMITTED
        assert len(profile_store.get_profile("u1")["skills"]) == 1
        assert "relationship_added" in publisher.types("u1")

    def test_read_failure_is_recorded_and_rest_continue(self, service, commit_store, monkeypatch):
        _, (a, b) = service.confirm("u1", "I'm skilled in Go and Rust")
        _approve_all(service, [a, b])
        real = commit_store.get_commit

        def get_commit(user_id, commit_id):
            if commit_id == a.id:
                raise CommitStoreError("disk I/O error")
            return real(user_id, commit_id)

        monkeypatch.setattr(commit_store, "get_commit", get_commit)
        report = service.process_approved("u1", commit_ids=[a.id, b.id])

        assert report.failed == [a.id]
        assert report.committed == [b.id]
        assert report.results[0] == {"commit_id": a.id, "outcome": "failed", "error": "disk I/O error"}
