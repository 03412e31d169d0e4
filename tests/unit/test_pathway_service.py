"""Unit tests for pathway generation and progression with in-memory repositories."""
from datetime import timedelta

import pytest

from learnpath.schemas.goal_schemas import Prerequisite, Skill
from learnpath.schemas.pathway_schemas import PathwayStatus
from learnpath.schemas.profile_schemas import AssessmentResponse, LearnerProfile
from learnpath.services.errors import ConflictError, InvalidStateError, NotFoundError
from learnpath.services.pathway_service import PathwayService
from tests.helpers import (
    NOW,
    InMemoryGoalRepository,
    InMemoryPathwayRepository,
    InMemoryProfileRepository,
    InMemoryQuizAttemptRepository,
    make_assessment,
    make_goal,
)


def _answers(service, pathway, module_index, correct=True):
    questions = service.module_quiz(pathway.id, pathway.user_id, module_index)
    option = "a" if correct else "b"
    return [AssessmentResponse(question_id=q.id, selected_option=option, time_spent=10) for q in questions]


def _complete_module(service, pathway, module_index):
    current = service.get_pathway(pathway.id)
    for r in current.module_progress[module_index].resources:
        service.complete_resource(pathway.id, pathway.user_id, module_index, r.resource_id)
    _, updated = service.submit_quiz(pathway.id, pathway.user_id, module_index, _answers(service, pathway, module_index))
    return updated


def _assert_monotonic_unlock(pathway):
    for i in range(1, len(pathway.module_progress)):
        if not pathway.module_progress[i].locked:
            assert pathway.module_progress[i - 1].completed


@pytest.mark.unit
class TestGeneratePathway:
    def test_initial_state(self, pathway_service, goal):
        pathway = pathway_service.generate_pathway(1, goal.id)
        assert pathway.status == PathwayStatus.ACTIVE
        assert pathway.progress == 0
        assert pathway.current_module == 0
        assert [m.locked for m in pathway.module_progress] == [False, True, True]
        assert all(not m.completed and not m.quiz.completed for m in pathway.module_progress)
        assert [r.resource_id for r in pathway.module_progress[0].resources] == ["m0-r0", "m0-r1"]
        assert pathway.started_at == NOW
        assert pathway.last_accessed_at == NOW
        assert pathway.estimated_completion_date > NOW
        assert all(r.status == "pending" for r in pathway.adaptive_recommendations)

    def test_generate_does_not_store(self, pathway_service, repos, goal):
        pathway_service.generate_pathway(1, goal.id)
        assert repos["pathways"].list_for_user(1) == []

    def test_completion_date_from_schedule(self, pathway_service, goal):
        # intermediate math: 3 modules x 10h = 30h at 10h/week -> 3 weeks
        pathway = pathway_service.generate_pathway(1, goal.id)
        assert pathway.estimated_completion_date == NOW + timedelta(days=21)

    def test_style_recommendation_always_present(self, pathway_service, goal):
        recs = pathway_service.generate_pathway(1, goal.id).adaptive_recommendations
        assert [(r.type, r.priority) for r in recs] == [("resource", "medium")]
        assert "visual" in recs[0].description

    def test_missing_prerequisites_add_review(self, pathway_service, repos):
        hard = make_goal(
            goal_id="hard",
            prerequisites=[Prerequisite(category="math", skills=[Skill(name="calculus", level="expert")])],
        )
        repos["goals"].add(hard)
        recs = pathway_service.generate_pathway(1, "hard").adaptive_recommendations
        assert (recs[0].type, recs[0].priority) == ("review", "high")

    def test_low_retention_adds_practice(self, pathway_service, repos, goal):
        for i, score in enumerate([100, 40]):
            repos["profiles"].append_assessment(1, make_assessment("ml", score, NOW + timedelta(days=i), time_spent=3000))
        recs = pathway_service.generate_pathway(1, goal.id).adaptive_recommendations
        assert ("practice", "high") in [(r.type, r.priority) for r in recs]

    def test_missing_profile(self, pathway_service, goal):
        with pytest.raises(NotFoundError):
            pathway_service.generate_pathway(99, goal.id)

    def test_missing_goal(self, pathway_service):
        with pytest.raises(NotFoundError):
            pathway_service.generate_pathway(1, "nope")


@pytest.mark.unit
class TestStartPathway:
    def test_stores_pathway(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        assert pathway.id
        assert pathway.version == 1
        assert pathway_service.get_pathway(pathway.id, 1) == pathway

    def test_conflict_when_active_exists(self, pathway_service, goal):
        pathway_service.start_pathway(1, goal.id)
        with pytest.raises(ConflictError):
            pathway_service.start_pathway(1, goal.id)

    def test_conflict_when_paused_exists(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        pathway_service.set_status(pathway.id, 1, "pause")
        with pytest.raises(ConflictError):
            pathway_service.start_pathway(1, goal.id)

    def test_allowed_after_completion(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        pathway_service.set_status(pathway.id, 1, "complete")
        assert pathway_service.start_pathway(1, goal.id).id != pathway.id

    def test_other_user_cannot_read(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        with pytest.raises(NotFoundError):
            pathway_service.get_pathway(pathway.id, 2)


@pytest.mark.unit
class TestProgressEvents:
    def test_resource_completion_stamps_time(self, pathway_service, goal, clock):
        pathway = pathway_service.start_pathway(1, goal.id)
        clock.advance(hours=1)
        updated = pathway_service.complete_resource(pathway.id, 1, 0, "m0-r0")
        res = updated.module_progress[0].resources[0]
        assert res.completed and res.completed_at == clock.now
        assert updated.progress == 0
        assert updated.last_accessed_at == clock.now

    def test_uncomplete_resource(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        pathway_service.complete_resource(pathway.id, 1, 0, "m0-r0")
        updated = pathway_service.complete_resource(pathway.id, 1, 0, "m0-r0", completed=False)
        res = updated.module_progress[0].resources[0]
        assert not res.completed and res.completed_at is None

    def test_locked_module_rejected(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        with pytest.raises(InvalidStateError):
            pathway_service.complete_resource(pathway.id, 1, 1, "m1-r0")

    def test_unknown_resource_and_module(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        with pytest.raises(NotFoundError):
            pathway_service.complete_resource(pathway.id, 1, 0, "nope")
        with pytest.raises(NotFoundError):
            pathway_service.complete_resource(pathway.id, 1, 7, "m0-r0")

    def test_module_completion_unlocks_next(self, pathway_service, goal, clock):
        pathway = pathway_service.start_pathway(1, goal.id)
        clock.advance(days=10)
        updated = _complete_module(pathway_service, pathway, 0)
        assert updated.module_progress[0].completed
        assert not updated.module_progress[1].locked
        assert updated.module_progress[2].locked
        assert updated.current_module == 1
        assert updated.progress == 33
        _assert_monotonic_unlock(updated)

    def test_completion_estimate_extrapolates(self, pathway_service, goal, clock):
        pathway = pathway_service.start_pathway(1, goal.id)
        clock.advance(days=10)
        updated = _complete_module(pathway_service, pathway, 0)
        remaining = (updated.estimated_completion_date - clock.now).total_seconds()
        assert remaining == pytest.approx(67 / 33 * 10 * 86400, rel=1e-6)

    def test_quiz_alone_does_not_complete_module(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        _, updated = pathway_service.submit_quiz(pathway.id, 1, 0, _answers(pathway_service, pathway, 0))
        assert updated.module_progress[0].quiz.completed
        assert not updated.module_progress[0].completed
        assert updated.module_progress[1].locked

    def test_failed_quiz_keeps_module_open(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        for rid in ("m0-r0", "m0-r1"):
            pathway_service.complete_resource(pathway.id, 1, 0, rid)
        attempt, updated = pathway_service.submit_quiz(
            pathway.id, 1, 0, _answers(pathway_service, pathway, 0, correct=False)
        )
        assert attempt.score < 70
        assert updated.module_progress[0].quiz.score == attempt.score
        assert not updated.module_progress[0].completed

    def test_progress_consistency(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        for i in range(3):
            updated = _complete_module(pathway_service, pathway, i)
            done = sum(m.completed for m in updated.module_progress)
            assert updated.progress == round(100 * done / 3)
            _assert_monotonic_unlock(updated)

    def test_paused_pathway_accepts_progress(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        pathway_service.set_status(pathway.id, 1, "pause")
        updated = pathway_service.complete_resource(pathway.id, 1, 0, "m0-r0")
        assert updated.status == PathwayStatus.PAUSED
        assert updated.module_progress[0].resources[0].completed


@pytest.mark.unit
class TestPathwayCompletion:
    @pytest.fixture
    def next_goals(self, repos):
        for i in range(4):
            repos["goals"].add(make_goal(goal_id=f"ml-int-{i}", level="intermediate"))
        repos["goals"].add(make_goal(goal_id="ml-adv", level="advanced"))
        repos["goals"].add(make_goal(goal_id="nlp-int", category="nlp", level="intermediate"))

    def test_last_module_completes_pathway(self, pathway_service, goal, clock, next_goals):
        pathway = pathway_service.start_pathway(1, goal.id)
        for i in range(3):
            clock.advance(days=1)
            updated = _complete_module(pathway_service, pathway, i)
        assert updated.progress == 100
        assert updated.status == PathwayStatus.COMPLETED
        assert updated.completed_at == clock.now
        assert updated.current_module == 2
        assert len(updated.next_goals) == 3
        assert all(g.startswith("ml-int-") for g in updated.next_goals)

    def test_completed_pathway_is_immutable(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        for i in range(3):
            _complete_module(pathway_service, pathway, i)
        with pytest.raises(InvalidStateError):
            pathway_service.complete_resource(pathway.id, 1, 0, "m0-r0", completed=False)
        with pytest.raises(InvalidStateError):
            pathway_service.submit_quiz(pathway.id, 1, 2, _answers(pathway_service, pathway, 2))
        with pytest.raises(InvalidStateError):
            pathway_service.generate_recommendations(pathway.id, 1)
        with pytest.raises(InvalidStateError):
            pathway_service.update_progress(pathway_service.get_pathway(pathway.id))

    def test_advanced_goal_suggests_advanced(self, pathway_service, repos):
        current = repos["goals"].add(make_goal(goal_id="adv", level="advanced"))
        repos["goals"].add(make_goal(goal_id="adv-2", level="advanced"))
        pathway = pathway_service.generate_pathway(1, current.id)
        assert pathway_service.suggest_next_goals(pathway) == ["adv-2"]

    def test_empty_goal_never_completes(self, pathway_service, repos):
        repos["goals"].add(make_goal(goal_id="empty", n_modules=0))
        pathway = pathway_service.start_pathway(1, "empty")
        updated = pathway_service.update_progress(pathway)
        assert updated.progress == 0
        assert updated.status == PathwayStatus.ACTIVE


@pytest.mark.unit
class TestQuizReset:
    def test_reset_clears_quiz_and_attempts(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        pathway_service.submit_quiz(pathway.id, 1, 0, _answers(pathway_service, pathway, 0, correct=False))
        assert len(pathway_service.list_quiz_attempts(pathway.id, 1, 0)) == 1
        updated = pathway_service.reset_quiz(pathway.id, 1, 0)
        assert not updated.module_progress[0].quiz.completed
        assert updated.module_progress[0].quiz.score is None
        assert pathway_service.list_quiz_attempts(pathway.id, 1, 0) == []

    def test_reset_completed_module_rejected(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        _complete_module(pathway_service, pathway, 0)
        with pytest.raises(InvalidStateError):
            pathway_service.reset_quiz(pathway.id, 1, 0)

    def test_attempts_most_recent_first(self, pathway_service, goal, clock):
        pathway = pathway_service.start_pathway(1, goal.id)
        for _ in range(2):
            clock.advance(minutes=5)
            pathway_service.submit_quiz(pathway.id, 1, 0, _answers(pathway_service, pathway, 0, correct=False))
        attempts = pathway_service.list_quiz_attempts(pathway.id, 1, 0)
        assert attempts[0].completed_at > attempts[1].completed_at

    def test_module_quiz_is_stable(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        first = pathway_service.module_quiz(pathway.id, 1, 0)
        second = pathway_service.module_quiz(pathway.id, 1, 0)
        assert [q.id for q in first] == [q.id for q in second]
        assert [[o.id for o in q.options] for q in first] == [[o.id for o in q.options] for q in second]


@pytest.mark.unit
class TestRecommendations:
    def test_current_module_nudges(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        updated = pathway_service.generate_recommendations(pathway.id, 1)
        assert [(r.type, r.priority) for r in updated.adaptive_recommendations] == [
            ("practice", "high"),
            ("practice", "high"),
        ]

    def test_low_quiz_score_review(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        for rid in ("m0-r0", "m0-r1"):
            pathway_service.complete_resource(pathway.id, 1, 0, rid)
        pathway_service.submit_quiz(pathway.id, 1, 0, _answers(pathway_service, pathway, 0, correct=False))
        updated = pathway_service.generate_recommendations(pathway.id, 1)
        assert [(r.type, r.priority) for r in updated.adaptive_recommendations] == [("review", "medium")]

    def test_regenerate_replaces_list(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        pathway_service.update_recommendation_status(pathway.id, 1, 0, "skip")
        updated = pathway_service.generate_recommendations(pathway.id, 1)
        assert all(r.status == "pending" for r in updated.adaptive_recommendations)

    @pytest.mark.parametrize("action,status", [("start", "pending"), ("skip", "skipped"), ("complete", "completed")])
    def test_status_actions(self, pathway_service, goal, action, status):
        pathway = pathway_service.start_pathway(1, goal.id)
        rec = pathway_service.update_recommendation_status(pathway.id, 1, 0, action)
        assert rec.status == status
        assert pathway_service.get_pathway(pathway.id).adaptive_recommendations[0].status == status

    def test_bad_index_and_action(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        with pytest.raises(NotFoundError):
            pathway_service.update_recommendation_status(pathway.id, 1, 9, "skip")
        with pytest.raises(InvalidStateError):
            pathway_service.update_recommendation_status(pathway.id, 1, 0, "explode")


@pytest.mark.unit
class TestStatusTransitions:
    def test_pause_resume_complete(self, pathway_service, goal, clock):
        pathway = pathway_service.start_pathway(1, goal.id)
        assert pathway_service.set_status(pathway.id, 1, "pause").status == PathwayStatus.PAUSED
        assert pathway_service.set_status(pathway.id, 1, "resume").status == PathwayStatus.ACTIVE
        done = pathway_service.set_status(pathway.id, 1, "complete")
        assert done.status == PathwayStatus.COMPLETED
        assert done.completed_at == clock.now

    @pytest.mark.parametrize("action", ["pause", "resume", "complete"])
    def test_nothing_leaves_completed(self, pathway_service, goal, action):
        pathway = pathway_service.start_pathway(1, goal.id)
        pathway_service.set_status(pathway.id, 1, "complete")
        with pytest.raises(InvalidStateError):
            pathway_service.set_status(pathway.id, 1, action)

    def test_resume_active_rejected(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        with pytest.raises(InvalidStateError):
            pathway_service.set_status(pathway.id, 1, "resume")


@pytest.mark.unit
class TestConcurrentWrites:
    def test_stale_write_conflicts(self, pathway_service, goal):
        pathway = pathway_service.start_pathway(1, goal.id)
        stale = pathway_service.get_pathway(pathway.id)
        pathway_service.complete_resource(pathway.id, 1, 0, "m0-r0")
        with pytest.raises(ConflictError):
            pathway_service.update_progress(stale)

    def test_conflicting_quiz_submit_records_no_attempt(self, racing_service, goal):
        service, pathways = racing_service
        pathway = service.start_pathway(1, goal.id)
        answers = _answers(service, pathway, 0)
        pathways.interleave_next_save()
        with pytest.raises(ConflictError):
            service.submit_quiz(pathway.id, 1, 0, answers)
        assert service.list_quiz_attempts(pathway.id, 1, 0) == []
        assert not service.get_pathway(pathway.id).module_progress[0].quiz.completed

    def test_conflicting_quiz_reset_keeps_attempts(self, racing_service, goal):
        service, pathways = racing_service
        pathway = service.start_pathway(1, goal.id)
        service.submit_quiz(pathway.id, 1, 0, _answers(service, pathway, 0, correct=False))
        pathways.interleave_next_save()
        with pytest.raises(ConflictError):
            service.reset_quiz(pathway.id, 1, 0)
        assert len(service.list_quiz_attempts(pathway.id, 1, 0)) == 1
        assert service.get_pathway(pathway.id).module_progress[0].quiz.completed


class _InterleavingPathwayRepository(InMemoryPathwayRepository):
    """Lets another writer update the stored pathway just before the next save."""

    def __init__(self):
        super().__init__()
        self._interleave = False

    def interleave_next_save(self):
        self._interleave = True

    def save(self, pathway):
        if self._interleave:
            self._interleave = False
            super().save(self.get(pathway.id))
        return super().save(pathway)


@pytest.fixture
def racing_service(repos, question_bank, clock):
    pathways = _InterleavingPathwayRepository()
    service = PathwayService(
        repos["profiles"], repos["goals"], pathways, repos["attempts"],
        question_bank=question_bank, clock=clock,
    )
    return service, pathways


@pytest.mark.unit
class TestServiceWiring:
    def test_uses_injected_repositories(self, question_bank, clock):
        profiles = InMemoryProfileRepository([LearnerProfile(user_id=5)])
        goals = InMemoryGoalRepository([make_goal(goal_id="g")])
        service = PathwayService(
            profiles, goals, InMemoryPathwayRepository(), InMemoryQuizAttemptRepository(),
            question_bank=question_bank, clock=clock,
        )
        pathway = service.start_pathway(5, "g")
        assert service.pathways.get(pathway.id).user_id == 5
