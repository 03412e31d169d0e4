"""Unit tests for prerequisite checking."""
import pytest

from learnpath.schemas.goal_schemas import Prerequisite, Skill
from learnpath.schemas.profile_schemas import LearnerProfile, Preferences
from learnpath.services.prerequisites import check_prerequisites, level_rank
from tests.helpers import make_goal

LEVELS = ["beginner", "intermediate", "advanced", "expert"]


def _profile(math="beginner", programming="beginner") -> LearnerProfile:
    return LearnerProfile(user_id=1, preferences=Preferences(math_level=math, programming_level=programming))


def _goal_requiring(category, *levels):
    prereq = Prerequisite(category=category, skills=[Skill(name=f"s{i}", level=lvl) for i, lvl in enumerate(levels)])
    return make_goal(prerequisites=[prereq]), prereq


@pytest.mark.unit
class TestLevelRank:
    def test_scale_order(self):
        assert [level_rank(lvl) for lvl in LEVELS] == [0, 1, 2, 3]

    def test_basic_ranks_with_beginner(self):
        assert level_rank("basic") == level_rank("beginner")

    def test_unknown_is_below_scale(self):
        assert level_rank("wizard") == -1
        assert level_rank(None) == -1


@pytest.mark.unit
class TestCheckPrerequisites:
    def test_intermediate_learner_missing_advanced_math(self):
        goal, prereq = _goal_requiring("math", "advanced")
        report = check_prerequisites(_profile(math="intermediate"), goal)
        assert report.missing == [prereq]
        assert report.met == []

    @pytest.mark.parametrize("category,field", [("math", "math"), ("programming", "programming")])
    @pytest.mark.parametrize("level", LEVELS)
    def test_equal_level_is_met(self, category, field, level):
        goal, prereq = _goal_requiring(category, level)
        report = check_prerequisites(_profile(**{field: level}), goal)
        assert report.met == [prereq]

    @pytest.mark.parametrize("category,field", [("math", "math"), ("programming", "programming")])
    @pytest.mark.parametrize("index", [1, 2, 3])
    def test_one_step_below_is_missing(self, category, field, index):
        goal, prereq = _goal_requiring(category, LEVELS[index])
        report = check_prerequisites(_profile(**{field: LEVELS[index - 1]}), goal)
        assert report.missing == [prereq]

    def test_group_needs_every_skill(self):
        goal, prereq = _goal_requiring("math", "beginner", "advanced")
        report = check_prerequisites(_profile(math="intermediate"), goal)
        assert report.missing == [prereq]

    def test_theory_and_tools_are_unchecked(self):
        theory = Prerequisite(category="theory", skills=[Skill(name="stats", level="expert")])
        tools = Prerequisite(category="tools", skills=[Skill(name="git", level="advanced")])
        report = check_prerequisites(_profile(), make_goal(prerequisites=[theory, tools]))
        assert report.met == []
        assert report.missing == []
        assert report.unchecked == [theory, tools]

    def test_no_prerequisites(self):
        report = check_prerequisites(_profile(), make_goal())
        assert (report.met, report.missing, report.unchecked) == ([], [], [])

    def test_basic_requirement_met_by_beginner(self):
        goal, prereq = _goal_requiring("programming", "basic")
        assert check_prerequisites(_profile(programming="beginner"), goal).met == [prereq]
