from datetime import datetime, timedelta

import pytest

from aura_planner.logic.wellness_detector import BREAK_ACTIVITIES, WellnessDetector
from aura_planner.models import GameStats, TaskAction, UserInput, WellnessMetrics


START = datetime(2024, 5, 6, 9, 0)


def actions(*types, spacing=10):
    return [
        TaskAction(type=t, task_id=f"t{i}", timestamp=START + timedelta(minutes=i * spacing))
        for i, t in enumerate(types)
    ]


@pytest.fixture
def detector(rng):
    return WellnessDetector(rng=rng)


class TestStress:

    def test_skip_rate_adds_up_to_forty(self):
        day = UserInput(mood="balanced", energy=7)
        base = WellnessDetector.stress_level([], day)
        skipped = WellnessDetector.stress_level(actions(*["skip"] * 5), day)

        assert base == 10
        assert skipped - base == 40

    def test_clamped(self):
        day = UserInput(mood="stressed", energy=2)
        assert WellnessDetector.stress_level(actions(*["skip"] * 5), day) == 100

    def test_high_energy_lowers_stress(self):
        assert WellnessDetector.stress_level([], UserInput(mood="energized", energy=9)) == 0


class TestAnalyze:

    def test_struggling_session_needs_rest(self, detector):
        stats = GameStats(task_actions=actions(*["skip"] * 5))
        metrics = detector.analyze_wellness(stats, UserInput(mood="stressed", energy=2))

        assert metrics.stress_level == 100
        assert metrics.burnout_risk == 25
        assert metrics.consistency_score == 0
        assert metrics.work_life_balance == 5
        assert metrics.intervention_needed
        assert metrics.intervention_type == "rest"

    def test_fresh_session_is_fine(self, detector):
        metrics = detector.analyze_wellness(GameStats(), UserInput(mood="balanced", energy=7))

        assert metrics.consistency_score == 50
        assert metrics.work_life_balance == 85
        assert not metrics.intervention_needed
        assert metrics.intervention_type is None

    def test_long_session_and_broken_streak_raise_burnout(self):
        stats = GameStats(
            current_streak=0,
            longest_streak=4,
            task_actions=actions("complete", "complete", spacing=200),
        )
        assert WellnessDetector.burnout_risk(stats, 200) == 50

    def test_consistency_with_streak_bonus(self):
        stats = GameStats(current_streak=4, task_actions=actions(*["complete"] * 4, "skip", "complete"))
        # 5 of 6 completed, plus 8 for the streak
        assert WellnessDetector.consistency_score(stats) == pytest.approx(5 / 6 * 100 + 8)

    def test_celebration(self):
        stats = GameStats(current_streak=6)
        assert WellnessDetector.intervention_type(10, 0, 25, stats) == "celebration"

    def test_session_duration(self):
        assert WellnessDetector.session_duration(actions("complete", "skip", "complete")) == 20
        assert WellnessDetector.session_duration([]) == 0


class TestIntervention:

    def test_rest_break(self):
        metrics = WellnessMetrics(intervention_needed=True, intervention_type="rest")
        suggestion = WellnessDetector.generate_intervention(metrics, GameStats())

        assert suggestion.type == "wellness"
        assert suggestion.action_type == "break"
        assert suggestion.action_data["duration"] == 20

    def test_motivation_reports_completion_rate(self):
        metrics = WellnessMetrics(intervention_needed=True, intervention_type="motivation")
        stats = GameStats(task_actions=actions("complete", "complete", "complete", "skip"))

        suggestion = WellnessDetector.generate_intervention(metrics, stats)

        assert "75%" in suggestion.message

    def test_restructure_offers_split(self):
        metrics = WellnessMetrics(intervention_needed=True, intervention_type="restructure")
        suggestion = WellnessDetector.generate_intervention(metrics, GameStats())
        assert suggestion.action_type == "split_task"

    def test_none_when_not_needed(self):
        assert WellnessDetector.generate_intervention(WellnessMetrics(), GameStats()) is None


class TestPatterns:

    def test_not_enough_data(self):
        pattern = WellnessDetector.detect_emotional_patterns(actions("complete"))
        assert pattern["pattern"] == "balanced"
        assert pattern["confidence"] == 0.3

    @pytest.mark.parametrize("types, expected", [
        (("complete", "complete", "complete"), "productive"),
        (("skip", "skip", "complete", "skip"), "struggling"),
        (("complete", "reschedule", "skip", "reschedule", "complete"), "inconsistent"),
        (("complete", "skip", "complete", "reschedule", "complete", "skip"), "balanced"),
    ])
    def test_patterns(self, types, expected):
        assert WellnessDetector.detect_emotional_patterns(actions(*types))["pattern"] == expected


class TestBreakActivity:

    @pytest.mark.parametrize("stress, minutes, category", [
        (80, 150, "high_stress_long"),
        (80, 30, "high_stress_short"),
        (50, 30, "moderate_stress"),
        (10, 30, "low_stress"),
    ])
    def test_category(self, detector, stress, minutes, category):
        assert detector.suggest_break_activity(stress, minutes) in BREAK_ACTIVITIES[category]
