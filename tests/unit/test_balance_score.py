import pytest

from aura_planner.logic.balance_score import BalanceCalculator
from aura_planner.models import BalanceScore, UserInput


@pytest.fixture
def schedule(item_factory):
    return [
        item_factory("w1", "09:00", "10:00"),
        item_factory("w2", "10:15", "11:15"),
        item_factory("well-1", "11:15", "11:45", type="wellness"),
    ]


class TestPointBudget:

    def test_one_completed_one_skipped(self, schedule):
        score = BalanceCalculator.calculate_score(schedule, ["w1"], ["w2"])

        assert score.productivity == 50
        assert score.overall == 30
        assert score.wellness == 0
        assert score.consistency == 50

    def test_everything_completed(self, schedule):
        score = BalanceCalculator.calculate_score(schedule, ["w1", "w2", "well-1"])
        assert score == BalanceScore(overall=100, productivity=100, wellness=100, consistency=100)

    def test_reschedule_earns_half(self, schedule):
        score = BalanceCalculator.calculate_score(schedule, [], [], ["w1"])

        assert score.overall == 18  # 17.5 rounds half up
        assert score.productivity == 25
        assert score.consistency == 70

    def test_overall_never_negative(self, schedule):
        score = BalanceCalculator.calculate_score(schedule, [], ["w1", "w2"])
        assert score.overall == 0

    def test_no_actions(self, schedule):
        assert BalanceCalculator.calculate_score(schedule) == BalanceScore()

    def test_empty_schedule(self):
        assert BalanceCalculator.calculate_score([], ["x"]) == BalanceScore(consistency=100)

    def test_idempotent(self, schedule):
        first = BalanceCalculator.calculate_score(schedule, ["w1"], ["w2"], ["well-1"])
        second = BalanceCalculator.calculate_score(schedule, ["w1"], ["w2"], ["well-1"])
        assert first == second

    def test_fields_are_bounded(self, schedule):
        ids = ["w1", "w2", "well-1"]
        for completed in ([], ids[:1], ids):
            for skipped in ([], ids[1:2], ids):
                score = BalanceCalculator.calculate_score(schedule, completed, skipped)
                for value in (score.overall, score.productivity, score.wellness, score.consistency):
                    assert 0 <= value <= 100

    def test_break_items_match_by_item_id(self, item_factory):
        schedule = [
            item_factory("w1", "09:00", "10:00"),
            item_factory("break-600", "10:00", "10:15", type="break"),
        ]
        score = BalanceCalculator.calculate_score(schedule, ["break-600"])
        assert score.wellness == 100
        assert score.overall == 30


class TestTimeWeighted:

    def test_balanced_day(self, schedule):
        user_input = UserInput(mood="balanced", energy=7)

        score = BalanceCalculator.calculate_time_weighted_score(schedule, user_input, ["w1", "w2"])

        # completion 100, one-hour blocks -> productivity 100
        assert score.productivity == 100
        for value in (score.overall, score.wellness, score.consistency):
            assert 0 <= value <= 100

    def test_nothing_completed(self, schedule):
        score = BalanceCalculator.calculate_time_weighted_score(schedule, UserInput(), [])
        assert score.productivity == 30


class TestScoreMessage:

    @pytest.mark.parametrize("overall, fragment", [
        (95, "Perfect balance"),
        (85, "Great balance"),
        (72, "Good balance"),
        (60, "Decent balance"),
        (45, "Consider adjusting"),
        (10, "needs more balance"),
    ])
    def test_bands(self, overall, fragment):
        assert fragment in BalanceCalculator.score_message(BalanceScore(overall=overall))
