import pytest

from dfs_projector.calculators import pitcher_control
from dfs_projector.domain.scoring import Category
from tests.helpers import make_pitcher_stats, make_team_stats, pitcher_inputs

INNINGS = 165 / 28


class TestFactors:
    def test_hr_vulnerability(self) -> None:
        assert pitcher_control.hr_vulnerability(2.5) == 2.0
        assert pitcher_control.hr_vulnerability(0.25) == 0.5
        assert pitcher_control.hr_vulnerability(None) == 1.0

    def test_opponent_offense(self) -> None:
        assert pitcher_control.opponent_offense(make_team_stats(runs=900)) == 1.2
        assert pitcher_control.opponent_offense(None) == 1.0

    def test_contact_and_eye(self) -> None:
        opponent = make_team_stats(strikeouts=1180, walks=590, plate_appearances=5900)
        # 20% strikeouts and 10% walks.
        assert pitcher_control.contact_factor(opponent) == pytest.approx(0.8 / 0.78)
        assert pitcher_control.eye_factor(opponent) == pytest.approx(1.25)

    def test_control_rating(self) -> None:
        stats = make_pitcher_stats(innings_pitched=100.0, walks=20, hits_allowed=80, strikeouts=100)
        # WHIP 1.0 and K/BB 5.
        assert pitcher_control.control_rating(stats) == pytest.approx(7.5)


class TestCalculate:
    def test_all_four_categories_are_negative(self) -> None:
        results = pitcher_control.calculate(pitcher_inputs())
        assert [r.category for r in results] == [
            Category.EARNED_RUNS,
            Category.HITS_ALLOWED,
            Category.WALKS_ALLOWED,
            Category.HIT_BATSMEN,
        ]
        assert all(r.points < 0 for r in results)
        assert {r.confidence for r in results} == {80.0}

    def test_earned_runs_blend_era_with_hr_rate(self) -> None:
        earned_runs, hits, walks, hbp = pitcher_control.calculate(pitcher_inputs())
        era = 70 * 9 / 165
        hr_factor = (20 * 9 / 165) / 1.25
        assert earned_runs.expected_value == pytest.approx((0.5 * era + 2.0 * hr_factor) / 9 * INNINGS)
        assert earned_runs.expected_value == pytest.approx(2.393, abs=1e-3)
        assert hits.expected_value == pytest.approx(150 / 28)
        assert walks.expected_value == pytest.approx(50 / 28)
        assert hbp.expected_value == pytest.approx(7 / 28)

    def test_zero_hit_batsmen_uses_league_rate(self) -> None:
        *_, hbp = pitcher_control.calculate(pitcher_inputs(make_pitcher_stats(hit_batsmen=0)))
        assert hbp.expected_value == pytest.approx(0.4 / 9 * INNINGS)

    def test_opponent_raises_confidence(self) -> None:
        results = pitcher_control.calculate(pitcher_inputs(opponent_stats=make_team_stats(team_id=111)))
        assert {r.confidence for r in results} == {85.0}

    def test_default(self) -> None:
        earned_runs, hits, walks, hbp = pitcher_control.default()
        assert (earned_runs.expected_value, hits.expected_value, walks.expected_value, hbp.expected_value) == (
            3.0,
            5.5,
            2.0,
            0.25,
        )
        assert earned_runs.points == -6.0
