import pytest

from dfs_projector.calculators import strikeouts
from dfs_projector.domain.environment import BallparkFactor
from dfs_projector.domain.stats import Estimated
from tests.helpers import make_environment, make_pitcher_stats, make_team_stats, pitcher_inputs


class TestOpponentVulnerability:
    def test_strikeout_prone_lineup(self) -> None:
        # 1530 K over 150 games is 10.2 per game against a league 8.5.
        assert strikeouts.opponent_vulnerability(make_team_stats(strikeouts=1530)) == pytest.approx(6.0)

    def test_unknown_opponent(self) -> None:
        assert strikeouts.opponent_vulnerability(None) == 5.0
        assert strikeouts.opponent_vulnerability(make_team_stats(games=0)) == 5.0


class TestWeather:
    def test_extremes_favour_strikeouts(self) -> None:
        assert strikeouts.weather_factor(make_environment(temperature=95.0)) == 1.05
        assert strikeouts.weather_factor(make_environment(temperature=35.0)) == 1.1
        assert strikeouts.weather_factor(make_environment(temperature=35.0, is_outdoor=False)) == 1.0


class TestCalculate:
    def test_rate_times_start_length(self) -> None:
        result = strikeouts.calculate(pitcher_inputs())
        # 170 K over 165 IP across 28 starts.
        assert result.expected_value == pytest.approx(170 / 28)
        assert result.points == pytest.approx(2 * 170 / 28)
        assert result.confidence == 70.0
        assert result.factors["range_low"] == pytest.approx(result.expected_value * 0.7)
        assert result.factors["range_high"] == pytest.approx(result.expected_value * 1.3)

    def test_opponent_and_park_scale_rate(self) -> None:
        inputs = pitcher_inputs(
            opponent_stats=make_team_stats(team_id=111, strikeouts=1530),
            ballpark=BallparkFactor(venue_id=1, strikeouts=1.05),
        )
        result = strikeouts.calculate(inputs)
        assert result.expected_value == pytest.approx(170 / 28 * 1.2 * 1.05)

    def test_capped_at_fifteen(self) -> None:
        stats = make_pitcher_stats(games=10, games_started=10, innings_pitched=100.0, strikeouts=400)
        assert strikeouts.calculate(pitcher_inputs(stats)).expected_value == 15.0

    def test_whiff_rate_boosts_confidence(self) -> None:
        result = strikeouts.calculate(pitcher_inputs(make_pitcher_stats(whiff_rate=0.3)))
        assert result.confidence == 80.0

    def test_small_sample_lowers_confidence(self) -> None:
        stats = make_pitcher_stats(games=3, games_started=3, innings_pitched=15.0, strikeouts=15)
        assert strikeouts.calculate(pitcher_inputs(stats)).confidence == 40.0

    def test_prior_season_fallback_is_penalised(self) -> None:
        observed = strikeouts.calculate(pitcher_inputs())
        fallback = strikeouts.calculate(pitcher_inputs(stats=Estimated(make_pitcher_stats(), 15.0)))
        assert fallback.confidence == observed.confidence - 15
        assert fallback.expected_value == observed.expected_value

    def test_default(self) -> None:
        result = strikeouts.default()
        assert result.expected_value == 5.0
        assert result.is_default
