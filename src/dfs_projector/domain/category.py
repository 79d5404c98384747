from __future__ import annotations

from dataclasses import dataclass, field

from dfs_projector.domain.scoring import Category, points_for


@dataclass(frozen=True)
class CategoryResult:
    """Atomic output of a category calculator.

    ``confidence`` is on the 0-100 scale. ``factors`` records every
    adjustment that went into ``expected_value`` so a projection can be
    explained after the fact.
    """

    category: Category
    expected_value: float
    points: float
    confidence: float
    factors: dict[str, float] = field(default_factory=dict)
    is_default: bool = False

    @classmethod
    def linear(
        cls,
        category: Category,
        expected_value: float,
        confidence: float,
        factors: dict[str, float] | None = None,
        *,
        is_default: bool = False,
    ) -> CategoryResult:
        """Build a result whose points follow the scoring table weight."""
        return cls(
            category=category,
            expected_value=expected_value,
            points=points_for(category, expected_value),
            confidence=confidence,
            factors=dict(factors or {}),
            is_default=is_default,
        )
