# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Heuristic insight rules.

Each rule looks at the events of a window and may emit one or more
AIInsight objects. Rules are deterministic: ties are broken by name, and
no rule reads the clock. An observation is reported only when it rests on
at least ``min_samples`` events and deviates from its baseline by more
than ``threshold`` (a fraction, 0.2 = 20%).
"""

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from kingdom_analytics.domains.analytics.aggregator import ENGAGEMENT, REVENUE, sum_type
from kingdom_analytics.domains.analytics.schema import Event
from kingdom_analytics.domains.analytics.views import AIInsight
from kingdom_analytics.infrastructure.events.types import EventKind


def confidence(sample_size: int, deviation: float) -> float:
    """Confidence for an observation.

    ``0.5 + 0.49 * n/(n+5) * d/(d+1)``: stays in [0.5, 0.99) and grows with
    both the sample size ``n`` and the relative deviation ``d``.
    """
    n = max(sample_size, 0)
    d = max(abs(deviation), 0.0)
    return 0.5 + 0.49 * (n / (n + 5)) * (d / (d + 1))


def impact_for(deviation: float) -> str:
    if deviation >= 1.0:
        return "high"
    if deviation >= 0.5:
        return "medium"
    return "low"


@dataclass(frozen=True)
class InsightContext:
    """Inputs shared by every rule.

    Attributes:
        current: Window events.
        previous: Trailing window events.
        threshold: Minimum relative deviation worth reporting.
        min_samples: Minimum events behind an observation.
    """

    current: Sequence[Event]
    previous: Sequence[Event]
    threshold: float
    min_samples: int


def _insight(rule_id: str, sample_size: int, deviation: float, **fields: str) -> AIInsight:
    return AIInsight(
        id=rule_id,
        confidence=confidence(sample_size, deviation),
        impact=impact_for(deviation),
        sample_size=sample_size,
        **fields,
    )


def content_type_insights(ctx: InsightContext) -> list[AIInsight]:
    """Content types whose engagement per post beats the overall average."""
    posts: dict[str, set[str]] = {}
    totals: dict[str, list[float]] = {}
    samples: dict[str, int] = {}
    for event in ctx.current:
        if event.name is not EventKind.POST_ENGAGEMENT:
            continue
        content_type = event.properties.get("content_type")
        if content_type is None:
            continue
        posts.setdefault(content_type, set()).add(event.properties["post_id"])
        totals.setdefault(content_type, []).append(event.value)
        samples[content_type] = samples.get(content_type, 0) + 1

    if len(posts) < 2:
        return []

    all_posts = sum(len(ids) for ids in posts.values())
    overall = math.fsum(math.fsum(values) for values in totals.values()) / all_posts
    if overall <= 0:
        return []

    insights = []
    for content_type in sorted(posts):
        per_post = math.fsum(totals[content_type]) / len(posts[content_type])
        deviation = (per_post - overall) / overall
        sample_size = samples[content_type]
        if sample_size < ctx.min_samples or deviation <= ctx.threshold:
            continue
        percent = round(deviation * 100)
        insights.append(
            _insight(
                f"content-type-{content_type}",
                sample_size,
                deviation,
                type="content",
                title=f"{content_type.title()} content resonates",
                description=(
                    f"{content_type.title()} posts earn {percent}% more engagement per post "
                    "than your average. Consider sharing more of them."
                ),
                reasoning=(
                    f"{per_post:.1f} engagement per {content_type} post vs "
                    f"{overall:.1f} across all posts ({sample_size} interactions)."
                ),
                category="content",
                mood="encouraging",
            )
        )
    return insights


def revenue_platform_insights(ctx: InsightContext) -> list[AIInsight]:
    """A platform earning well above an even share of revenue."""
    totals: dict[str, list[float]] = {}
    for event in ctx.current:
        if event.type == REVENUE and event.platform is not None:
            totals.setdefault(event.platform, []).append(event.value)

    sample_size = sum(len(values) for values in totals.values())
    if len(totals) < 2 or sample_size < ctx.min_samples:
        return []

    revenue = {platform: math.fsum(values) for platform, values in totals.items()}
    total = math.fsum(revenue.values())
    if total <= 0:
        return []

    top = min(revenue, key=lambda platform: (-revenue[platform], platform))
    share = revenue[top] / total
    fair_share = 1 / len(revenue)
    deviation = (share - fair_share) / fair_share
    if deviation <= ctx.threshold:
        return []

    return [
        _insight(
            f"revenue-platform-{top}",
            sample_size,
            deviation,
            type="revenue",
            title=f"{top} drives your revenue",
            description=(
                f"{top} brought in {round(share * 100)}% of revenue this period. "
                "Feature your best offers there."
            ),
            reasoning=(
                f"${revenue[top]:.2f} of ${total:.2f} across {len(revenue)} platforms "
                f"({sample_size} sales)."
            ),
            category="business",
            mood="celebratory",
        )
    ]


def peak_hour_insights(ctx: InsightContext) -> list[AIInsight]:
    """The hour of day with clearly more engagement than the others."""
    hours: dict[int, list[float]] = {}
    for event in ctx.current:
        if event.type == ENGAGEMENT:
            hours.setdefault(event.timestamp.hour, []).append(event.value)

    sample_size = sum(len(values) for values in hours.values())
    if len(hours) < 2 or sample_size < ctx.min_samples:
        return []

    totals = {hour: math.fsum(values) for hour, values in hours.items()}
    average = math.fsum(totals.values()) / len(totals)
    if average <= 0:
        return []

    peak = min(totals, key=lambda hour: (-totals[hour], hour))
    deviation = (totals[peak] - average) / average
    if deviation <= ctx.threshold:
        return []

    return [
        _insight(
            f"peak-hour-{peak:02d}",
            sample_size,
            deviation,
            type="timing",
            title=f"Your audience is most active around {peak:02d}:00",
            description=f"Schedule posts near {peak:02d}:00 UTC to reach more people.",
            reasoning=(
                f"{totals[peak]:.0f} engagement at {peak:02d}:00 vs an average of "
                f"{average:.1f} per active hour."
            ),
            category="engagement",
            mood="encouraging",
        )
    ]


def revenue_momentum_insights(ctx: InsightContext) -> list[AIInsight]:
    """Revenue moving sharply against the trailing window."""
    current = sum_type(ctx.current, REVENUE)
    previous = sum_type(ctx.previous, REVENUE)
    sample_size = sum(1 for event in ctx.current if event.type == REVENUE) + sum(
        1 for event in ctx.previous if event.type == REVENUE
    )
    if previous <= 0 or sample_size < ctx.min_samples:
        return []

    deviation = (current - previous) / previous
    if abs(deviation) <= ctx.threshold:
        return []

    percent = round(abs(deviation) * 100)
    if deviation > 0:
        fields = {
            "title": "Revenue is growing",
            "description": f"Revenue is up {percent}% on the previous period. Keep the momentum going.",
            "mood": "celebratory",
        }
    else:
        fields = {
            "title": "Revenue is slowing",
            "description": f"Revenue is down {percent}% on the previous period. Revisit your offers.",
            "mood": "cautionary",
        }
    return [
        _insight(
            "revenue-momentum",
            sample_size,
            abs(deviation),
            type="revenue",
            reasoning=f"${current:.2f} this period vs ${previous:.2f} in the previous one.",
            category="business",
            **fields,
        )
    ]


def ai_reliability_insights(ctx: InsightContext) -> list[AIInsight]:
    """AI generations failing often enough to matter."""
    attempts = [event for event in ctx.current if event.name is EventKind.AI_CONTENT_GENERATED]
    if len(attempts) < ctx.min_samples:
        return []

    failures = sum(1 for event in attempts if not event.properties["success"])
    failure_rate = failures / len(attempts)
    if failure_rate <= ctx.threshold:
        return []

    return [
        _insight(
            "ai-reliability",
            len(attempts),
            failure_rate,
            type="ai",
            title="AI generation is struggling",
            description=(
                f"{round(failure_rate * 100)}% of AI generations failed. "
                "Try shorter prompts or a different content type."
            ),
            reasoning=f"{failures} of {len(attempts)} generations failed.",
            category="ai",
            mood="cautionary",
        )
    ]


RULES: tuple[Callable[[InsightContext], list[AIInsight]], ...] = (
    content_type_insights,
    revenue_platform_insights,
    peak_hour_insights,
    revenue_momentum_insights,
    ai_reliability_insights,
)


def generate_insights(ctx: InsightContext) -> tuple[AIInsight, ...]:
    """Run every rule and rank the results by confidence, then id."""
    insights = [insight for rule in RULES for insight in rule(ctx)]
    insights.sort(key=lambda insight: (-insight.confidence, insight.id))
    return tuple(insights)
