# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics event tracking module.

The EventTracker is the write-side entry point for feature code. It exposes
one method per event kind with a stable argument order. Each method builds
the kind's payload, validates it and hands the event to the service.

Tracking is fail-safe: no track_* method raises. Rejected events are logged
at WARNING, unexpected failures at ERROR with a traceback, and both are
counted in get_stats().

Usage:
    from kingdom_analytics.domains.analytics import EventTracker

    tracker = EventTracker(service)
    tracker.track_product_sale("p1", 24.99, "Printify")
    tracker.track_screen_view("Dashboard", 12.5, mode="faith")
"""

import functools
import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any, Literal

from kingdom_analytics.domains.analytics.exceptions import SchemaError
from kingdom_analytics.domains.analytics.filters import AnalyticsFilter, ContentMode, DatePreset, DateRange
from kingdom_analytics.domains.analytics.properties import type_tag_for
from kingdom_analytics.domains.analytics.schema import validate_event
from kingdom_analytics.infrastructure.events.types import EventKind
from kingdom_analytics.utils.datetime import ensure_utc, format_iso, parse_iso, utc_now

if TYPE_CHECKING:
    from kingdom_analytics.domains.analytics.service import AnalyticsService

logger = logging.getLogger(__name__)

Mode = ContentMode | str | None

Timeframe = AnalyticsFilter | DateRange | DatePreset | Mapping[str, Any] | str | int | None

DEFAULT_TIMEFRAME_DAYS = 30


def _as_datetime(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, str):
        try:
            return parse_iso(value)
        except ValueError:
            return None
    return None


def _timeframe_days(timeframe: Timeframe) -> int:
    """Length in days of a filter, range, preset token, ``{start, end}`` mapping or day count.

    Anything else counts as the default 30 days.
    """
    if isinstance(timeframe, AnalyticsFilter):
        return timeframe.date_range.days
    if isinstance(timeframe, DateRange):
        return timeframe.days
    if isinstance(timeframe, DatePreset):
        return timeframe.days
    if isinstance(timeframe, str):
        try:
            return DatePreset(timeframe).days
        except ValueError:
            return DEFAULT_TIMEFRAME_DAYS
    if isinstance(timeframe, int) and not isinstance(timeframe, bool):
        return timeframe if timeframe > 0 else DEFAULT_TIMEFRAME_DAYS
    if isinstance(timeframe, Mapping):
        start = _as_datetime(timeframe.get("start"))
        end = _as_datetime(timeframe.get("end"))
        if start is None or end is None:
            return DEFAULT_TIMEFRAME_DAYS
        return DateRange(start=min(start, end), end=max(start, end)).days
    return DEFAULT_TIMEFRAME_DAYS


def _fail_safe(method: Callable[..., None]) -> Callable[..., None]:
    """Turn argument-handling failures of a track_* method into rejections."""

    @functools.wraps(method)
    def wrapper(self: "EventTracker", *args: Any, **kwargs: Any) -> None:
        try:
            method(self, *args, **kwargs)
        except Exception as e:
            self._rejected += 1
            logger.warning("Analytics event rejected: invalid arguments to %s: %r", method.__name__, e)

    return wrapper


class EventTracker:
    """Typed, fail-safe access point for recording analytics events.

    Attributes:
        _service: Service the validated events are forwarded to.
        _clock: Source of event timestamps.
    """

    def __init__(
        self,
        service: "AnalyticsService",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the event tracker.

        Args:
            service: Analytics service that owns the event store.
            clock: Source of event timestamps.
        """
        self._service = service
        self._clock = clock
        self._tracked = 0
        self._rejected = 0
        self._failed = 0

    def _track(
        self,
        kind: EventKind,
        value: float,
        mode: Mode = None,
        /,
        **properties: Any,
    ) -> None:
        """Validate one event and forward it to the service.

        None-valued properties are dropped before validation.
        """
        payload = {key: item for key, item in properties.items() if item is not None}
        payload["type"] = type_tag_for(kind)
        if mode is not None:
            payload["mode"] = mode

        try:
            event = validate_event(kind, value, payload, timestamp=self._clock())
        except SchemaError as e:
            self._rejected += 1
            logger.warning("Analytics event rejected: %s", e)
            return

        try:
            self._service.record(event)
        except Exception:
            self._failed += 1
            logger.error("Failed to record analytics event %s", kind.value, exc_info=True)
            return

        self._tracked += 1
        logger.debug("Event tracked: name=%s, value=%s", kind.value, value)

    def get_stats(self) -> dict[str, int]:
        """Get tracking counters.

        Returns:
            Dictionary with tracked, rejected and failed counts.
        """
        return {
            "tracked": self._tracked,
            "rejected": self._rejected,
            "failed": self._failed,
        }

    # =========================================================================
    # Content
    # =========================================================================

    def track_testimony_shared(
        self, testimony_id: str, platform: str | None = None, *, mode: Mode = None
    ) -> None:
        self._track(
            EventKind.TESTIMONY_SHARED, 1, mode,
            testimony_id=testimony_id, platform=platform, category="spiritual",
        )

    def track_testimony_viewed(
        self, testimony_id: str, platform: str | None = None, *, mode: Mode = None
    ) -> None:
        self._track(
            EventKind.TESTIMONY_VIEWED, 1, mode,
            testimony_id=testimony_id, platform=platform, category="spiritual",
        )

    def track_resource_accessed(self, resource_id: str, category: str, *, mode: Mode = None) -> None:
        self._track(EventKind.RESOURCE_ACCESSED, 1, mode, resource_id=resource_id, category=category)

    def track_prayer_request_submitted(self, *, mode: Mode = None) -> None:
        self._track(EventKind.PRAYER_REQUEST_SUBMITTED, 1, mode, category="prayer")

    def track_challenge_completed(self, challenge_id: str, progress: float, *, mode: Mode = None) -> None:
        self._track(
            EventKind.CHALLENGE_COMPLETED, progress, mode,
            challenge_id=challenge_id, category="growth",
        )

    # =========================================================================
    # Engagement
    # =========================================================================

    def track_post_engagement(
        self,
        post_id: str,
        engagement_type: Literal["like", "share", "comment"],
        platform: str,
        content_type: str | None = None,
        *,
        mode: Mode = None,
    ) -> None:
        """Track a like, share or comment on a post.

        Args:
            post_id: Post identifier.
            engagement_type: like, share or comment.
            platform: Platform the post lives on.
            content_type: Optional content type, used by content insights.
            mode: Content mode of the post.
        """
        self._track(
            EventKind.POST_ENGAGEMENT, 1, mode,
            post_id=post_id, engagement_type=engagement_type,
            platform=platform, content_type=content_type,
        )

    def track_content_reach(self, content_id: str, reach: float, platform: str, *, mode: Mode = None) -> None:
        self._track(EventKind.CONTENT_REACH, reach, mode, content_id=content_id, platform=platform)

    def track_follower_growth(self, platform: str, new_followers: float, *, mode: Mode = None) -> None:
        self._track(EventKind.FOLLOWER_GROWTH, new_followers, mode, platform=platform)

    def track_community_engagement(
        self, engagement_type: str, target_id: str, *, mode: Mode = None
    ) -> None:
        self._track(
            EventKind.COMMUNITY_ENGAGEMENT, 1, mode,
            engagement_type=engagement_type, target_id=target_id,
        )

    # =========================================================================
    # Business
    # =========================================================================

    def track_product_sale(
        self, product_id: str, amount: float, platform: str | None = None, *, mode: Mode = None
    ) -> None:
        """Track a product sale.

        Args:
            product_id: Product identifier.
            amount: Sale amount in the store currency.
            platform: Storefront the sale happened on.
            mode: Content mode the sale is attributed to.
        """
        self._track(
            EventKind.PRODUCT_SALE, amount, mode,
            product_id=product_id, platform=platform, category="product",
        )

    def track_affiliate_earning(
        self, affiliate_id: str, amount: float, platform: str | None = None, *, mode: Mode = None
    ) -> None:
        self._track(
            EventKind.AFFILIATE_EARNING, amount, mode,
            affiliate_id=affiliate_id, platform=platform, category="affiliate",
        )

    def track_sponsorship_earning(self, sponsorship_id: str, amount: float, *, mode: Mode = None) -> None:
        self._track(
            EventKind.SPONSORSHIP_EARNING, amount, mode,
            sponsorship_id=sponsorship_id, category="sponsorship",
        )

    def track_subscription_purchase(self, plan_id: str, amount: float, *, mode: Mode = None) -> None:
        self._track(
            EventKind.SUBSCRIPTION_PURCHASE, amount, mode,
            plan_id=plan_id, category="subscription",
        )

    # =========================================================================
    # Links and conversions
    # =========================================================================

    def track_link_click(
        self, link_id: str, destination: str, platform: str | None = None, *, mode: Mode = None
    ) -> None:
        self._track(
            EventKind.LINK_CLICK, 1, mode,
            link_id=link_id, destination=destination, platform=platform,
        )

    def track_conversion(
        self, conversion_type: str, value: float, source: str | None = None, *, mode: Mode = None
    ) -> None:
        self._track(
            EventKind.CONVERSION, value, mode,
            conversion_type=conversion_type, source=source,
        )

    def track_bio_link_click(self, link_type: str, destination: str, *, mode: Mode = None) -> None:
        self._track(
            EventKind.BIO_LINK_CLICK, 1, mode,
            link_type=link_type, destination=destination, category="bio",
        )

    # =========================================================================
    # Creation and publishing
    # =========================================================================

    def track_content_created(
        self,
        content_type: str,
        platform: str,
        hashtags: Sequence[str] | None = None,
        *,
        mode: Mode = None,
    ) -> None:
        self._track(
            EventKind.CONTENT_CREATED, 1, mode,
            content_type=content_type, platform=platform,
            hashtags=list(hashtags) if hashtags is not None else None,
            category="creation",
        )

    def track_hashtag_used(
        self, hashtag: str, platform: str, reach: float | None = None, *, mode: Mode = None
    ) -> None:
        self._track(EventKind.HASHTAG_USED, 1, mode, hashtag=hashtag, platform=platform, reach=reach)

    def track_template_used(self, template_id: str, category: str, *, mode: Mode = None) -> None:
        self._track(EventKind.TEMPLATE_USED, 1, mode, template_id=template_id, category=category)

    def track_calendar_event_created(
        self, event_type: str, scheduled_date: str, *, mode: Mode = None
    ) -> None:
        self._track(
            EventKind.CALENDAR_EVENT_CREATED, 1, mode,
            event_type=event_type, scheduled_date=scheduled_date,
        )

    def track_social_media_post(
        self,
        platform: str,
        content_type: str,
        metrics: Mapping[str, Any] | None = None,
        *,
        mode: Mode = None,
    ) -> None:
        """Track a post published to a social platform.

        ``metrics`` is accepted for call compatibility but not recorded;
        engagement is tracked per interaction with track_post_engagement().
        """
        self._track(
            EventKind.SOCIAL_MEDIA_POST, 1, mode,
            platform=platform, content_type=content_type, category="social_media",
        )

    def track_platform_connection(self, platform: str, success: bool, *, mode: Mode = None) -> None:
        self._track(
            EventKind.PLATFORM_CONNECTION, 1, mode,
            platform=platform, success=success, category="social_media",
        )

    def track_multi_platform_post(
        self,
        platforms: Sequence[str],
        content_type: str,
        results: Sequence[Mapping[str, Any]],
        *,
        mode: Mode = None,
    ) -> None:
        """Track one post published to several platforms.

        Args:
            platforms: Target platforms.
            content_type: Content type of the post.
            results: One result per platform; entries with a truthy
                ``success`` count as published.
            mode: Content mode of the post.
        """
        success_count = sum(
            1 for result in results if isinstance(result, Mapping) and result.get("success")
        )
        self._track(
            EventKind.MULTI_PLATFORM_POST, success_count, mode,
            platforms=list(platforms), content_type=content_type,
            success_count=success_count, total_count=len(results),
            category="social_media",
        )

    def track_scheduled_post(
        self, platforms: Sequence[str], scheduled_time: datetime | str, *, mode: Mode = None
    ) -> None:
        """Track a scheduled post; ISO 8601 strings are normalized to UTC."""
        if isinstance(scheduled_time, str):
            scheduled_time = parse_iso(scheduled_time)
        self._track(
            EventKind.POST_SCHEDULED, 1, mode,
            platforms=list(platforms), scheduled_time=format_iso(scheduled_time),
            category="social_media",
        )

    # =========================================================================
    # AI and automation
    # =========================================================================

    def track_ai_assistant_query(self, query_type: str, category: str, *, mode: Mode = None) -> None:
        self._track(EventKind.AI_ASSISTANT_QUERY, 1, mode, query_type=query_type, category=category)

    def track_ai_content_generated(
        self, content_type: str, success: bool, platform: str | None = None, *, mode: Mode = None
    ) -> None:
        self._track(
            EventKind.AI_CONTENT_GENERATED, 1, mode,
            content_type=content_type, success=success, platform=platform,
            category="content_creation",
        )

    def track_ai_content_generation(
        self,
        content_type: str,
        platform: str | None = None,
        success: bool = True,
        *,
        mode: Mode = None,
    ) -> None:
        """Track an AI generation from the publishing flow (platform before success)."""
        self.track_ai_content_generated(content_type, success, platform, mode=mode)

    def track_automation_used(self, automation_type: str, platform: str, *, mode: Mode = None) -> None:
        self._track(
            EventKind.AUTOMATION_USED, 1, mode,
            automation_type=automation_type, platform=platform,
        )

    # =========================================================================
    # User journey
    # =========================================================================

    def track_screen_view(
        self, screen_name: str, time_spent: float | None = None, *, mode: Mode = None
    ) -> None:
        """Track a screen view; the value is seconds spent, 1 when unknown."""
        value = time_spent if time_spent is not None else 1
        self._track(EventKind.SCREEN_VIEW, value, mode, screen_name=screen_name)

    def track_feature_used(
        self, feature_name: str, duration: float | None = None, *, mode: Mode = None
    ) -> None:
        value = duration if duration is not None else 1
        self._track(EventKind.FEATURE_USED, value, mode, feature_name=feature_name)

    def track_onboarding_step(self, step: str, completed: bool, *, mode: Mode = None) -> None:
        self._track(EventKind.ONBOARDING_STEP, 1 if completed else 0, mode, step=step, completed=completed)

    def track_analytics_dashboard_view(
        self, timeframe: Timeframe = None, *, mode: Mode = None
    ) -> None:
        self._track(
            EventKind.ANALYTICS_DASHBOARD_VIEWED, 1, mode,
            timeframe_days=_timeframe_days(timeframe), category="analytics",
        )

    def track_analytics_export(
        self,
        format: Literal["pdf", "csv", "excel"],
        timeframe: Timeframe = None,
        *,
        mode: Mode = None,
    ) -> None:
        self._track(
            EventKind.ANALYTICS_EXPORTED, 1, mode,
            format=format, timeframe_days=_timeframe_days(timeframe), category="analytics",
        )

    def track_analytics_insight_viewed(self, insight_type: str, category: str, *, mode: Mode = None) -> None:
        self._track(
            EventKind.ANALYTICS_INSIGHT_VIEWED, 1, mode,
            insight_type=insight_type, subcategory=category, category="analytics",
        )

    def track_analytics_recommendation_actioned(
        self, recommendation_category: str, priority: str, *, mode: Mode = None
    ) -> None:
        self._track(
            EventKind.ANALYTICS_RECOMMENDATION_ACTIONED, 1, mode,
            recommendation_category=recommendation_category, priority=priority,
            category="analytics",
        )

    def track_realtime_metrics_viewed(self, *, mode: Mode = None) -> None:
        self._track(EventKind.REALTIME_METRICS_VIEWED, 1, mode, category="analytics")

    def track_analytics_timeframe_changed(self, new_timeframe_days: int, *, mode: Mode = None) -> None:
        self._track(
            EventKind.ANALYTICS_TIMEFRAME_CHANGED, 1, mode,
            timeframe_days=new_timeframe_days, category="analytics",
        )

    def track_analytics_metric_focused(
        self,
        metric_type: Literal["content", "social", "email", "engagement", "revenue"],
        *,
        mode: Mode = None,
    ) -> None:
        self._track(
            EventKind.ANALYTICS_METRIC_FOCUSED, 1, mode,
            metric_type=metric_type, category="analytics",
        )

    def track_analytics_chart_interaction(
        self, chart_type: str, interaction_type: str, *, mode: Mode = None
    ) -> None:
        self._track(
            EventKind.ANALYTICS_CHART_INTERACTION, 1, mode,
            chart_type=chart_type, interaction_type=interaction_type, category="analytics",
        )

    # =========================================================================
    # Community and mentorship
    # =========================================================================

    def track_mentorship_request(self, mentor_id: str, category: str, *, mode: Mode = None) -> None:
        self._track(EventKind.MENTORSHIP_REQUEST, 1, mode, mentor_id=mentor_id, category=category)

    def track_mentorship_session(self, session_id: str, duration: float, *, mode: Mode = None) -> None:
        self._track(
            EventKind.MENTORSHIP_SESSION, duration, mode,
            session_id=session_id, category="session",
        )

    # =========================================================================
    # Email marketing
    # =========================================================================

    def track_email_subscription(self, source: str, *, mode: Mode = None) -> None:
        self._track(EventKind.EMAIL_SUBSCRIPTION, 1, mode, source=source, category="email_marketing")

    def track_email_unsubscription(self, *, mode: Mode = None) -> None:
        self._track(EventKind.EMAIL_UNSUBSCRIPTION, 1, mode, category="email_marketing")

    def track_email_template_created(self, category: str, *, mode: Mode = None) -> None:
        self._track(EventKind.EMAIL_TEMPLATE_CREATED, 1, mode, category=category)

    def track_email_campaign_created(self, recipient_count: int, *, mode: Mode = None) -> None:
        self._track(
            EventKind.EMAIL_CAMPAIGN_CREATED, 1, mode,
            recipient_count=recipient_count, category="email_marketing",
        )

    def track_email_campaign_sent(self, campaign_id: str, recipient_count: int, *, mode: Mode = None) -> None:
        self._track(
            EventKind.EMAIL_CAMPAIGN_SENT, recipient_count, mode,
            campaign_id=campaign_id, recipient_count=recipient_count,
            category="email_marketing",
        )

    def track_email_automation_created(
        self, trigger_type: str, email_count: int, *, mode: Mode = None
    ) -> None:
        self._track(
            EventKind.EMAIL_AUTOMATION_CREATED, 1, mode,
            trigger_type=trigger_type, email_count=email_count, category="email_marketing",
        )

    # =========================================================================
    # Errors, performance, custom
    # =========================================================================

    def track_error(
        self, error_type: str, error_message: str, screen: str | None = None, *, mode: Mode = None
    ) -> None:
        self._track(
            EventKind.ERROR, 1, mode,
            error_type=error_type, error_message=error_message, screen=screen,
        )

    def track_performance(
        self, metric: str, value: float, context: str | None = None, *, mode: Mode = None
    ) -> None:
        """Track a performance measurement (``response_time`` in milliseconds)."""
        self._track(EventKind.PERFORMANCE, value, mode, metric=metric, context=context)

    def track_custom_event(
        self,
        event_name: str,
        value: float,
        properties: Mapping[str, Any] | None = None,
        *,
        mode: Mode = None,
    ) -> None:
        """Track a caller-defined event.

        Custom events are recorded under the ``custom`` kind with the
        caller's name in ``event_name``; extra properties must be scalars
        or lists of strings.
        """
        extra = {
            key: item
            for key, item in (properties or {}).items()
            if isinstance(key, str) and key not in ("type", "event_name", "mode")
        }
        self._track(EventKind.CUSTOM, value, mode, event_name=event_name, **extra)


for _name, _method in list(vars(EventTracker).items()):
    if _name.startswith("track_"):
        setattr(EventTracker, _name, _fail_safe(_method))
del _name, _method
