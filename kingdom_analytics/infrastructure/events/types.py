# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Centralized event kind definitions for Kingdom Analytics.

This module defines the closed taxonomy of analytics events. Using the
EventKind enum instead of string literals provides:
- A single source of truth for event names shared by every call site
- Rejection of unknown names at validation time
- Category and value-unit lookups for aggregation

Adding a new event kind:
1. Add a member to EventKind
2. Register its category and value unit in EventRegistry
3. Add a property model in domains/analytics/properties.py
4. Add a track_* method to EventTracker
"""

from enum import Enum


class EventKind(str, Enum):
    """All event kinds recorded by the tracker."""

    # Content
    TESTIMONY_SHARED = "testimony_shared"
    TESTIMONY_VIEWED = "testimony_viewed"
    RESOURCE_ACCESSED = "resource_accessed"
    PRAYER_REQUEST_SUBMITTED = "prayer_request_submitted"
    CHALLENGE_COMPLETED = "challenge_completed"

    # Engagement
    POST_ENGAGEMENT = "post_engagement"
    CONTENT_REACH = "content_reach"
    FOLLOWER_GROWTH = "follower_growth"
    COMMUNITY_ENGAGEMENT = "community_engagement"

    # Business / revenue
    PRODUCT_SALE = "product_sale"
    AFFILIATE_EARNING = "affiliate_earning"
    SPONSORSHIP_EARNING = "sponsorship_earning"
    SUBSCRIPTION_PURCHASE = "subscription_purchase"

    # Links and conversions
    LINK_CLICK = "link_click"
    CONVERSION = "conversion"
    BIO_LINK_CLICK = "bio_link_click"

    # Content creation and publishing
    CONTENT_CREATED = "content_created"
    HASHTAG_USED = "hashtag_used"
    TEMPLATE_USED = "template_used"
    CALENDAR_EVENT_CREATED = "calendar_event_created"
    SOCIAL_MEDIA_POST = "social_media_post"
    PLATFORM_CONNECTION = "platform_connection"
    MULTI_PLATFORM_POST = "multi_platform_post"
    POST_SCHEDULED = "post_scheduled"

    # AI and automation
    AI_ASSISTANT_QUERY = "ai_assistant_query"
    AI_CONTENT_GENERATED = "ai_content_generated"
    AUTOMATION_USED = "automation_used"

    # User journey
    SCREEN_VIEW = "screen_view"
    FEATURE_USED = "feature_used"
    ONBOARDING_STEP = "onboarding_step"
    ANALYTICS_DASHBOARD_VIEWED = "analytics_dashboard_viewed"
    ANALYTICS_EXPORTED = "analytics_exported"
    ANALYTICS_INSIGHT_VIEWED = "analytics_insight_viewed"
    ANALYTICS_RECOMMENDATION_ACTIONED = "analytics_recommendation_actioned"
    REALTIME_METRICS_VIEWED = "realtime_metrics_viewed"
    ANALYTICS_TIMEFRAME_CHANGED = "analytics_timeframe_changed"
    ANALYTICS_METRIC_FOCUSED = "analytics_metric_focused"
    ANALYTICS_CHART_INTERACTION = "analytics_chart_interaction"

    # Community and mentorship
    MENTORSHIP_REQUEST = "mentorship_request"
    MENTORSHIP_SESSION = "mentorship_session"

    # Email marketing
    EMAIL_SUBSCRIPTION = "email_subscription"
    EMAIL_UNSUBSCRIPTION = "email_unsubscription"
    EMAIL_TEMPLATE_CREATED = "email_template_created"
    EMAIL_CAMPAIGN_CREATED = "email_campaign_created"
    EMAIL_CAMPAIGN_SENT = "email_campaign_sent"
    EMAIL_AUTOMATION_CREATED = "email_automation_created"

    # Errors and performance
    ERROR = "error"
    PERFORMANCE = "performance"

    # Custom
    CUSTOM = "custom"


class EventCategory(str, Enum):
    """Taxonomy groups used for aggregation and chart grouping."""

    CONTENT = "content"
    ENGAGEMENT = "engagement"
    BUSINESS = "business"
    CONVERSION = "conversion"
    CREATION = "creation"
    AI = "ai"
    JOURNEY = "journey"
    COMMUNITY = "community"
    MARKETING = "marketing"
    DIAGNOSTICS = "diagnostics"
    CUSTOM = "custom"


class ValueUnit(str, Enum):
    """Meaning of an event's numeric value."""

    COUNT = "count"
    CURRENCY = "currency"
    SECONDS = "seconds"
    QUANTITY = "quantity"
    MEASUREMENT = "measurement"


class EventRegistry:
    """Registry for event metadata and categorization."""

    _category_map: dict[EventKind, EventCategory] = {
        EventKind.TESTIMONY_SHARED: EventCategory.CONTENT,
        EventKind.TESTIMONY_VIEWED: EventCategory.CONTENT,
        EventKind.RESOURCE_ACCESSED: EventCategory.CONTENT,
        EventKind.PRAYER_REQUEST_SUBMITTED: EventCategory.CONTENT,
        EventKind.CHALLENGE_COMPLETED: EventCategory.CONTENT,
        EventKind.POST_ENGAGEMENT: EventCategory.ENGAGEMENT,
        EventKind.CONTENT_REACH: EventCategory.ENGAGEMENT,
        EventKind.FOLLOWER_GROWTH: EventCategory.ENGAGEMENT,
        EventKind.COMMUNITY_ENGAGEMENT: EventCategory.ENGAGEMENT,
        EventKind.PRODUCT_SALE: EventCategory.BUSINESS,
        EventKind.AFFILIATE_EARNING: EventCategory.BUSINESS,
        EventKind.SPONSORSHIP_EARNING: EventCategory.BUSINESS,
        EventKind.SUBSCRIPTION_PURCHASE: EventCategory.BUSINESS,
        EventKind.LINK_CLICK: EventCategory.CONVERSION,
        EventKind.CONVERSION: EventCategory.CONVERSION,
        EventKind.BIO_LINK_CLICK: EventCategory.CONVERSION,
        EventKind.CONTENT_CREATED: EventCategory.CREATION,
        EventKind.HASHTAG_USED: EventCategory.CREATION,
        EventKind.TEMPLATE_USED: EventCategory.CREATION,
        EventKind.CALENDAR_EVENT_CREATED: EventCategory.CREATION,
        EventKind.SOCIAL_MEDIA_POST: EventCategory.CREATION,
        EventKind.PLATFORM_CONNECTION: EventCategory.CREATION,
        EventKind.MULTI_PLATFORM_POST: EventCategory.CREATION,
        EventKind.POST_SCHEDULED: EventCategory.CREATION,
        EventKind.AI_ASSISTANT_QUERY: EventCategory.AI,
        EventKind.AI_CONTENT_GENERATED: EventCategory.AI,
        EventKind.AUTOMATION_USED: EventCategory.AI,
        EventKind.SCREEN_VIEW: EventCategory.JOURNEY,
        EventKind.FEATURE_USED: EventCategory.JOURNEY,
        EventKind.ONBOARDING_STEP: EventCategory.JOURNEY,
        EventKind.ANALYTICS_DASHBOARD_VIEWED: EventCategory.JOURNEY,
        EventKind.ANALYTICS_EXPORTED: EventCategory.JOURNEY,
        EventKind.ANALYTICS_INSIGHT_VIEWED: EventCategory.JOURNEY,
        EventKind.ANALYTICS_RECOMMENDATION_ACTIONED: EventCategory.JOURNEY,
        EventKind.REALTIME_METRICS_VIEWED: EventCategory.JOURNEY,
        EventKind.ANALYTICS_TIMEFRAME_CHANGED: EventCategory.JOURNEY,
        EventKind.ANALYTICS_METRIC_FOCUSED: EventCategory.JOURNEY,
        EventKind.ANALYTICS_CHART_INTERACTION: EventCategory.JOURNEY,
        EventKind.MENTORSHIP_REQUEST: EventCategory.COMMUNITY,
        EventKind.MENTORSHIP_SESSION: EventCategory.COMMUNITY,
        EventKind.EMAIL_SUBSCRIPTION: EventCategory.MARKETING,
        EventKind.EMAIL_UNSUBSCRIPTION: EventCategory.MARKETING,
        EventKind.EMAIL_TEMPLATE_CREATED: EventCategory.MARKETING,
        EventKind.EMAIL_CAMPAIGN_CREATED: EventCategory.MARKETING,
        EventKind.EMAIL_CAMPAIGN_SENT: EventCategory.MARKETING,
        EventKind.EMAIL_AUTOMATION_CREATED: EventCategory.MARKETING,
        EventKind.ERROR: EventCategory.DIAGNOSTICS,
        EventKind.PERFORMANCE: EventCategory.DIAGNOSTICS,
        EventKind.CUSTOM: EventCategory.CUSTOM,
    }

    # Kinds whose value is not a plain occurrence count
    _unit_map: dict[EventKind, ValueUnit] = {
        EventKind.CHALLENGE_COMPLETED: ValueUnit.QUANTITY,
        EventKind.CONTENT_REACH: ValueUnit.QUANTITY,
        EventKind.FOLLOWER_GROWTH: ValueUnit.QUANTITY,
        EventKind.PRODUCT_SALE: ValueUnit.CURRENCY,
        EventKind.AFFILIATE_EARNING: ValueUnit.CURRENCY,
        EventKind.SPONSORSHIP_EARNING: ValueUnit.CURRENCY,
        EventKind.SUBSCRIPTION_PURCHASE: ValueUnit.CURRENCY,
        EventKind.CONVERSION: ValueUnit.QUANTITY,
        EventKind.MULTI_PLATFORM_POST: ValueUnit.QUANTITY,
        EventKind.SCREEN_VIEW: ValueUnit.SECONDS,
        EventKind.FEATURE_USED: ValueUnit.SECONDS,
        EventKind.MENTORSHIP_SESSION: ValueUnit.SECONDS,
        EventKind.EMAIL_CAMPAIGN_SENT: ValueUnit.QUANTITY,
        EventKind.PERFORMANCE: ValueUnit.MEASUREMENT,
        EventKind.CUSTOM: ValueUnit.MEASUREMENT,
    }

    @classmethod
    def get_category(cls, kind: EventKind | str) -> EventCategory:
        """Get the taxonomy category for an event kind.

        Args:
            kind: Event kind or its string value.

        Returns:
            EventCategory for the kind.

        Raises:
            ValueError: If the kind is not part of the taxonomy.
        """
        return cls._category_map[EventKind(kind)]

    @classmethod
    def get_unit(cls, kind: EventKind | str) -> ValueUnit:
        """Get the value unit for an event kind (count when unregistered)."""
        return cls._unit_map.get(EventKind(kind), ValueUnit.COUNT)

    @classmethod
    def is_known(cls, name: object) -> bool:
        """Check if a name belongs to the closed taxonomy.

        Args:
            name: Candidate event name.

        Returns:
            True if the name is an EventKind value.
        """
        if isinstance(name, EventKind):
            return True
        if not isinstance(name, str):
            return False
        try:
            EventKind(name)
        except ValueError:
            return False
        return True

    @classmethod
    def kinds_in(cls, category: EventCategory) -> tuple[EventKind, ...]:
        """List every kind registered under a category, in declaration order."""
        return tuple(kind for kind in EventKind if cls._category_map[kind] is category)
