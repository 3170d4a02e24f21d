# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Typed property models, one per event kind.

Each model is a variant of a tagged union discriminated by ``type``. The
``type`` tag is required on every variant and fixed to the kind's
conventional value, so a payload built for one kind cannot be recorded as
another. Unknown fields are rejected.

Optional fields default to None and are dropped when the event is built, so
an event's properties hold exactly what the caller supplied.
"""

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, model_validator

from kingdom_analytics.domains.analytics.filters import ContentMode
from kingdom_analytics.infrastructure.events.types import EventKind

Scalar = str | int | float | bool


class EventProperties(BaseModel):
    """Fields shared by every event kind.

    Attributes:
        type: Discriminator tag (revenue, engagement, content, ...).
        mode: Content mode the event belongs to; None for mode-agnostic events.
        category: Conventional category tag set by the tracker.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, use_enum_values=True)

    type: str
    mode: ContentMode | None = None
    category: str | None = None


# =============================================================================
# Content
# =============================================================================


class TestimonySharedProperties(EventProperties):
    type: Literal["content"]
    testimony_id: str
    platform: str | None = None


class TestimonyViewedProperties(EventProperties):
    type: Literal["view"]
    testimony_id: str
    platform: str | None = None


class ResourceAccessedProperties(EventProperties):
    type: Literal["content"]
    resource_id: str
    category: str


class PrayerRequestSubmittedProperties(EventProperties):
    type: Literal["spiritual"]


class ChallengeCompletedProperties(EventProperties):
    type: Literal["spiritual"]
    challenge_id: str


# =============================================================================
# Engagement
# =============================================================================


class PostEngagementProperties(EventProperties):
    type: Literal["engagement"]
    post_id: str
    engagement_type: Literal["like", "share", "comment"]
    platform: str
    content_type: str | None = None


class ContentReachProperties(EventProperties):
    type: Literal["reach"]
    content_id: str
    platform: str


class FollowerGrowthProperties(EventProperties):
    type: Literal["followers"]
    platform: str


class CommunityEngagementProperties(EventProperties):
    type: Literal["community"]
    engagement_type: str
    target_id: str


# =============================================================================
# Business
# =============================================================================


class ProductSaleProperties(EventProperties):
    type: Literal["revenue"]
    product_id: str
    platform: str | None = None


class AffiliateEarningProperties(EventProperties):
    type: Literal["revenue"]
    affiliate_id: str
    platform: str | None = None


class SponsorshipEarningProperties(EventProperties):
    type: Literal["revenue"]
    sponsorship_id: str


class SubscriptionPurchaseProperties(EventProperties):
    type: Literal["revenue"]
    plan_id: str


# =============================================================================
# Links and conversions
# =============================================================================


class LinkClickProperties(EventProperties):
    type: Literal["click"]
    link_id: str
    destination: str
    platform: str | None = None


class ConversionProperties(EventProperties):
    type: Literal["conversion"]
    conversion_type: str
    source: str | None = None


class BioLinkClickProperties(EventProperties):
    type: Literal["click"]
    link_type: str
    destination: str


# =============================================================================
# Creation and publishing
# =============================================================================


class ContentCreatedProperties(EventProperties):
    type: Literal["content"]
    content_type: str
    platform: str
    hashtags: tuple[str, ...] | None = None


class HashtagUsedProperties(EventProperties):
    type: Literal["hashtag"]
    hashtag: str
    platform: str
    reach: float | None = None


class TemplateUsedProperties(EventProperties):
    type: Literal["content"]
    template_id: str
    category: str


class CalendarEventCreatedProperties(EventProperties):
    type: Literal["scheduling"]
    event_type: str
    scheduled_date: str


class SocialMediaPostProperties(EventProperties):
    type: Literal["social_post"]
    platform: str
    content_type: str


class PlatformConnectionProperties(EventProperties):
    type: Literal["connection"]
    platform: str
    success: bool


class MultiPlatformPostProperties(EventProperties):
    type: Literal["multi_post"]
    platforms: tuple[str, ...]
    content_type: str
    success_count: int
    total_count: int


class PostScheduledProperties(EventProperties):
    type: Literal["scheduling"]
    platforms: tuple[str, ...]
    scheduled_time: str


# =============================================================================
# AI and automation
# =============================================================================


class AIAssistantQueryProperties(EventProperties):
    type: Literal["ai"]
    query_type: str
    category: str


class AIContentGeneratedProperties(EventProperties):
    type: Literal["ai_generation"]
    content_type: str
    success: bool
    platform: str | None = None


class AutomationUsedProperties(EventProperties):
    type: Literal["automation"]
    automation_type: str
    platform: str


# =============================================================================
# User journey
# =============================================================================


class ScreenViewProperties(EventProperties):
    type: Literal["navigation"]
    screen_name: str


class FeatureUsedProperties(EventProperties):
    type: Literal["feature"]
    feature_name: str


class OnboardingStepProperties(EventProperties):
    type: Literal["onboarding"]
    step: str
    completed: bool


class AnalyticsDashboardViewedProperties(EventProperties):
    type: Literal["dashboard_view"]
    timeframe_days: int


class AnalyticsExportedProperties(EventProperties):
    type: Literal["export"]
    format: Literal["pdf", "csv", "excel"]
    timeframe_days: int


class AnalyticsInsightViewedProperties(EventProperties):
    type: Literal["insight_view"]
    insight_type: str
    subcategory: str


class AnalyticsRecommendationActionedProperties(EventProperties):
    type: Literal["recommendation_action"]
    recommendation_category: str
    priority: str


class RealtimeMetricsViewedProperties(EventProperties):
    type: Literal["realtime_view"]


class AnalyticsTimeframeChangedProperties(EventProperties):
    type: Literal["timeframe_change"]
    timeframe_days: int


class AnalyticsMetricFocusedProperties(EventProperties):
    type: Literal["metric_focus"]
    metric_type: Literal["content", "social", "email", "engagement", "revenue"]


class AnalyticsChartInteractionProperties(EventProperties):
    type: Literal["chart_interaction"]
    chart_type: str
    interaction_type: str


# =============================================================================
# Community and mentorship
# =============================================================================


class MentorshipRequestProperties(EventProperties):
    type: Literal["mentorship"]
    mentor_id: str
    category: str


class MentorshipSessionProperties(EventProperties):
    type: Literal["mentorship"]
    session_id: str


# =============================================================================
# Email marketing
# =============================================================================


class EmailSubscriptionProperties(EventProperties):
    type: Literal["subscription"]
    source: str


class EmailUnsubscriptionProperties(EventProperties):
    type: Literal["unsubscription"]


class EmailTemplateCreatedProperties(EventProperties):
    type: Literal["template_creation"]
    category: str


class EmailCampaignCreatedProperties(EventProperties):
    type: Literal["campaign_creation"]
    recipient_count: int


class EmailCampaignSentProperties(EventProperties):
    type: Literal["campaign_sent"]
    campaign_id: str
    recipient_count: int


class EmailAutomationCreatedProperties(EventProperties):
    type: Literal["automation_creation"]
    trigger_type: str
    email_count: int


# =============================================================================
# Errors, performance, custom
# =============================================================================


class ErrorProperties(EventProperties):
    type: Literal["error"]
    error_type: str
    error_message: str
    screen: str | None = None


class PerformanceProperties(EventProperties):
    type: Literal["performance"]
    metric: str
    context: str | None = None


class CustomProperties(EventProperties):
    """Caller-defined event; extra attributes must be scalars or string lists."""

    model_config = ConfigDict(extra="allow", frozen=True, use_enum_values=True)

    type: Literal["custom"]
    event_name: str

    @model_validator(mode="after")
    def check_extra_values(self) -> "CustomProperties":
        """Reject nested or non-scalar custom attributes."""
        for key, value in (self.model_extra or {}).items():
            if isinstance(value, (list, tuple)):
                if not all(isinstance(item, str) for item in value):
                    raise ValueError(f"{key} must be a list of strings")
            elif value is not None and not isinstance(value, (str, int, float, bool)):
                raise ValueError(f"{key} must be a scalar or a list of strings")
        return self


PROPERTY_MODELS: dict[EventKind, type[EventProperties]] = {
    EventKind.TESTIMONY_SHARED: TestimonySharedProperties,
    EventKind.TESTIMONY_VIEWED: TestimonyViewedProperties,
    EventKind.RESOURCE_ACCESSED: ResourceAccessedProperties,
    EventKind.PRAYER_REQUEST_SUBMITTED: PrayerRequestSubmittedProperties,
    EventKind.CHALLENGE_COMPLETED: ChallengeCompletedProperties,
    EventKind.POST_ENGAGEMENT: PostEngagementProperties,
    EventKind.CONTENT_REACH: ContentReachProperties,
    EventKind.FOLLOWER_GROWTH: FollowerGrowthProperties,
    EventKind.COMMUNITY_ENGAGEMENT: CommunityEngagementProperties,
    EventKind.PRODUCT_SALE: ProductSaleProperties,
    EventKind.AFFILIATE_EARNING: AffiliateEarningProperties,
    EventKind.SPONSORSHIP_EARNING: SponsorshipEarningProperties,
    EventKind.SUBSCRIPTION_PURCHASE: SubscriptionPurchaseProperties,
    EventKind.LINK_CLICK: LinkClickProperties,
    EventKind.CONVERSION: ConversionProperties,
    EventKind.BIO_LINK_CLICK: BioLinkClickProperties,
    EventKind.CONTENT_CREATED: ContentCreatedProperties,
    EventKind.HASHTAG_USED: HashtagUsedProperties,
    EventKind.TEMPLATE_USED: TemplateUsedProperties,
    EventKind.CALENDAR_EVENT_CREATED: CalendarEventCreatedProperties,
    EventKind.SOCIAL_MEDIA_POST: SocialMediaPostProperties,
    EventKind.PLATFORM_CONNECTION: PlatformConnectionProperties,
    EventKind.MULTI_PLATFORM_POST: MultiPlatformPostProperties,
    EventKind.POST_SCHEDULED: PostScheduledProperties,
    EventKind.AI_ASSISTANT_QUERY: AIAssistantQueryProperties,
    EventKind.AI_CONTENT_GENERATED: AIContentGeneratedProperties,
    EventKind.AUTOMATION_USED: AutomationUsedProperties,
    EventKind.SCREEN_VIEW: ScreenViewProperties,
    EventKind.FEATURE_USED: FeatureUsedProperties,
    EventKind.ONBOARDING_STEP: OnboardingStepProperties,
    EventKind.ANALYTICS_DASHBOARD_VIEWED: AnalyticsDashboardViewedProperties,
    EventKind.ANALYTICS_EXPORTED: AnalyticsExportedProperties,
    EventKind.ANALYTICS_INSIGHT_VIEWED: AnalyticsInsightViewedProperties,
    EventKind.ANALYTICS_RECOMMENDATION_ACTIONED: AnalyticsRecommendationActionedProperties,
    EventKind.REALTIME_METRICS_VIEWED: RealtimeMetricsViewedProperties,
    EventKind.ANALYTICS_TIMEFRAME_CHANGED: AnalyticsTimeframeChangedProperties,
    EventKind.ANALYTICS_METRIC_FOCUSED: AnalyticsMetricFocusedProperties,
    EventKind.ANALYTICS_CHART_INTERACTION: AnalyticsChartInteractionProperties,
    EventKind.MENTORSHIP_REQUEST: MentorshipRequestProperties,
    EventKind.MENTORSHIP_SESSION: MentorshipSessionProperties,
    EventKind.EMAIL_SUBSCRIPTION: EmailSubscriptionProperties,
    EventKind.EMAIL_UNSUBSCRIPTION: EmailUnsubscriptionProperties,
    EventKind.EMAIL_TEMPLATE_CREATED: EmailTemplateCreatedProperties,
    EventKind.EMAIL_CAMPAIGN_CREATED: EmailCampaignCreatedProperties,
    EventKind.EMAIL_CAMPAIGN_SENT: EmailCampaignSentProperties,
    EventKind.EMAIL_AUTOMATION_CREATED: EmailAutomationCreatedProperties,
    EventKind.ERROR: ErrorProperties,
    EventKind.PERFORMANCE: PerformanceProperties,
    EventKind.CUSTOM: CustomProperties,
}


def type_tag_for(kind: EventKind) -> str:
    """Get the discriminator tag a kind's payload must carry."""
    return get_args(PROPERTY_MODELS[kind].model_fields["type"].annotation)[0]
