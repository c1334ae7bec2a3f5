"""Schemas for topic subscriptions."""

from typing import Any

from pydantic import Field, field_validator

from runners_api.schemas.common import CamelModel, UtcDateTime


def _clean_topic(value: str) -> str:
    value = value.strip().lower()
    if not value:
        raise ValueError("Topic must not be empty")
    return value


class TopicRequest(CamelModel):
    topic: str = Field(..., min_length=1, max_length=100)

    @field_validator("topic")
    @classmethod
    def clean_topic(cls, v: str) -> str:
        return _clean_topic(v)


class BulkSubscribeRequest(CamelModel):
    topics: list[str] = Field(..., min_length=1, max_length=50)
    subscribe: bool = True

    @field_validator("topics")
    @classmethod
    def clean_topics(cls, v: list[str]) -> list[str]:
        return [t.strip().lower() for t in v]


class SubscriptionResponse(CamelModel):
    topic: str
    is_subscribed: bool
    subscribed_at: UtcDateTime | None = None
    unsubscribed_at: UtcDateTime | None = None
    notification_count: int
    last_notification_sent: UtcDateTime | None = None


class TopicResult(CamelModel):
    topic: str
    success: bool
    message: str


class BulkSummary(CamelModel):
    total: int
    success: int
    failures: int


class BulkSubscribeResponse(CamelModel):
    results: list[TopicResult]
    summary: BulkSummary


class TopicInfo(CamelModel):
    name: str
    category: str
    description: str
    is_subscribed: bool = False


class AvailableTopicsResponse(CamelModel):
    topics: list[TopicInfo]


class TopicStatusResponse(CamelModel):
    topic: str
    is_subscribed: bool
    notification_count: int = 0
    last_notification_sent: UtcDateTime | None = None


class TopicCount(CamelModel):
    topic: str
    subscribers: int


class TopicStatsResponse(CamelModel):
    total_subscriptions: int
    active_subscriptions: int
    topics: list[TopicCount]


class NotifyRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1, max_length=2000)
    data: dict[str, Any] = Field(default_factory=dict)


class NotifyResponse(CamelModel):
    topic: str
    recipients: int
