from typing import Optional
from uuid import uuid4
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field, Column, JSON
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    # Older SQLite drivers hand datetimes back without tzinfo; they are UTC
    if dt is None or dt.tzinfo is not None:
        return dt
    return dt.replace(tzinfo=timezone.utc)


def _uuid() -> str:
    return uuid4().hex


# ---- Legislative data (loaded from LegiScan elsewhere) ----

class Bill(SQLModel, table=True):
    __tablename__ = "bills"

    bill_id: str = Field(primary_key=True)
    bill_number: Optional[str] = Field(default=None, index=True)  # LegiScan form, e.g. HB123
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    status_desc: Optional[str] = None
    committee: Optional[str] = None
    last_action: Optional[str] = None
    last_action_date: Optional[datetime] = None
    session_id: Optional[int] = None


class Person(SQLModel, table=True):
    __tablename__ = "people"

    people_id: str = Field(primary_key=True)
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    party: Optional[str] = None
    role: Optional[str] = None
    district: Optional[str] = None


# ---- Newsfeed ----

class Article(SQLModel, table=True):
    __tablename__ = "rss_feed"

    id: str = Field(default_factory=_uuid, primary_key=True)
    title: str = ""
    description: Optional[str] = ""
    link: str = ""
    canonical_link: Optional[str] = ""
    domain: str = Field(default="", index=True)
    publication: Optional[str] = ""
    author: Optional[str] = ""
    pub_date: Optional[datetime] = Field(default=None, index=True)
    image_url: Optional[str] = None


class ArticleVote(SQLModel, table=True):
    __tablename__ = "article_votes"
    __table_args__ = (UniqueConstraint("article_id", "user_id", name="uq_article_votes_article_user"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    article_id: str = Field(index=True)
    user_id: str = Field(index=True)
    vote_type: str  # up | down
    updated_at: datetime = Field(default_factory=utc_now)


class AnalyticsEvent(SQLModel, table=True):
    __tablename__ = "internal_analytics"

    id: Optional[int] = Field(default=None, primary_key=True)
    event_type: str = Field(index=True)
    article_id: Optional[str] = None
    user_id: Optional[str] = None
    # "metadata" is reserved on SQLModel classes; keep the column name
    event_metadata: dict = Field(default_factory=dict, sa_column=Column("metadata", JSON))
    created_at: datetime = Field(default_factory=utc_now)


# ---- Analyses (rows written by the external workflow) ----

class SimpleBillAnalysis(SQLModel, table=True):
    __tablename__ = "simple_bill_analysis"

    id: str = Field(default_factory=_uuid, primary_key=True)
    bill_id: str = Field(index=True)
    summary: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)


# ---- Per-user data ----

class AuthToken(SQLModel, table=True):
    __tablename__ = "auth_tokens"

    token: str = Field(primary_key=True)
    user_id: str = Field(index=True)
    expires_at: Optional[datetime] = None


class TrackedBill(SQLModel, table=True):
    __tablename__ = "tracked_bills"
    __table_args__ = (UniqueConstraint("user_id", "bill_id", name="uq_tracked_bills_user_bill"),)

    id: str = Field(default_factory=_uuid, primary_key=True)
    user_id: str = Field(index=True)
    bill_id: str
    campaign_id: Optional[str] = None
    notes: Optional[str] = None
    tracked_at: datetime = Field(default_factory=utc_now)


class TrackedLegislator(SQLModel, table=True):
    __tablename__ = "tracked_legislators"
    __table_args__ = (UniqueConstraint("user_id", "people_id", name="uq_tracked_legislators_user_person"),)

    id: str = Field(default_factory=_uuid, primary_key=True)
    user_id: str = Field(index=True)
    people_id: str
    notes: Optional[str] = None
    notification_types: list = Field(default_factory=list, sa_column=Column(JSON))
    tracked_at: datetime = Field(default_factory=utc_now)


class Campaign(SQLModel, table=True):
    __tablename__ = "campaigns"

    id: str = Field(default_factory=_uuid, primary_key=True)
    user_id: str = Field(index=True)
    name: str
    description: Optional[str] = None
    status: str = "active"  # active | archived | completed
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class CampaignBill(SQLModel, table=True):
    __tablename__ = "campaign_bills"
    __table_args__ = (UniqueConstraint("campaign_id", "bill_id", name="uq_campaign_bills_campaign_bill"),)

    id: str = Field(default_factory=_uuid, primary_key=True)
    campaign_id: str = Field(index=True)
    bill_id: str
    notes: Optional[str] = None
    priority: str = "medium"  # low | medium | high
    added_at: datetime = Field(default_factory=utc_now)


class CampaignLegislator(SQLModel, table=True):
    __tablename__ = "campaign_legislators"
    __table_args__ = (UniqueConstraint("campaign_id", "people_id", name="uq_campaign_legislators_campaign_person"),)

    id: str = Field(default_factory=_uuid, primary_key=True)
    campaign_id: str = Field(index=True)
    people_id: str
    role: str = "stakeholder"  # target | ally | opponent | stakeholder | sponsor
    notes: Optional[str] = None
    added_at: datetime = Field(default_factory=utc_now)


class CampaignDocument(SQLModel, table=True):
    __tablename__ = "campaign_documents"

    id: str = Field(default_factory=_uuid, primary_key=True)
    campaign_id: str = Field(index=True)
    file_name: str
    file_size: int = 0
    file_type: str = ""
    storage_path: str = ""
    uploaded_by: Optional[str] = None
    uploaded_at: datetime = Field(default_factory=utc_now)


class CampaignNote(SQLModel, table=True):
    __tablename__ = "campaign_notes"

    id: str = Field(default_factory=_uuid, primary_key=True)
    campaign_id: str = Field(unique=True)
    content: Optional[str] = None
    updated_by: Optional[str] = None
    updated_at: datetime = Field(default_factory=utc_now)


class ReportInbox(SQLModel, table=True):
    __tablename__ = "report_inbox"

    id: str = Field(default_factory=_uuid, primary_key=True)
    user_id: str = Field(index=True)
    bill_id: Optional[str] = None
    bill_number: Optional[str] = None
    report_type: str
    title: str
    content: str = ""
    campaign_name: Optional[str] = None
    bills_included: int = 0
    files_used: int = 0
    date_created: datetime = Field(default_factory=utc_now)
    expiration_date: Optional[datetime] = None
