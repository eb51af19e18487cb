from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional


class VoteIn(BaseModel):
    article_id: str = Field(min_length=1)
    vote_type: str    # up | down, checked by the handler so the message matches


class AnalyticsIn(BaseModel):
    event_type: Optional[str] = None
    article_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class AnalysisIn(BaseModel):
    bill_id: Optional[str] = None
    force: bool = False


class TrackBillIn(BaseModel):
    bill_id: str = Field(min_length=1)
    campaign_id: Optional[str] = None
    notes: Optional[str] = None


class TrackLegislatorIn(BaseModel):
    people_id: str = Field(min_length=1)
    notes: Optional[str] = None
    notification_types: List[str] = Field(default_factory=list)


class CampaignIn(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    status: Literal["active", "archived", "completed"] = "active"


class CampaignUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[Literal["active", "archived", "completed"]] = None


class CampaignBillIn(BaseModel):
    bill_id: str = Field(min_length=1)
    notes: Optional[str] = None
    priority: Literal["low", "medium", "high"] = "medium"


class CampaignLegislatorIn(BaseModel):
    people_id: str = Field(min_length=1)
    role: Literal["target", "ally", "opponent", "stakeholder", "sponsor"] = "stakeholder"
    notes: Optional[str] = None


class CampaignDocumentIn(BaseModel):
    file_name: str = Field(min_length=1)
    file_size: int = Field(default=0, ge=0)
    file_type: str = ""
    storage_path: str = ""


class CampaignNoteIn(BaseModel):
    content: str = ""


class ReportIn(BaseModel):
    report_type: str = Field(min_length=1)
    title: str = Field(min_length=1)
    content: str = ""
    bill_id: Optional[str] = None
    bill_number: Optional[str] = None
    campaign_name: Optional[str] = None
    bills_included: int = 0
    files_used: int = 0
