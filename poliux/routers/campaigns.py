from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlmodel import Session, col, func, select

from ..auth import require_user
from ..bill_numbers import format_bill_number
from ..errors import NotFoundError
from ..logging_setup import get_logger
from ..models import (
    Bill, Campaign, CampaignBill, CampaignDocument, CampaignLegislator, CampaignNote, Person, utc_now,
)
from ..schema import (
    CampaignBillIn, CampaignDocumentIn, CampaignIn, CampaignLegislatorIn, CampaignNoteIn, CampaignUpdate,
)
from ..store import get_session, insert_unique

logger = get_logger("poliux.routes.campaigns")

router = APIRouter(prefix="/campaigns", tags=["Campaigns"])

CHILD_TABLES = (CampaignBill, CampaignLegislator, CampaignDocument, CampaignNote)


def owned_campaign(session: Session, campaign_id: str, user_id: str) -> Campaign:
    # Another user's campaign looks the same as a missing one
    campaign = session.get(Campaign, campaign_id)
    if campaign is None or campaign.user_id != user_id:
        raise NotFoundError("Campaign not found")
    return campaign


def _count_children(session: Session, table, campaign_id: str) -> int:
    return session.exec(
        select(func.count()).select_from(table).where(table.campaign_id == campaign_id)
    ).one()


def _touch(session: Session, campaign: Campaign) -> None:
    campaign.updated_at = utc_now()
    session.add(campaign)


def _campaign_summary(session: Session, campaign: Campaign) -> Dict[str, Any]:
    return {
        **campaign.model_dump(),
        "bill_count": _count_children(session, CampaignBill, campaign.id),
        "legislator_count": _count_children(session, CampaignLegislator, campaign.id),
    }


@router.get("")
def list_campaigns(user_id: str = Depends(require_user)):
    with get_session() as s:
        rows = s.exec(
            select(Campaign).where(Campaign.user_id == user_id).order_by(col(Campaign.updated_at).desc())
        ).all()
        return {"campaigns": [_campaign_summary(s, c) for c in rows]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_campaign(body: CampaignIn, user_id: str = Depends(require_user)):
    with get_session() as s:
        campaign = Campaign(user_id=user_id, name=body.name, description=body.description, status=body.status)
        s.add(campaign)
        s.commit()
        s.refresh(campaign)
        logger.info(f"Campaign created: {campaign.id}")
        return _campaign_summary(s, campaign)


@router.get("/{campaign_id}")
def get_campaign(campaign_id: str, user_id: str = Depends(require_user)):
    with get_session() as s:
        campaign = owned_campaign(s, campaign_id, user_id)
        bills = s.exec(
            select(CampaignBill, Bill)
            .join(Bill, Bill.bill_id == CampaignBill.bill_id, isouter=True)
            .where(CampaignBill.campaign_id == campaign_id)
            .order_by(col(CampaignBill.added_at).desc())
        ).all()
        legislators = s.exec(
            select(CampaignLegislator, Person)
            .join(Person, Person.people_id == CampaignLegislator.people_id, isouter=True)
            .where(CampaignLegislator.campaign_id == campaign_id)
            .order_by(col(CampaignLegislator.added_at).desc())
        ).all()
        documents = s.exec(
            select(CampaignDocument).where(CampaignDocument.campaign_id == campaign_id)
        ).all()
        note = s.exec(select(CampaignNote).where(CampaignNote.campaign_id == campaign_id)).first()

        return {
            **campaign.model_dump(),
            "bill_count": len(bills),
            "legislator_count": len(legislators),
            "bills": [
                {
                    **cb.model_dump(),
                    "bill": {**b.model_dump(), "bill_number": format_bill_number(b.bill_number)} if b else None,
                }
                for cb, b in bills
            ],
            "legislators": [{**cl.model_dump(), "person": p.model_dump() if p else None} for cl, p in legislators],
            "documents": [d.model_dump() for d in documents],
            "notes": note.model_dump() if note else None,
        }


@router.patch("/{campaign_id}")
def update_campaign(campaign_id: str, body: CampaignUpdate, user_id: str = Depends(require_user)):
    with get_session() as s:
        campaign = owned_campaign(s, campaign_id, user_id)
        for name, value in body.model_dump(exclude_unset=True).items():
            setattr(campaign, name, value)
        _touch(s, campaign)
        s.commit()
        s.refresh(campaign)
        return _campaign_summary(s, campaign)


@router.delete("/{campaign_id}")
def delete_campaign(campaign_id: str, user_id: str = Depends(require_user)):
    with get_session() as s:
        campaign = owned_campaign(s, campaign_id, user_id)
        for table in CHILD_TABLES:
            for row in s.exec(select(table).where(table.campaign_id == campaign_id)).all():
                s.delete(row)
        s.delete(campaign)
        s.commit()
    logger.info(f"Campaign deleted: {campaign_id}")
    return {"ok": True}


# ---- Bills ----

@router.post("/{campaign_id}/bills", status_code=status.HTTP_201_CREATED)
def add_bill(campaign_id: str, body: CampaignBillIn, user_id: str = Depends(require_user)):
    with get_session() as s:
        campaign = owned_campaign(s, campaign_id, user_id)
        if s.get(Bill, body.bill_id) is None:
            raise NotFoundError("Bill not found")
        _touch(s, campaign)
        row = insert_unique(
            s,
            CampaignBill(campaign_id=campaign_id, bill_id=body.bill_id, notes=body.notes, priority=body.priority),
            "Bill is already in this campaign",
        )
        return row.model_dump()


@router.delete("/{campaign_id}/bills/{bill_id}")
def remove_bill(campaign_id: str, bill_id: str, user_id: str = Depends(require_user)):
    with get_session() as s:
        campaign = owned_campaign(s, campaign_id, user_id)
        row = s.exec(
            select(CampaignBill).where(CampaignBill.campaign_id == campaign_id, CampaignBill.bill_id == bill_id)
        ).first()
        if row is None:
            raise NotFoundError("Bill is not in this campaign")
        s.delete(row)
        _touch(s, campaign)
        s.commit()
    return {"ok": True}


# ---- Legislators ----

@router.post("/{campaign_id}/legislators", status_code=status.HTTP_201_CREATED)
def add_legislator(campaign_id: str, body: CampaignLegislatorIn, user_id: str = Depends(require_user)):
    with get_session() as s:
        campaign = owned_campaign(s, campaign_id, user_id)
        if s.get(Person, body.people_id) is None:
            raise NotFoundError("Legislator not found")
        _touch(s, campaign)
        row = insert_unique(
            s,
            CampaignLegislator(campaign_id=campaign_id, people_id=body.people_id, role=body.role, notes=body.notes),
            "Legislator is already in this campaign",
        )
        return row.model_dump()


@router.delete("/{campaign_id}/legislators/{people_id}")
def remove_legislator(campaign_id: str, people_id: str, user_id: str = Depends(require_user)):
    with get_session() as s:
        campaign = owned_campaign(s, campaign_id, user_id)
        row = s.exec(
            select(CampaignLegislator).where(
                CampaignLegislator.campaign_id == campaign_id, CampaignLegislator.people_id == people_id
            )
        ).first()
        if row is None:
            raise NotFoundError("Legislator is not in this campaign")
        s.delete(row)
        _touch(s, campaign)
        s.commit()
    return {"ok": True}


# ---- Documents (metadata only; files live in object storage) ----

@router.get("/{campaign_id}/documents")
def list_documents(campaign_id: str, user_id: str = Depends(require_user)):
    with get_session() as s:
        owned_campaign(s, campaign_id, user_id)
        rows = s.exec(
            select(CampaignDocument)
            .where(CampaignDocument.campaign_id == campaign_id)
            .order_by(col(CampaignDocument.uploaded_at).desc())
        ).all()
        return {"documents": [d.model_dump() for d in rows]}


@router.post("/{campaign_id}/documents", status_code=status.HTTP_201_CREATED)
def add_document(campaign_id: str, body: CampaignDocumentIn, user_id: str = Depends(require_user)):
    with get_session() as s:
        campaign = owned_campaign(s, campaign_id, user_id)
        doc = CampaignDocument(campaign_id=campaign_id, uploaded_by=user_id, **body.model_dump())
        s.add(doc)
        _touch(s, campaign)
        s.commit()
        s.refresh(doc)
        return doc.model_dump()


@router.delete("/{campaign_id}/documents/{document_id}")
def delete_document(campaign_id: str, document_id: str, user_id: str = Depends(require_user)):
    with get_session() as s:
        campaign = owned_campaign(s, campaign_id, user_id)
        doc = s.get(CampaignDocument, document_id)
        if doc is None or doc.campaign_id != campaign_id:
            raise NotFoundError("Document not found")
        s.delete(doc)
        _touch(s, campaign)
        s.commit()
    return {"ok": True}


# ---- Notes (one per campaign) ----

@router.get("/{campaign_id}/notes")
def get_notes(campaign_id: str, user_id: str = Depends(require_user)):
    with get_session() as s:
        owned_campaign(s, campaign_id, user_id)
        note = s.exec(select(CampaignNote).where(CampaignNote.campaign_id == campaign_id)).first()
        return note.model_dump() if note else {"campaign_id": campaign_id, "content": None}


@router.put("/{campaign_id}/notes")
def put_notes(campaign_id: str, body: CampaignNoteIn, user_id: str = Depends(require_user)):
    with get_session() as s:
        campaign = owned_campaign(s, campaign_id, user_id)
        note = s.exec(select(CampaignNote).where(CampaignNote.campaign_id == campaign_id)).first()
        if note is None:
            note = CampaignNote(campaign_id=campaign_id)
        note.content = body.content
        note.updated_by = user_id
        note.updated_at = utc_now()
        s.add(note)
        _touch(s, campaign)
        s.commit()
        s.refresh(note)
        return note.model_dump()
