from __future__ import annotations

from typing import List, Optional

from fastapi import Request
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from ... import storage
from ...errors import NotFound
from ..accounts import models as account_models
from ..audit import services as audit_services
from .models import Attachment, AttachmentOwner

# Folder under UPLOAD_DIR per owner kind.
_FOLDERS = {
    AttachmentOwner.REPORT: "reports",
    AttachmentOwner.EVENT: "events",
    AttachmentOwner.MEETING_CALL: "meetings",
    AttachmentOwner.MEMO_RELEASE: "memos",
}


def list_attachments(db: Session, *, entity_type: AttachmentOwner, entity_id: str) -> List[Attachment]:
    return (
        db.query(Attachment)
        .filter(Attachment.entity_type == entity_type, Attachment.entity_id == entity_id)
        .order_by(Attachment.uploaded_at.asc())
        .all()
    )


def add_attachment(
    db: Session,
    *,
    entity_type: AttachmentOwner,
    entity_id: str,
    upload: UploadFile,
    actor: account_models.User,
    module: str,
    request: Optional[Request] = None,
) -> Attachment:
    """
    Store the file and record it against its owner. If the row cannot be
    written, the stored file is removed again.
    """
    stored = storage.save_upload(upload, folder=_FOLDERS[entity_type])
    attachment = Attachment(
        entity_type=entity_type,
        entity_id=entity_id,
        filename=stored.filename,
        original_name=stored.original_name,
        path=stored.path,
        mimetype=stored.mimetype,
        size=stored.size,
        uploaded_by=actor.id,
    )
    try:
        db.add(attachment)
        db.commit()
    except Exception:
        db.rollback()
        storage.delete_stored_file(stored.path)
        raise
    db.refresh(attachment)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="update",
        module=module,
        resource_id=entity_id,
        details={"attachmentAdded": attachment.id, "originalName": attachment.original_name},
        request=request,
    )
    return attachment


def remove_attachment(
    db: Session,
    *,
    entity_type: AttachmentOwner,
    entity_id: str,
    attachment_id: str,
    actor: account_models.User,
    module: str,
    request: Optional[Request] = None,
) -> None:
    attachment = (
        db.query(Attachment)
        .filter(
            Attachment.id == attachment_id,
            Attachment.entity_type == entity_type,
            Attachment.entity_id == entity_id,
        )
        .first()
    )
    if attachment is None:
        raise NotFound("Attachment not found.")

    path = attachment.path
    db.delete(attachment)
    db.commit()
    storage.delete_stored_file(path)

    audit_services.log_action(
        db,
        user_id=actor.id,
        action="update",
        module=module,
        resource_id=entity_id,
        details={"attachmentRemoved": attachment_id},
        request=request,
    )


def delete_owner_attachments(db: Session, *, entity_type: AttachmentOwner, entity_id: str) -> List[str]:
    """
    Drop the rows for an owner being deleted (inside the caller's
    transaction) and return the stored paths for removal after commit.
    """
    paths = []
    for attachment in list_attachments(db, entity_type=entity_type, entity_id=entity_id):
        paths.append(attachment.path)
        db.delete(attachment)
    return paths
