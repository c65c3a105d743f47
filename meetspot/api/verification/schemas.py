"""Verification response models shared by user and admin routes."""
from datetime import datetime

from pydantic import BaseModel

from meetspot.domain.verification.models import VerificationRecord


class VerificationResponse(BaseModel):
    """All tracks of a user plus the derived trust level."""
    user_id: str
    trust_level: str
    age: dict
    id_document: dict
    face: dict
    social: dict[str, dict]
    verified_platforms: list[str]
    updated_at: datetime

    @classmethod
    def from_record(cls, record: VerificationRecord) -> "VerificationResponse":
        return cls(
            user_id=record.user_id,
            trust_level=record.trust_level.value,
            age=record.age.model_dump(mode="json"),
            id_document=record.id_document.model_dump(mode="json"),
            face=record.face.model_dump(mode="json"),
            social={p.value: v.model_dump(mode="json") for p, v in record.social.items()},
            verified_platforms=[p.value for p in record.verified_platforms],
            updated_at=record.updated_at,
        )
