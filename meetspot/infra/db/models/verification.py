"""Verification record database model."""
from pydantic import TypeAdapter
from sqlalchemy import Column, DateTime, Integer, String

from meetspot.domain.common.types import utcnow
from meetspot.domain.verification.models import (
    AgeState,
    FaceState,
    IdState,
    SocialPlatform,
    SocialVerification,
    VerificationRecord,
)
from meetspot.infra.db.base import Base
from meetspot.infra.db.types import JSONBType

_age_adapter = TypeAdapter(AgeState)
_id_adapter = TypeAdapter(IdState)
_face_adapter = TypeAdapter(FaceState)


class VerificationRecordModel(Base):
    """One row per user. Each track is stored as its tagged JSON form."""

    __tablename__ = "verification_records"

    user_id = Column(String, primary_key=True)
    age = Column(JSONBType, nullable=False)
    id_document = Column(JSONBType, nullable=False)
    face = Column(JSONBType, nullable=False)
    social = Column(JSONBType, nullable=False, default=dict)
    # Copies of the track tags so the review queue can be queried
    id_status = Column(String(20), nullable=False, default="unset", index=True)
    face_status = Column(String(20), nullable=False, default="none", index=True)
    version = Column(Integer, nullable=False, default=1)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    def to_entity(self) -> VerificationRecord:
        """Convert to domain entity."""
        social = {
            SocialPlatform(platform): SocialVerification.model_validate(entry)
            for platform, entry in (self.social or {}).items()
        }
        return VerificationRecord(
            user_id=self.user_id,
            age=_age_adapter.validate_python(self.age),
            id_document=_id_adapter.validate_python(self.id_document),
            face=_face_adapter.validate_python(self.face),
            social=social,
            version=self.version,
            updated_at=self.updated_at,
        )

    @staticmethod
    def columns_from_entity(entity: VerificationRecord) -> dict:
        """Column values for an insert or update."""
        return {
            "user_id": entity.user_id,
            "age": entity.age.model_dump(mode="json"),
            "id_document": entity.id_document.model_dump(mode="json"),
            "face": entity.face.model_dump(mode="json"),
            "social": {
                platform.value: entry.model_dump(mode="json")
                for platform, entry in entity.social.items()
            },
            "id_status": entity.id_document.status,
            "face_status": entity.face.status,
            "version": entity.version,
            "updated_at": entity.updated_at,
        }

    @classmethod
    def from_entity(cls, entity: VerificationRecord) -> "VerificationRecordModel":
        """Create from domain entity."""
        return cls(**cls.columns_from_entity(entity))
