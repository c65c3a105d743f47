"""Verification domain models.

Each track is a tagged union discriminated on `status`, so a state such as
"verified without a timestamp" cannot be constructed. Trust level is never
stored; it is derived from the tracks on every read.
"""
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from meetspot.domain.common.types import utcnow


class TrustLevel(str, Enum):
    """Four-tier trust classification."""
    UNVERIFIED = "unverified"
    BASIC = "basic"
    ID_VERIFIED = "id_verified"
    FULLY_VERIFIED = "fully_verified"


class ModeratorDecision(str, Enum):
    """Outcome a moderator picks for a pending submission."""
    VERIFY = "verify"
    REJECT = "reject"


class SocialPlatform(str, Enum):
    """Platforms linked through OTP or federated identity."""
    PHONE = "phone"
    GOOGLE = "google"
    FACEBOOK = "facebook"


class _TrackState(BaseModel):
    model_config = ConfigDict(frozen=True)


# Age track

class AgeUnset(_TrackState):
    status: Literal["unset"] = "unset"


class AgeVerified(_TrackState):
    status: Literal["verified"] = "verified"
    birth_date: date
    verified_at: datetime


AgeState = Annotated[Union[AgeUnset, AgeVerified], Field(discriminator="status")]


# ID document track

class IdUnset(_TrackState):
    status: Literal["unset"] = "unset"


class IdPending(_TrackState):
    status: Literal["pending"] = "pending"
    image_ref: str
    submitted_at: datetime


class IdVerified(_TrackState):
    status: Literal["verified"] = "verified"
    verified_at: datetime


class IdRejected(_TrackState):
    status: Literal["rejected"] = "rejected"
    reason: str
    rejected_at: datetime


IdState = Annotated[
    Union[IdUnset, IdPending, IdVerified, IdRejected], Field(discriminator="status")
]


# Face track

class FaceNone(_TrackState):
    status: Literal["none"] = "none"


class FacePending(_TrackState):
    status: Literal["pending"] = "pending"
    image_ref: Optional[str] = None
    confidence: Optional[float] = None
    submitted_at: datetime


class FaceVerified(_TrackState):
    status: Literal["verified"] = "verified"
    verified_at: datetime
    confidence: Optional[float] = None


class FaceFailed(_TrackState):
    status: Literal["failed"] = "failed"
    failed_at: datetime


FaceState = Annotated[
    Union[FaceNone, FacePending, FaceVerified, FaceFailed], Field(discriminator="status")
]


# Social / phone track

class SocialVerification(_TrackState):
    """Linkage of one external platform. There is no rejected state."""

    platform: SocialPlatform
    status: Literal["verified", "pending"]
    verified_at: Optional[datetime] = None
    identifier: Optional[str] = None  # phone number or platform username

    @model_validator(mode="after")
    def _verified_needs_timestamp(self) -> "SocialVerification":
        if self.status == "verified" and self.verified_at is None:
            raise ValueError("verified social linkage requires verified_at")
        return self


def calculate_age(birth_date: date, today: date) -> int:
    """Whole years between two dates, counting a birthday only once it has been reached."""
    before_birthday = (today.month, today.day) < (birth_date.month, birth_date.day)
    return today.year - birth_date.year - int(before_birthday)


def derive_trust_level(age_verified: bool, id_verified: bool, face_verified: bool) -> TrustLevel:
    """Trust policy over the three primary tracks. Social linkage never counts."""
    if age_verified and id_verified and face_verified:
        return TrustLevel.FULLY_VERIFIED
    if age_verified and id_verified:
        return TrustLevel.ID_VERIFIED
    if age_verified and not face_verified:
        return TrustLevel.BASIC
    return TrustLevel.UNVERIFIED


class VerificationRecord(BaseModel):
    """All verification tracks of one user.

    `version` is bumped on every write and used as the compare-and-swap
    guard by repositories.
    """

    user_id: str
    age: AgeState = Field(default_factory=AgeUnset)
    id_document: IdState = Field(default_factory=IdUnset)
    face: FaceState = Field(default_factory=FaceNone)
    social: dict[SocialPlatform, SocialVerification] = Field(default_factory=dict)
    version: int = 0
    updated_at: datetime = Field(default_factory=utcnow)

    @classmethod
    def empty(cls, user_id: str) -> "VerificationRecord":
        """Record of a user who never submitted anything."""
        return cls(user_id=user_id)

    @property
    def trust_level(self) -> TrustLevel:
        return derive_trust_level(
            age_verified=isinstance(self.age, AgeVerified),
            id_verified=isinstance(self.id_document, IdVerified),
            face_verified=isinstance(self.face, FaceVerified),
        )

    @property
    def verified_platforms(self) -> list[SocialPlatform]:
        """Badges shown next to the trust level."""
        return [p for p, v in self.social.items() if v.status == "verified"]

    def evolve(self, **changes) -> "VerificationRecord":
        """Copy with changed tracks, next version and fresh timestamp."""
        return self.model_copy(
            update={**changes, "version": self.version + 1, "updated_at": utcnow()}
        )
