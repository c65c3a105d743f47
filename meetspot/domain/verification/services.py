"""Verification domain services."""
import logging
from datetime import date, datetime
from typing import Callable, Optional, Protocol, Union

from meetspot.domain.audit.models import ActivityLogType
from meetspot.domain.audit.services import ActivityLogRepository, record_event
from meetspot.domain.common.errors import (
    ConflictError,
    DomainError,
    InvalidStateError,
    NotAuthorizedError,
    ValidationError,
)
from meetspot.domain.common.notifications import Notifier, notify_safely
from meetspot.domain.common.types import Caller, utcnow
from meetspot.domain.verification.models import (
    AgeVerified,
    FaceFailed,
    FacePending,
    FaceVerified,
    IdPending,
    IdRejected,
    IdVerified,
    ModeratorDecision,
    SocialPlatform,
    SocialVerification,
    TrustLevel,
    VerificationRecord,
    calculate_age,
)

logger = logging.getLogger(__name__)


class VerificationRepository(Protocol):
    """Verification record repository protocol."""

    async def get(self, user_id: str) -> Optional[VerificationRecord]:
        """Get a user's record."""
        ...

    async def compare_and_swap(self, record: VerificationRecord, expected_version: int) -> bool:
        """Store `record` only if the stored version still equals `expected_version`.

        `expected_version == 0` means the record must not exist yet.
        Returns False when another writer got there first.
        """
        ...

    async def list_pending_reviews(self) -> list[VerificationRecord]:
        """Records with an ID document or face submission awaiting a moderator."""
        ...


def _parse_decision(decision: Union[ModeratorDecision, str]) -> ModeratorDecision:
    try:
        return ModeratorDecision(decision)
    except ValueError:
        raise ValidationError(f"Unknown decision: {decision!r}")


class VerificationService:
    """Age, ID document, face and social verification tracks of a user."""

    def __init__(
        self,
        verification_repo: VerificationRepository,
        notifier: Optional[Notifier] = None,
        activity_log: Optional[ActivityLogRepository] = None,
        today: Callable[[], date] = date.today,
        min_age: int = 18,
        max_age: int = 120,
        max_face_confidence: float = 100.0,
        decision_max_attempts: int = 3,
    ):
        self.verification_repo = verification_repo
        self.notifier = notifier
        self.activity_log = activity_log
        self.today = today
        self.min_age = min_age
        self.max_age = max_age
        self.max_face_confidence = max_face_confidence
        self.decision_max_attempts = decision_max_attempts

    async def get_record(self, user_id: str) -> VerificationRecord:
        """Get a user's record; users who never submitted get an empty one."""
        record = await self.verification_repo.get(user_id)
        return record or VerificationRecord.empty(user_id)

    async def get_trust_level(self, user_id: str) -> TrustLevel:
        record = await self.get_record(user_id)
        return record.trust_level

    async def list_pending_reviews(self, caller: Caller) -> list[VerificationRecord]:
        """Moderator review queue."""
        self._require_moderator(caller)
        return await self.verification_repo.list_pending_reviews()

    # User submissions

    async def submit_age(self, user_id: str, birth_date: date) -> VerificationRecord:
        """Self-attested age. Accepted immediately when within the allowed range."""
        today = self.today()
        if birth_date > today:
            raise ValidationError("Birth date lies in the future")
        age = calculate_age(birth_date, today)
        if age < self.min_age:
            raise ValidationError(f"You must be at least {self.min_age} years old")
        if age > self.max_age:
            raise ValidationError("Invalid birth date")

        record = await self.get_record(user_id)
        updated = record.evolve(age=AgeVerified(birth_date=birth_date, verified_at=utcnow()))
        await self._write(record, updated, ConflictError("Verification record changed concurrently; retry"))
        logger.info("Age verified for user %s (age %s)", user_id, age)
        await record_event(
            self.activity_log, ActivityLogType.VERIFICATION_SUBMITTED, user_id=user_id,
            metadata={"track": "age"},
        )
        return updated

    async def submit_id_document(self, user_id: str, image_ref: Optional[str]) -> VerificationRecord:
        """Queue an ID document for review. Replaces whatever the track held before."""
        if not image_ref or not image_ref.strip():
            raise ValidationError("An ID document image is required")

        record = await self.get_record(user_id)
        updated = record.evolve(
            id_document=IdPending(image_ref=image_ref.strip(), submitted_at=utcnow())
        )
        await self._write(record, updated, ConflictError("Verification record changed concurrently; retry"))
        logger.info("ID document submitted for user %s", user_id)
        await record_event(
            self.activity_log, ActivityLogType.VERIFICATION_SUBMITTED, user_id=user_id,
            metadata={"track": "id"},
        )
        return updated

    async def submit_face(
        self, user_id: str, image_ref: Optional[str] = None, confidence: Optional[float] = None
    ) -> VerificationRecord:
        """Request a face check. `confidence` is advisory metadata only."""
        self._check_confidence(confidence)
        record = await self.get_record(user_id)
        updated = record.evolve(
            face=FacePending(
                image_ref=image_ref.strip() if image_ref else None,
                confidence=confidence,
                submitted_at=utcnow(),
            )
        )
        await self._write(record, updated, ConflictError("Verification record changed concurrently; retry"))
        logger.info("Face verification requested for user %s", user_id)
        await record_event(
            self.activity_log, ActivityLogType.VERIFICATION_SUBMITTED, user_id=user_id,
            metadata={"track": "face", "has_image": image_ref is not None},
        )
        return updated

    async def record_social_verification(
        self,
        user_id: str,
        platform: Union[SocialPlatform, str],
        status: str = "verified",
        identifier: Optional[str] = None,
        verified_at: Optional[datetime] = None,
    ) -> VerificationRecord:
        """Upsert the linkage for one platform.

        The OTP or OAuth exchange happened upstream; its result is trusted.
        """
        try:
            platform = SocialPlatform(platform)
        except ValueError:
            raise ValidationError(f"Unsupported platform: {platform!r}")
        if status not in ("verified", "pending"):
            raise ValidationError(f"Unsupported social verification status: {status!r}")
        if status == "verified" and verified_at is None:
            verified_at = utcnow()

        entry = SocialVerification(
            platform=platform, status=status, verified_at=verified_at, identifier=identifier
        )
        record = await self.get_record(user_id)
        updated = record.evolve(social={**record.social, platform: entry})
        await self._write(record, updated, ConflictError("Verification record changed concurrently; retry"))
        logger.info("Social verification %s=%s recorded for user %s", platform.value, status, user_id)
        await record_event(
            self.activity_log, ActivityLogType.VERIFICATION_SUBMITTED, user_id=user_id,
            metadata={"track": "social", "platform": platform.value},
        )
        return updated

    # Moderator decisions

    async def moderator_decide_id(
        self,
        caller: Caller,
        user_id: str,
        decision: Union[ModeratorDecision, str],
        reason: Optional[str] = None,
    ) -> VerificationRecord:
        """Verify or reject a pending ID document.

        A lost write is retried against a fresh read as long as the ID
        track is still pending, so edits to other tracks do not block the
        decision.
        """
        self._require_moderator(caller)
        decision = _parse_decision(decision)
        if decision == ModeratorDecision.REJECT and not (reason and reason.strip()):
            raise ValidationError("A rejection reason is required")

        for _ in range(self.decision_max_attempts):
            record = await self.get_record(user_id)
            if not isinstance(record.id_document, IdPending):
                raise InvalidStateError(
                    f"ID verification for user {user_id} is {record.id_document.status}, not pending"
                )

            if decision == ModeratorDecision.VERIFY:
                new_state = IdVerified(verified_at=utcnow())
            else:
                new_state = IdRejected(reason=reason.strip(), rejected_at=utcnow())
            updated = record.evolve(id_document=new_state)
            if await self._try_write(record, updated):
                logger.info(
                    "Moderator %s set ID verification of user %s to %s",
                    caller.user_id, user_id, new_state.status,
                )
                return updated

        raise ConflictError("Verification record kept changing; retry")

    async def moderator_decide_face(
        self,
        caller: Caller,
        user_id: str,
        decision: Union[ModeratorDecision, str],
        confidence: Optional[float] = None,
    ) -> VerificationRecord:
        """Verify or reject a pending face check."""
        self._require_moderator(caller)
        decision = _parse_decision(decision)
        self._check_confidence(confidence)

        for _ in range(self.decision_max_attempts):
            record = await self.get_record(user_id)
            pending = record.face
            if not isinstance(pending, FacePending):
                raise InvalidStateError(
                    f"Face verification for user {user_id} is {pending.status}, not pending"
                )

            if decision == ModeratorDecision.VERIFY:
                new_state = FaceVerified(
                    verified_at=utcnow(),
                    confidence=confidence if confidence is not None else pending.confidence,
                )
            else:
                new_state = FaceFailed(failed_at=utcnow())
            updated = record.evolve(face=new_state)
            if await self._try_write(record, updated):
                logger.info(
                    "Moderator %s set face verification of user %s to %s",
                    caller.user_id, user_id, new_state.status,
                )
                return updated

        raise ConflictError("Verification record kept changing; retry")

    # Helpers

    def _require_moderator(self, caller: Caller) -> None:
        if not caller.is_moderator:
            raise NotAuthorizedError("Moderator role required")

    def _check_confidence(self, confidence: Optional[float]) -> None:
        if confidence is not None and not 0 <= confidence <= self.max_face_confidence:
            raise ValidationError(
                f"Confidence must be between 0 and {self.max_face_confidence}"
            )

    async def _write(
        self, current: VerificationRecord, updated: VerificationRecord, on_conflict: DomainError
    ) -> None:
        if not await self._try_write(current, updated):
            raise on_conflict

    async def _try_write(self, current: VerificationRecord, updated: VerificationRecord) -> bool:
        """Compare-and-swap `updated` over `current`, then announce trust changes."""
        stored = await self.verification_repo.compare_and_swap(updated, expected_version=current.version)
        if not stored:
            logger.warning(
                "Verification write for user %s lost race at version %s", current.user_id, current.version
            )
            return False

        if current.trust_level != updated.trust_level:
            logger.info(
                "Trust level of user %s: %s -> %s",
                updated.user_id, current.trust_level.value, updated.trust_level.value,
            )
            await notify_safely(
                self.notifier,
                updated.user_id,
                "trust_level_changed",
                {
                    "previous": current.trust_level.value,
                    "trust_level": updated.trust_level.value,
                },
            )
        return True
