"""Tests for the verification pipeline."""
from datetime import date, timedelta

import pytest

from meetspot.domain.audit.models import ActivityLogType
from meetspot.domain.common.errors import (
    ConflictError,
    InvalidStateError,
    NotAuthorizedError,
    ValidationError,
)
from meetspot.domain.common.types import Caller
from meetspot.domain.verification.models import (
    AgeVerified,
    FaceFailed,
    FacePending,
    FaceVerified,
    IdPending,
    IdRejected,
    IdVerified,
    SocialPlatform,
    TrustLevel,
    VerificationRecord,
)
from meetspot.domain.verification.services import VerificationService

USER = "user-1"
MEMBER = Caller(user_id="user-2")


class StaleReadRepository:
    """Serves a frozen snapshot from the first `get`, then reads the real store."""

    def __init__(self, inner, snapshot: VerificationRecord):
        self.inner = inner
        self.snapshot = snapshot

    async def get(self, user_id):
        if self.snapshot is not None:
            snapshot, self.snapshot = self.snapshot, None
            return snapshot
        return await self.inner.get(user_id)

    async def compare_and_swap(self, record, expected_version):
        return await self.inner.compare_and_swap(record, expected_version)

    async def list_pending_reviews(self):
        return await self.inner.list_pending_reviews()


class EditAfterReadRepository(StaleReadRepository):
    """Runs a user's edit right after each of the first `times` reads."""

    def __init__(self, inner, edit, times: int = 1):
        super().__init__(inner, None)
        self.edit = edit
        self.times = times

    async def get(self, user_id):
        record = await self.inner.get(user_id)
        if self.times > 0:
            self.times -= 1
            await self.edit()
        return record


async def _fully_verify(service, moderator, user_id=USER):
    await service.submit_age(user_id, date(1990, 5, 1))
    await service.submit_id_document(user_id, "blob://id.jpg")
    await service.moderator_decide_id(moderator, user_id, "verify")
    await service.submit_face(user_id, "blob://selfie.jpg", confidence=93.0)
    return await service.moderator_decide_face(moderator, user_id, "verify")


async def test_unknown_user_has_empty_record(verification_service):
    record = await verification_service.get_record("nobody")
    assert record.version == 0
    assert record.trust_level == TrustLevel.UNVERIFIED


async def test_age_exactly_minimum_is_accepted(verification_service, today):
    birth = date(today.year - 18, today.month, today.day)
    record = await verification_service.submit_age(USER, birth)

    assert isinstance(record.age, AgeVerified)
    assert record.age.birth_date == birth
    assert await verification_service.get_trust_level(USER) == TrustLevel.BASIC


async def test_age_exactly_maximum_is_accepted(verification_service, today):
    birth = date(today.year - 120, today.month, today.day)
    record = await verification_service.submit_age(USER, birth)

    assert isinstance(record.age, AgeVerified)
    assert record.age.birth_date == birth


async def test_age_one_day_short_is_rejected(verification_service, today):
    birth = date(today.year - 18, today.month, today.day) + timedelta(days=1)
    with pytest.raises(ValidationError):
        await verification_service.submit_age(USER, birth)
    assert (await verification_service.get_record(USER)).version == 0


@pytest.mark.parametrize("birth", [date(1905, 1, 1), date(2027, 1, 1)])
async def test_implausible_birth_dates_rejected(verification_service, birth):
    with pytest.raises(ValidationError):
        await verification_service.submit_age(USER, birth)


async def test_resubmitting_age_overwrites(verification_service):
    await verification_service.submit_age(USER, date(1990, 1, 1))
    record = await verification_service.submit_age(USER, date(1991, 2, 2))
    assert record.age.birth_date == date(1991, 2, 2)
    assert record.version == 2


@pytest.mark.parametrize("image_ref", [None, "", "   "])
async def test_id_submission_requires_image(verification_service, image_ref):
    with pytest.raises(ValidationError):
        await verification_service.submit_id_document(USER, image_ref)


async def test_id_resubmission_after_rejection(verification_service, moderator):
    await verification_service.submit_id_document(USER, "blob://a")
    rejected = await verification_service.moderator_decide_id(moderator, USER, "reject", "expired")
    assert isinstance(rejected.id_document, IdRejected)
    assert rejected.id_document.reason == "expired"

    record = await verification_service.submit_id_document(USER, "blob://b")
    assert isinstance(record.id_document, IdPending)
    assert record.id_document.image_ref == "blob://b"


async def test_reject_requires_reason(verification_service, moderator):
    await verification_service.submit_id_document(USER, "blob://a")
    for reason in (None, "", "  "):
        with pytest.raises(ValidationError):
            await verification_service.moderator_decide_id(moderator, USER, "reject", reason)
    record = await verification_service.get_record(USER)
    assert isinstance(record.id_document, IdPending)


async def test_unknown_decision_rejected(verification_service, moderator):
    await verification_service.submit_id_document(USER, "blob://a")
    with pytest.raises(ValidationError):
        await verification_service.moderator_decide_id(moderator, USER, "maybe")


async def test_decision_requires_pending_submission(verification_service, moderator):
    with pytest.raises(InvalidStateError):
        await verification_service.moderator_decide_id(moderator, USER, "verify")
    with pytest.raises(InvalidStateError):
        await verification_service.moderator_decide_face(moderator, USER, "verify")


async def test_second_decision_is_invalid_state(verification_service, moderator):
    await verification_service.submit_id_document(USER, "blob://a")
    await verification_service.moderator_decide_id(moderator, USER, "verify")
    with pytest.raises(InvalidStateError):
        await verification_service.moderator_decide_id(moderator, USER, "reject", "late")


async def test_decision_on_stale_snapshot_loses(verification_service, verification_repo, moderator, today):
    await verification_service.submit_id_document(USER, "blob://a")
    snapshot = await verification_repo.get(USER)

    # Another moderator decides first
    await verification_service.moderator_decide_id(moderator, USER, "verify")

    stale = VerificationService(StaleReadRepository(verification_repo, snapshot), today=lambda: today)
    with pytest.raises(InvalidStateError):
        await stale.moderator_decide_id(moderator, USER, "reject", "blurry")

    record = await verification_repo.get(USER)
    assert isinstance(record.id_document, IdVerified)


async def test_id_decision_survives_face_submission(verification_service, verification_repo, moderator, today):
    await verification_service.submit_age(USER, date(1990, 1, 1))
    await verification_service.submit_id_document(USER, "blob://id")

    racing = VerificationService(
        EditAfterReadRepository(
            verification_repo, lambda: verification_service.submit_face(USER, "blob://selfie", confidence=80.0)
        ),
        today=lambda: today,
    )
    decided = await racing.moderator_decide_id(moderator, USER, "verify")

    assert isinstance(decided.id_document, IdVerified)
    record = await verification_repo.get(USER)
    assert isinstance(record.id_document, IdVerified)
    assert isinstance(record.face, FacePending)
    assert record.face.confidence == 80.0


async def test_face_decision_survives_id_submission(verification_service, verification_repo, moderator, today):
    await verification_service.submit_face(USER, "blob://selfie", confidence=75.0)

    racing = VerificationService(
        EditAfterReadRepository(verification_repo, lambda: verification_service.submit_id_document(USER, "blob://id")),
        today=lambda: today,
    )
    decided = await racing.moderator_decide_face(moderator, USER, "verify")

    assert isinstance(decided.face, FaceVerified)
    assert decided.face.confidence == 75.0
    record = await verification_repo.get(USER)
    assert isinstance(record.id_document, IdPending)


async def test_decision_gives_up_when_record_keeps_changing(verification_service, verification_repo, moderator, today):
    await verification_service.submit_id_document(USER, "blob://id")

    racing = VerificationService(
        EditAfterReadRepository(
            verification_repo, lambda: verification_service.submit_face(USER, "blob://selfie"), times=10
        ),
        today=lambda: today,
        decision_max_attempts=2,
    )
    with pytest.raises(ConflictError):
        await racing.moderator_decide_id(moderator, USER, "verify")

    record = await verification_repo.get(USER)
    assert isinstance(record.id_document, IdPending)


async def test_stale_submission_is_conflict(verification_service, verification_repo, today):
    await verification_service.submit_age(USER, date(1990, 1, 1))
    snapshot = await verification_repo.get(USER)
    await verification_service.submit_id_document(USER, "blob://a")

    stale = VerificationService(StaleReadRepository(verification_repo, snapshot), today=lambda: today)
    with pytest.raises(ConflictError):
        await stale.submit_face(USER)


async def test_compare_and_swap_checks_version(verification_repo, session_factory):
    from meetspot.infra.db.repositories.verification_repo import VerificationRepositoryImpl

    record = VerificationRecord.empty(USER).evolve()
    assert await verification_repo.compare_and_swap(record, expected_version=0)

    async with session_factory() as other_session:
        other_repo = VerificationRepositoryImpl(other_session)
        assert not await other_repo.compare_and_swap(record, expected_version=0)

    newer = record.evolve()
    assert not await verification_repo.compare_and_swap(newer, expected_version=5)
    assert await verification_repo.compare_and_swap(newer, expected_version=1)
    assert (await verification_repo.get(USER)).version == 2


async def test_non_moderator_cannot_decide(verification_service):
    await verification_service.submit_id_document(USER, "blob://a")
    with pytest.raises(NotAuthorizedError):
        await verification_service.moderator_decide_id(MEMBER, USER, "verify")
    with pytest.raises(NotAuthorizedError):
        await verification_service.moderator_decide_face(MEMBER, USER, "verify")
    with pytest.raises(NotAuthorizedError):
        await verification_service.list_pending_reviews(MEMBER)


async def test_full_pipeline_reaches_fully_verified(verification_service, moderator, notifier):
    record = await _fully_verify(verification_service, moderator)

    assert record.trust_level == TrustLevel.FULLY_VERIFIED
    changes = [payload for _, _, payload in notifier.of_type("trust_level_changed")]
    assert changes == [
        {"previous": "unverified", "trust_level": "basic"},
        {"previous": "basic", "trust_level": "id_verified"},
        {"previous": "id_verified", "trust_level": "fully_verified"},
    ]


async def test_no_notification_without_trust_change(verification_service, notifier):
    await verification_service.submit_id_document(USER, "blob://a")
    await verification_service.record_social_verification(USER, "phone", identifier="+4915100000")
    assert notifier.sent == []


async def test_failed_notification_does_not_fail_operation(verification_repo, failing_notifier, today):
    service = VerificationService(verification_repo, notifier=failing_notifier, today=lambda: today)
    record = await service.submit_age(USER, date(1990, 1, 1))
    assert record.trust_level == TrustLevel.BASIC
    assert (await verification_repo.get(USER)).trust_level == TrustLevel.BASIC


async def test_face_confidence_retained_from_submission(verification_service, moderator):
    await verification_service.submit_face(USER, confidence=88.5)
    record = await verification_service.moderator_decide_face(moderator, USER, "verify")
    assert isinstance(record.face, FaceVerified)
    assert record.face.confidence == 88.5


async def test_face_confidence_overridden_by_moderator(verification_service, moderator):
    await verification_service.submit_face(USER, confidence=88.5)
    record = await verification_service.moderator_decide_face(moderator, USER, "verify", confidence=99.0)
    assert record.face.confidence == 99.0


@pytest.mark.parametrize("confidence", [-1.0, 100.5])
async def test_face_confidence_range(verification_service, confidence):
    with pytest.raises(ValidationError):
        await verification_service.submit_face(USER, confidence=confidence)


async def test_face_reject_then_retry(verification_service, moderator):
    await verification_service.submit_face(USER)
    failed = await verification_service.moderator_decide_face(moderator, USER, "reject")
    assert isinstance(failed.face, FaceFailed)
    retried = await verification_service.submit_face(USER, "blob://selfie2.jpg")
    assert isinstance(retried.face, FacePending)


async def test_face_without_id_stays_unverified(verification_service, moderator):
    await verification_service.submit_age(USER, date(1990, 1, 1))
    await verification_service.submit_face(USER)
    record = await verification_service.moderator_decide_face(moderator, USER, "verify")
    assert record.trust_level == TrustLevel.UNVERIFIED


async def test_id_verified_does_not_imply_age(verification_service, moderator):
    await verification_service.submit_id_document(USER, "blob://a")
    record = await verification_service.moderator_decide_id(moderator, USER, "verify")
    assert record.trust_level == TrustLevel.UNVERIFIED


async def test_social_verification_upsert(verification_service):
    await verification_service.record_social_verification(USER, "google", status="pending")
    record = await verification_service.record_social_verification(USER, SocialPlatform.GOOGLE)

    assert record.verified_platforms == [SocialPlatform.GOOGLE]
    assert record.social[SocialPlatform.GOOGLE].verified_at is not None
    assert record.trust_level == TrustLevel.UNVERIFIED


async def test_social_verification_rejects_unknown_platform(verification_service):
    with pytest.raises(ValidationError):
        await verification_service.record_social_verification(USER, "myspace")
    with pytest.raises(ValidationError):
        await verification_service.record_social_verification(USER, "phone", status="rejected")


async def test_pending_review_queue(verification_service, moderator):
    await verification_service.submit_id_document("u-a", "blob://a")
    await verification_service.submit_face("u-b")
    await verification_service.submit_age("u-c", date(1990, 1, 1))

    queue = await verification_service.list_pending_reviews(moderator)
    assert {r.user_id for r in queue} == {"u-a", "u-b"}

    await verification_service.moderator_decide_id(moderator, "u-a", "verify")
    queue = await verification_service.list_pending_reviews(moderator)
    assert [r.user_id for r in queue] == ["u-b"]


async def test_submissions_are_audited(verification_service, log_repo):
    await verification_service.submit_age(USER, date(1990, 1, 1))
    await verification_service.submit_face(USER)

    entries = await log_repo.list_recent(log_type=ActivityLogType.VERIFICATION_SUBMITTED)
    assert sorted(e.metadata["track"] for e in entries) == ["age", "face"]
    assert all(e.user_id == USER for e in entries)
