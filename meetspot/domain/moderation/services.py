"""Moderation domain services."""
import logging
from typing import Optional, Protocol, Union

from meetspot.domain.audit.models import ActivityLogType
from meetspot.domain.audit.services import ActivityLogRepository, record_event
from meetspot.domain.common.errors import (
    ConflictError,
    NotAuthorizedError,
    NotFoundError,
    ValidationError,
)
from meetspot.domain.common.notifications import Notifier, notify_safely
from meetspot.domain.common.types import Caller, utcnow
from meetspot.domain.moderation.models import (
    BusinessProfile,
    BusinessStatus,
    CapabilityOverrides,
    Report,
    ReportStatus,
)

logger = logging.getLogger(__name__)


class ReportRepository(Protocol):
    """Report repository protocol."""

    async def create(self, report: Report) -> Report:
        ...

    async def get(self, report_id: str) -> Optional[Report]:
        ...

    async def update_status(self, report_id: str, status: ReportStatus) -> Optional[Report]:
        """Set the status. Returns None if the report does not exist."""
        ...

    async def list_by_status(self, status: Optional[ReportStatus] = None) -> list[Report]:
        """List reports, newest first."""
        ...


class BusinessProfileRepository(Protocol):
    """Business profile repository protocol."""

    async def create(self, profile: BusinessProfile) -> BusinessProfile:
        """Insert a profile. Raises ConflictError if the owner already has one."""
        ...

    async def get(self, business_id: str) -> Optional[BusinessProfile]:
        ...

    async def get_by_owner(self, owner_user_id: str) -> Optional[BusinessProfile]:
        ...

    async def update(self, business_id: str, changes: dict) -> Optional[BusinessProfile]:
        """Write only the given columns. Returns None if the profile does not exist."""
        ...

    async def add_credits(self, business_id: str, amount: int) -> Optional[BusinessProfile]:
        """Atomically add to the credit balance."""
        ...


def _parse(enum_cls, value, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Unknown {label}: {value!r}")


class ModerationService:
    """Reports and business profiles.

    Only moderators move reports and business profiles between statuses;
    any user can file a report or register a business.
    """

    def __init__(
        self,
        report_repo: ReportRepository,
        business_repo: BusinessProfileRepository,
        notifier: Optional[Notifier] = None,
        activity_log: Optional[ActivityLogRepository] = None,
    ):
        self.report_repo = report_repo
        self.business_repo = business_repo
        self.notifier = notifier
        self.activity_log = activity_log

    # Reports

    async def create_report(
        self,
        reporter_id: str,
        reason: str,
        reported_activity_id: Optional[str] = None,
        reported_user_id: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> Report:
        """File a report about an activity, a user, or both."""
        if not reason or not reason.strip():
            raise ValidationError("A report reason is required")
        if not reported_activity_id and not reported_user_id:
            raise ValidationError("A report must name an activity or a user")
        if reported_user_id == reporter_id:
            raise ValidationError("Cannot report yourself")

        report = await self.report_repo.create(
            Report.create(
                reporter_id=reporter_id,
                reason=reason.strip(),
                reported_activity_id=reported_activity_id,
                reported_user_id=reported_user_id,
                comment=comment,
            )
        )
        logger.info(
            "Report %s filed by %s (activity=%s, user=%s)",
            report.id, reporter_id, reported_activity_id, reported_user_id,
        )
        await record_event(
            self.activity_log, ActivityLogType.REPORT_CREATED, user_id=reporter_id,
            activity_id=reported_activity_id,
            metadata={"report_id": report.id, "reported_user_id": reported_user_id},
        )
        return report

    async def list_reports(
        self, caller: Caller, status: Optional[Union[ReportStatus, str]] = None
    ) -> list[Report]:
        self._require_moderator(caller)
        if status is not None:
            status = _parse(ReportStatus, status, "report status")
        return await self.report_repo.list_by_status(status=status)

    async def set_report_status(
        self, caller: Caller, report_id: str, status: Union[ReportStatus, str]
    ) -> Report:
        """Move a report to any status."""
        self._require_moderator(caller)
        status = _parse(ReportStatus, status, "report status")

        report = await self.report_repo.get(report_id)
        if not report:
            raise NotFoundError("Report", report_id)
        if report.status == status:
            return report

        updated = await self.report_repo.update_status(report_id, status)
        if updated is None:
            raise NotFoundError("Report", report_id)
        logger.info(
            "Moderator %s moved report %s from %s to %s",
            caller.user_id, report_id, report.status.value, status.value,
        )
        await notify_safely(
            self.notifier,
            updated.reporter_id,
            "report_status_changed",
            {"report_id": report_id, "status": status.value},
        )
        return updated

    # Business profiles

    async def create_business_profile(
        self,
        owner_user_id: str,
        business_name: str,
        description: Optional[str] = None,
        website: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> BusinessProfile:
        """Register a business. New profiles await moderator verification."""
        if not business_name or not business_name.strip():
            raise ValidationError("Business name is required")
        if await self.business_repo.get_by_owner(owner_user_id):
            raise ConflictError("User already has a business profile")

        profile = await self.business_repo.create(
            BusinessProfile.create(
                owner_user_id=owner_user_id,
                business_name=business_name.strip(),
                description=description,
                website=website,
                phone=phone,
            )
        )
        logger.info("Business profile %s created for %s", profile.id, owner_user_id)
        await record_event(
            self.activity_log, ActivityLogType.BUSINESS_PROFILE_CREATED, user_id=owner_user_id,
            metadata={"business_id": profile.id},
        )
        return profile

    async def get_business_profile(self, business_id: str) -> BusinessProfile:
        profile = await self.business_repo.get(business_id)
        if not profile:
            raise NotFoundError("BusinessProfile", business_id)
        return profile

    async def set_business_status(
        self,
        caller: Caller,
        business_id: str,
        status: Union[BusinessStatus, str],
        overrides: Optional[CapabilityOverrides] = None,
    ) -> BusinessProfile:
        """Set the status, optionally changing capabilities in the same write.

        Verifying stamps who verified and when; capabilities are only
        touched when given.
        """
        self._require_moderator(caller)
        status = _parse(BusinessStatus, status, "business status")
        if overrides is not None:
            self._check_overrides(overrides)

        profile = await self.get_business_profile(business_id)
        changes = {"status": status}
        if status == BusinessStatus.VERIFIED:
            changes["verified_at"] = utcnow()
            changes["verified_by"] = caller.user_id
        if overrides is not None:
            changes.update(overrides.model_dump(exclude_none=True))

        # Only changed columns are written; credits move through add_credits too
        saved = await self.business_repo.update(business_id, changes)
        if saved is None:
            raise NotFoundError("BusinessProfile", business_id)
        logger.info(
            "Moderator %s set business %s status %s -> %s",
            caller.user_id, business_id, profile.status.value, status.value,
        )
        return saved

    async def update_capabilities(
        self, caller: Caller, business_id: str, overrides: CapabilityOverrides
    ) -> BusinessProfile:
        """Change capability flags or credits without touching the status."""
        self._require_moderator(caller)
        self._check_overrides(overrides)

        profile = await self.get_business_profile(business_id)
        if overrides.is_empty():
            return profile
        saved = await self.business_repo.update(business_id, overrides.model_dump(exclude_none=True))
        if saved is None:
            raise NotFoundError("BusinessProfile", business_id)
        logger.info(
            "Moderator %s updated capabilities of business %s: %s",
            caller.user_id, business_id, overrides.model_dump(exclude_none=True),
        )
        return saved

    async def add_promotion_credits(
        self, caller: Caller, business_id: str, amount: int
    ) -> BusinessProfile:
        """Top up promotion credits. Allowed for the owner and for moderators."""
        if amount <= 0:
            raise ValidationError("Amount must be positive")
        profile = await self.get_business_profile(business_id)
        if caller.user_id != profile.owner_user_id and not caller.is_moderator:
            raise NotAuthorizedError("Only the owner can buy credits for this business")

        updated = await self.business_repo.add_credits(business_id, amount)
        if updated is None:
            raise NotFoundError("BusinessProfile", business_id)
        logger.info(
            "Business %s credited %s promotion credits (balance %s)",
            business_id, amount, updated.promotion_credits,
        )
        await record_event(
            self.activity_log, ActivityLogType.CREDITS_PURCHASED, user_id=caller.user_id,
            metadata={"business_id": business_id, "amount": amount},
        )
        return updated

    def _require_moderator(self, caller: Caller) -> None:
        if not caller.is_moderator:
            raise NotAuthorizedError("Moderator role required")

    def _check_overrides(self, overrides: CapabilityOverrides) -> None:
        if overrides.promotion_credits is not None and overrides.promotion_credits < 0:
            raise ValidationError("Promotion credits cannot be negative")
