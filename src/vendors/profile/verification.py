"""Submitting an onboarding application and the admin review of it.

Reviewing needs `vendor.approve`. Approving a vendor for controlled trade,
or deciding on a UAE vendor that declared itself a controlled dealer,
needs `vendor.controlled.approve`, which also covers ordinary reviews.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from shared.access import Permission, actor_from, require_admin, require_permission
from shared.regions import is_uae
from vendors.domain import vendors
from vendors.profile.profile import REVIEW_OUTCOMES, OnboardingStatus, VendorProfile

logger = structlog.get_logger(__name__)


@vendors.command(part_of="VendorProfile")
class SubmitForVerification:
    vendor_id: Identifier(required=True)


@vendors.command(part_of="VendorProfile")
class ReviewVendorOnboarding:
    vendor_id: Identifier(required=True)
    status: String(required=True, max_length=30)
    note: Text()
    fields_to_clear: Text(default="[]")  # JSON list of field names
    target_step: Integer(min_value=0, max_value=5)
    reviewer_id: Identifier(required=True)
    reviewer_type: String(required=True, max_length=20)
    reviewer_permissions: Text()  # comma-separated permission codes


def required_onboarding_permission(profile, status) -> str:
    """Permission code needed to move `profile` to `status`."""
    if status == OnboardingStatus.APPROVED_CONTROLLED.value:
        return Permission.VENDOR_CONTROLLED_APPROVE.value
    if profile.is_controlled_dealer and is_uae(profile.country):
        return Permission.VENDOR_CONTROLLED_APPROVE.value
    return Permission.VENDOR_APPROVE.value


def profile_for_vendor(vendor_id):
    return current_domain.repository_for(VendorProfile).get(vendor_id)


def profiles_by_status(status=None):
    """Admin listing, most recently updated first."""
    query = current_domain.repository_for(VendorProfile)._dao.query
    if status:
        query = query.filter(onboarding_status=status)
    profiles = query.limit(1000).all().items
    return sorted(profiles, key=lambda p: p.updated_at, reverse=True)


@vendors.command_handler(part_of=VendorProfile)
class OnboardingVerificationHandler:
    @handle(SubmitForVerification)
    def submit_for_verification(self, command):
        repo = current_domain.repository_for(VendorProfile)
        profile = repo.get(command.vendor_id)
        profile.submit_for_verification()
        repo.add(profile)

    @handle(ReviewVendorOnboarding)
    def review_onboarding(self, command):
        if command.status not in REVIEW_OUTCOMES:
            raise ValidationError({"status": ["Invalid status"]})

        reviewer = actor_from(command.reviewer_id, command.reviewer_type, command.reviewer_permissions)
        require_admin(reviewer)

        repo = current_domain.repository_for(VendorProfile)
        profile = repo.get(command.vendor_id)

        required = required_onboarding_permission(profile, command.status)
        if required == Permission.VENDOR_APPROVE.value:
            require_permission(reviewer, required, Permission.VENDOR_CONTROLLED_APPROVE.value)
        else:
            require_permission(reviewer, required)

        profile.review(
            status=command.status,
            reviewed_by=reviewer.id,
            note=command.note,
            fields_to_clear=json.loads(command.fields_to_clear or "[]"),
            target_step=command.target_step,
        )
        repo.add(profile)
        logger.info(
            "Vendor onboarding reviewed",
            vendor_id=str(profile.vendor_id),
            status=command.status,
            reviewer_id=reviewer.id,
            required_permission=required,
        )
