"""Domain events for the VendorProfile aggregate."""

from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from vendors.domain import vendors


@vendors.event(part_of="VendorProfile")
class OnboardingStepSaved:
    __version__ = 1

    vendor_id: Identifier(required=True)
    step: Integer(required=True)
    is_draft: Boolean(default=False)
    saved_at: DateTime(required=True)


@vendors.event(part_of="VendorProfile")
class VendorSubmittedForVerification:
    __version__ = 1

    vendor_id: Identifier(required=True)
    company_name: String()
    country: String()
    is_controlled_dealer: Boolean(default=False)
    submitted_at: DateTime(required=True)


@vendors.event(part_of="VendorProfile")
class VendorOnboardingReviewed:
    """An admin decided on a vendor's onboarding application.

    `cleared_fields` is a JSON list of the fields wiped for resubmission.
    """

    __version__ = 1

    vendor_id: Identifier(required=True)
    status: String(required=True)
    reviewed_by: Identifier(required=True)
    rejection_reason: Text()
    cleared_fields: Text(default="[]")
    current_step: Integer()
    reviewed_at: DateTime(required=True)
