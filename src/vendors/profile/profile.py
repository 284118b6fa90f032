"""VendorProfile aggregate — the vendor onboarding application."""

import json
from datetime import UTC, date, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, Date, DateTime, Identifier, Integer, String, Text

from vendors.domain import vendors


class OnboardingStatus(Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    PENDING_VERIFICATION = "pending_verification"
    REJECTED = "rejected"
    APPROVED_GENERAL = "approved_general"
    APPROVED_CONTROLLED = "approved_controlled"
    UPDATE_NEEDED = "update_needed"


REVIEW_OUTCOMES = (
    OnboardingStatus.APPROVED_GENERAL.value,
    OnboardingStatus.APPROVED_CONTROLLED.value,
    OnboardingStatus.REJECTED.value,
    OnboardingStatus.UPDATE_NEEDED.value,
)

_LOCKED_STATUSES = (
    OnboardingStatus.PENDING_VERIFICATION.value,
    OnboardingStatus.APPROVED_GENERAL.value,
    OnboardingStatus.APPROVED_CONTROLLED.value,
)

# Fields owned by each form step. Used to roll the form back when an admin
# clears fields, and to decide whether a step is complete.
STEP_FIELDS = {
    0: ("country", "company_type"),
    1: (
        "company_name",
        "trade_license_number",
        "license_expiry",
        "company_address",
        "city",
        "company_email",
        "company_phone",
    ),
    2: ("contact_name", "contact_email", "contact_phone", "contact_designation", "terms_accepted"),
    3: ("compliance_terms_accepted", "is_controlled_dealer", "controlled_license_number"),
    4: ("selling_categories",),
    5: ("bank_name", "account_number", "iban", "bank_proof_type", "bank_proof_url"),
}

FIELD_STEPS = {field: step for step, fields in STEP_FIELDS.items() if step > 0 for field in fields}

REQUIRED_FOR_SUBMISSION = {
    1: ("company_name", "trade_license_number", "company_address", "city"),
    2: ("contact_name", "contact_email", "contact_phone", "terms_accepted"),
    3: ("compliance_terms_accepted",),
    4: ("selling_categories",),
    5: ("bank_name", "account_number", "bank_proof_type", "bank_proof_url"),
}

_BOOLEAN_FIELDS = ("terms_accepted", "compliance_terms_accepted", "is_controlled_dealer")


@vendors.aggregate
class VendorProfile:
    """Onboarding application for one vendor account.

    The profile is keyed by the vendor's account id. `current_step` is the
    step the vendor is working on and is None once the application has
    been submitted.
    """

    vendor_id: Identifier(identifier=True)

    # Step 0: basics
    country: String(max_length=100)
    company_type: String(max_length=50)

    # Step 1: company
    company_name: String(max_length=255)
    trade_license_number: String(max_length=100)
    license_expiry: Date()
    company_address: Text()
    city: String(max_length=100)
    company_email: String(max_length=254)
    company_phone: String(max_length=30)

    # Step 2: contact person
    contact_name: String(max_length=150)
    contact_email: String(max_length=254)
    contact_phone: String(max_length=30)
    contact_designation: String(max_length=100)
    terms_accepted: Boolean(default=False)

    # Step 3: declaration
    compliance_terms_accepted: Boolean(default=False)
    is_controlled_dealer: Boolean(default=False)
    controlled_license_number: String(max_length=100)

    # Step 4: selling categories
    selling_categories: Text(default="[]")

    # Step 5: bank
    bank_name: String(max_length=150)
    account_number: String(max_length=50)
    iban: String(max_length=50)
    bank_proof_type: String(max_length=50)
    bank_proof_url: String(max_length=500)

    # Review state
    current_step: Integer(min_value=0, max_value=5)
    onboarding_status: String(choices=OnboardingStatus, default=OnboardingStatus.NOT_STARTED.value)
    rejection_reason: Text()
    submitted_at: DateTime()
    reviewed_at: DateTime()
    reviewed_by: Identifier()
    created_at: DateTime(default=lambda: datetime.now(UTC))
    updated_at: DateTime(default=lambda: datetime.now(UTC))

    @classmethod
    def start(cls, vendor_id):
        return cls(vendor_id=vendor_id, onboarding_status=OnboardingStatus.NOT_STARTED.value)

    @property
    def categories(self):
        return json.loads(self.selling_categories or "[]")

    @property
    def is_approved(self):
        return self.onboarding_status in (
            OnboardingStatus.APPROVED_GENERAL.value,
            OnboardingStatus.APPROVED_CONTROLLED.value,
        )

    # -------------------------------------------------------------------
    # Form steps
    # -------------------------------------------------------------------
    def _assert_editable(self):
        if self.onboarding_status in _LOCKED_STATUSES:
            raise ValidationError(
                {"onboarding_status": [f"Onboarding cannot be edited while {self.onboarding_status}"]}
            )

    def save_step(self, step, is_draft=False, **values):
        """Store the values of one form step and move the form to that step."""
        from vendors.profile.events import OnboardingStepSaved

        if step not in STEP_FIELDS:
            raise ValidationError({"step": [f"Unknown onboarding step {step}"]})
        self._assert_editable()

        unknown = set(values) - set(STEP_FIELDS[step])
        if unknown:
            raise ValidationError({"step": [f"Fields {sorted(unknown)} do not belong to step {step}"]})

        for field, value in values.items():
            if field == "selling_categories":
                value = json.dumps(list(value or []))
            setattr(self, field, value)

        now = datetime.now(UTC)
        self.current_step = step
        self.onboarding_status = OnboardingStatus.IN_PROGRESS.value
        self.updated_at = now
        self.raise_(OnboardingStepSaved(vendor_id=self.vendor_id, step=step, is_draft=is_draft, saved_at=now))

    def incomplete_steps(self):
        missing = []
        for step, fields in REQUIRED_FOR_SUBMISSION.items():
            for field in fields:
                value = self.categories if field == "selling_categories" else getattr(self, field)
                if not value:
                    missing.append(step)
                    break
        return missing

    def submit_for_verification(self):
        from vendors.profile.events import VendorSubmittedForVerification

        self._assert_editable()
        missing = self.incomplete_steps()
        if missing:
            raise ValidationError(
                {"onboarding": [f"Complete step {', '.join(str(s) for s in missing)} before submitting"]}
            )

        now = datetime.now(UTC)
        self.onboarding_status = OnboardingStatus.PENDING_VERIFICATION.value
        self.current_step = None
        self.submitted_at = now
        self.updated_at = now
        self.raise_(
            VendorSubmittedForVerification(
                vendor_id=self.vendor_id,
                company_name=self.company_name,
                country=self.country,
                is_controlled_dealer=self.is_controlled_dealer,
                submitted_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Admin review
    # -------------------------------------------------------------------
    def _clear_fields(self, fields):
        cleared = []
        for field in fields or []:
            if field not in FIELD_STEPS:
                continue
            if field == "selling_categories":
                self.selling_categories = "[]"
            elif field in _BOOLEAN_FIELDS:
                setattr(self, field, False)
            else:
                setattr(self, field, None)
            cleared.append(field)
        return cleared

    def review(self, status, reviewed_by, note=None, fields_to_clear=None, target_step=None):
        """Record an admin decision.

        Rejections and update requests wipe the listed fields and send the
        vendor back to the earliest step owning one of them, unless the
        admin names a `target_step`.
        """
        from vendors.profile.events import VendorOnboardingReviewed

        if status not in REVIEW_OUTCOMES:
            raise ValidationError({"status": [f"Status must be one of {', '.join(REVIEW_OUTCOMES)}"]})

        cleared = []
        if status in (OnboardingStatus.REJECTED.value, OnboardingStatus.UPDATE_NEEDED.value):
            self.rejection_reason = note
            cleared = self._clear_fields(fields_to_clear)
            if target_step is not None:
                self.current_step = target_step
            elif cleared:
                self.current_step = min(FIELD_STEPS[f] for f in cleared)
            else:
                self.current_step = 1
        else:
            self.rejection_reason = None

        now = datetime.now(UTC)
        self.onboarding_status = status
        self.reviewed_at = now
        self.reviewed_by = reviewed_by
        self.updated_at = now
        self.raise_(
            VendorOnboardingReviewed(
                vendor_id=self.vendor_id,
                status=status,
                reviewed_by=reviewed_by,
                rejection_reason=self.rejection_reason,
                cleared_fields=json.dumps(cleared),
                current_step=self.current_step,
                reviewed_at=now,
            )
        )

    def as_dict(self):
        data = {field: getattr(self, field) for fields in STEP_FIELDS.values() for field in fields}
        data["selling_categories"] = self.categories
        if isinstance(self.license_expiry, date):
            data["license_expiry"] = self.license_expiry.isoformat()
        data.update(
            vendor_id=str(self.vendor_id),
            current_step=self.current_step,
            onboarding_status=self.onboarding_status,
            rejection_reason=self.rejection_reason,
            reviewed_by=str(self.reviewed_by) if self.reviewed_by else None,
            reviewed_at=self.reviewed_at.isoformat() if self.reviewed_at else None,
        )
        return data
