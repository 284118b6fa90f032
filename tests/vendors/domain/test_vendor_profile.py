"""Domain tests for the VendorProfile aggregate."""

import json

import pytest
from protean.exceptions import ValidationError
from vendors.profile.events import OnboardingStepSaved, VendorOnboardingReviewed, VendorSubmittedForVerification
from vendors.profile.profile import OnboardingStatus, VendorProfile


def _complete_profile():
    profile = VendorProfile.start("vendor-1")
    profile.save_step(0, country="UAE", company_type="llc")
    profile.save_step(
        1,
        company_name="Gulf Safety Supplies",
        trade_license_number="DED-889102",
        company_address="Al Quoz 3",
        city="Dubai",
    )
    profile.save_step(
        2,
        contact_name="Omar",
        contact_email="omar@gulfsafety.ae",
        contact_phone="+971501112222",
        terms_accepted=True,
    )
    profile.save_step(3, compliance_terms_accepted=True)
    profile.save_step(4, selling_categories=["cat-1"])
    profile.save_step(
        5,
        bank_name="Emirates NBD",
        account_number="1012345678",
        bank_proof_type="bank_letter",
        bank_proof_url="https://files.example.com/proof.pdf",
    )
    return profile


class TestFormSteps:
    def test_new_profile_has_not_started(self):
        profile = VendorProfile.start("vendor-1")
        assert profile.onboarding_status == OnboardingStatus.NOT_STARTED.value
        assert profile.current_step is None

    def test_saving_a_step_moves_the_form_to_it(self):
        profile = VendorProfile.start("vendor-1")
        profile.save_step(0, country="UAE")
        assert profile.current_step == 0
        assert profile.onboarding_status == OnboardingStatus.IN_PROGRESS.value

        event = profile._events[-1]
        assert isinstance(event, OnboardingStepSaved)
        assert event.step == 0

    def test_categories_are_stored_as_json(self):
        profile = VendorProfile.start("vendor-1")
        profile.save_step(4, selling_categories=["cat-1", "cat-2"])
        assert json.loads(profile.selling_categories) == ["cat-1", "cat-2"]
        assert profile.categories == ["cat-1", "cat-2"]

    def test_fields_from_another_step_are_rejected(self):
        profile = VendorProfile.start("vendor-1")
        with pytest.raises(ValidationError):
            profile.save_step(1, bank_name="Emirates NBD")

    def test_unknown_step_is_rejected(self):
        with pytest.raises(ValidationError):
            VendorProfile.start("vendor-1").save_step(6)


class TestSubmission:
    def test_incomplete_steps_are_reported(self):
        profile = VendorProfile.start("vendor-1")
        profile.save_step(0, country="UAE")
        assert profile.incomplete_steps() == [1, 2, 3, 4, 5]

    def test_cannot_submit_incomplete_profile(self):
        profile = VendorProfile.start("vendor-1")
        profile.save_step(0, country="UAE")
        with pytest.raises(ValidationError) as exc:
            profile.submit_for_verification()
        assert "onboarding" in exc.value.messages

    def test_submission_clears_current_step(self):
        profile = _complete_profile()
        profile.submit_for_verification()

        assert profile.onboarding_status == OnboardingStatus.PENDING_VERIFICATION.value
        assert profile.current_step is None
        assert profile.submitted_at.tzinfo is not None
        assert isinstance(profile._events[-1], VendorSubmittedForVerification)

    def test_steps_are_locked_while_pending(self):
        profile = _complete_profile()
        profile.submit_for_verification()
        with pytest.raises(ValidationError):
            profile.save_step(1, company_name="Renamed")

    def test_steps_are_locked_once_approved(self):
        profile = _complete_profile()
        profile.submit_for_verification()
        profile.review("approved_general", reviewed_by="admin-1")
        with pytest.raises(ValidationError):
            profile.save_step(5, bank_name="Another Bank")


class TestReview:
    def test_approval_records_reviewer(self):
        profile = _complete_profile()
        profile.submit_for_verification()
        profile.review("approved_controlled", reviewed_by="admin-1")

        assert profile.is_approved
        assert str(profile.reviewed_by) == "admin-1"
        assert profile.reviewed_at.tzinfo is not None

        event = profile._events[-1]
        assert isinstance(event, VendorOnboardingReviewed)
        assert event.status == "approved_controlled"

    def test_unknown_outcome_is_rejected(self):
        profile = _complete_profile()
        with pytest.raises(ValidationError):
            profile.review("approved", reviewed_by="admin-1")

    def test_update_needed_clears_fields_and_rolls_back(self):
        profile = _complete_profile()
        profile.submit_for_verification()
        profile.review(
            "update_needed",
            reviewed_by="admin-1",
            note="Proof is unreadable",
            fields_to_clear=["bank_proof_url", "contact_email"],
        )

        assert profile.bank_proof_url is None
        assert profile.contact_email is None
        assert profile.current_step == 2
        assert profile.rejection_reason == "Proof is unreadable"
        assert json.loads(profile._events[-1].cleared_fields) == ["bank_proof_url", "contact_email"]

    def test_unknown_fields_are_ignored(self):
        profile = _complete_profile()
        profile.review("rejected", reviewed_by="admin-1", fields_to_clear=["password", "bank_name"])
        assert profile.bank_name is None
        assert profile.current_step == 5

    def test_clearing_categories_and_flags(self):
        profile = _complete_profile()
        profile.review("rejected", reviewed_by="admin-1", fields_to_clear=["selling_categories", "terms_accepted"])
        assert profile.categories == []
        assert profile.terms_accepted is False
        assert profile.current_step == 2

    def test_target_step_overrides_rollback(self):
        profile = _complete_profile()
        profile.review("update_needed", reviewed_by="admin-1", fields_to_clear=["bank_name"], target_step=1)
        assert profile.current_step == 1

    def test_rejection_without_cleared_fields_returns_to_step_one(self):
        profile = _complete_profile()
        profile.review("rejected", reviewed_by="admin-1", note="Licence expired")
        assert profile.current_step == 1
        assert profile.onboarding_status == OnboardingStatus.REJECTED.value

    def test_rejected_profile_can_be_edited_again(self):
        profile = _complete_profile()
        profile.review("rejected", reviewed_by="admin-1", fields_to_clear=["bank_name"])
        profile.save_step(5, bank_name="Mashreq")
        assert profile.onboarding_status == OnboardingStatus.IN_PROGRESS.value
