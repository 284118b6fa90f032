"""Application tests for the onboarding steps and the admin review."""

import json

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from shared.access import AccessDenied
from vendors.profile.profile import VendorProfile
from vendors.profile.steps import (
    SaveBankDetails,
    SaveCompanyBasics,
    SaveCompanyDetails,
    SaveContactPerson,
    SaveDeclaration,
    SaveSellingCategories,
)
from vendors.profile.verification import (
    ReviewVendorOnboarding,
    SubmitForVerification,
    profiles_by_status,
    required_onboarding_permission,
)


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _onboard(vendor_id="vendor-1", country="UAE", controlled=False, submit=True):
    _process(SaveCompanyBasics(vendor_id=vendor_id, country=country, company_type="llc"))
    _process(
        SaveCompanyDetails(
            vendor_id=vendor_id,
            company_name="Gulf Safety Supplies",
            trade_license_number="DED-889102",
            company_address="Al Quoz 3",
            city="Dubai",
        )
    )
    _process(
        SaveContactPerson(
            vendor_id=vendor_id,
            contact_name="Omar",
            contact_email="omar@gulfsafety.ae",
            contact_phone="+971501112222",
            terms_accepted=True,
        )
    )
    _process(SaveDeclaration(vendor_id=vendor_id, compliance_terms_accepted=True, is_controlled_dealer=controlled))
    _process(SaveSellingCategories(vendor_id=vendor_id, selling_categories=json.dumps(["cat-1"])))
    _process(
        SaveBankDetails(
            vendor_id=vendor_id,
            bank_name="Emirates NBD",
            account_number="1012345678",
            bank_proof_type="bank_letter",
            bank_proof_url="https://files.example.com/proof.pdf",
        )
    )
    if submit:
        _process(SubmitForVerification(vendor_id=vendor_id))


def _review(status, vendor_id="vendor-1", permissions="vendor.approve", actor_type="admin", **extra):
    _process(
        ReviewVendorOnboarding(
            vendor_id=vendor_id,
            status=status,
            reviewer_id="admin-1",
            reviewer_type=actor_type,
            reviewer_permissions=permissions,
            **extra,
        )
    )


def _profile(vendor_id="vendor-1"):
    return current_domain.repository_for(VendorProfile).get(vendor_id)


class TestSteps:
    def test_step_zero_opens_the_profile(self):
        _process(SaveCompanyBasics(vendor_id="vendor-1", country="UAE"))
        profile = _profile()
        assert profile.country == "UAE"
        assert profile.current_step == 0

    def test_later_steps_need_a_profile(self):
        with pytest.raises(ValidationError) as exc:
            _process(SaveCompanyDetails(vendor_id="vendor-1", company_name="Gulf Safety"))
        assert "onboarding" in exc.value.messages

    def test_contact_step_requires_terms(self):
        _process(SaveCompanyBasics(vendor_id="vendor-1", country="UAE"))
        with pytest.raises(ValidationError) as exc:
            _process(
                SaveContactPerson(
                    vendor_id="vendor-1",
                    contact_name="Omar",
                    contact_email="omar@gulfsafety.ae",
                    contact_phone="+971501112222",
                )
            )
        assert "terms_accepted" in exc.value.messages

    def test_declaration_requires_compliance_terms(self):
        _process(SaveCompanyBasics(vendor_id="vendor-1", country="UAE"))
        with pytest.raises(ValidationError):
            _process(SaveDeclaration(vendor_id="vendor-1"))

    def test_categories_required_unless_draft(self):
        _process(SaveCompanyBasics(vendor_id="vendor-1", country="UAE"))
        with pytest.raises(ValidationError):
            _process(SaveSellingCategories(vendor_id="vendor-1"))

        _process(SaveSellingCategories(vendor_id="vendor-1", is_draft=True))
        assert _profile().current_step == 4

    def test_bank_details_required_unless_draft(self):
        _process(SaveCompanyBasics(vendor_id="vendor-1", country="UAE"))
        with pytest.raises(ValidationError) as exc:
            _process(SaveBankDetails(vendor_id="vendor-1", bank_name="Emirates NBD"))
        assert "bank_proof_url" in exc.value.messages

        _process(SaveBankDetails(vendor_id="vendor-1", bank_name="Emirates NBD", is_draft=True))
        assert _profile().bank_name == "Emirates NBD"

    def test_submit_moves_to_pending_verification(self):
        _onboard()
        profile = _profile()
        assert profile.onboarding_status == "pending_verification"
        assert profile.current_step is None


class TestReviewPermissions:
    def test_required_permission(self):
        _onboard(controlled=True)
        profile = _profile()
        assert required_onboarding_permission(profile, "approved_general") == "vendor.controlled.approve"

        _onboard(vendor_id="vendor-2", country="Germany", controlled=True)
        foreign = _profile("vendor-2")
        assert required_onboarding_permission(foreign, "approved_general") == "vendor.approve"
        assert required_onboarding_permission(foreign, "approved_controlled") == "vendor.controlled.approve"

    def test_general_approval_with_vendor_approve(self):
        _onboard()
        _review("approved_general")
        assert _profile().onboarding_status == "approved_general"

    def test_controlled_permission_covers_general_review(self):
        _onboard()
        _review("approved_general", permissions="vendor.controlled.approve")
        assert _profile().onboarding_status == "approved_general"

    def test_controlled_approval_needs_controlled_permission(self):
        _onboard()
        with pytest.raises(AccessDenied):
            _review("approved_controlled")

    def test_uae_controlled_dealer_needs_controlled_permission(self):
        _onboard(controlled=True)
        with pytest.raises(AccessDenied):
            _review("rejected")

    def test_super_admin_needs_no_explicit_permission(self):
        _onboard(controlled=True)
        _review("approved_controlled", permissions="", actor_type="super_admin")
        assert _profile().onboarding_status == "approved_controlled"

    def test_non_admin_cannot_review(self):
        _onboard()
        with pytest.raises(AccessDenied):
            _review("approved_general", actor_type="vendor")

    def test_invalid_status(self):
        _onboard()
        with pytest.raises(ValidationError):
            _review("approved")


class TestUpdateNeeded:
    def test_fields_cleared_and_vendor_can_resubmit(self):
        _onboard()
        _review("update_needed", note="Proof unreadable", fields_to_clear=json.dumps(["bank_proof_url"]))

        profile = _profile()
        assert profile.onboarding_status == "update_needed"
        assert profile.current_step == 5
        assert profile.bank_proof_url is None

        with pytest.raises(ValidationError):
            _process(SubmitForVerification(vendor_id="vendor-1"))

        _process(
            SaveBankDetails(
                vendor_id="vendor-1",
                bank_name="Emirates NBD",
                account_number="1012345678",
                bank_proof_type="bank_letter",
                bank_proof_url="https://files.example.com/proof-v2.pdf",
            )
        )
        _process(SubmitForVerification(vendor_id="vendor-1"))
        assert _profile().onboarding_status == "pending_verification"


class TestListing:
    def test_profiles_by_status(self):
        _onboard(vendor_id="vendor-1")
        _onboard(vendor_id="vendor-2", submit=False)

        pending = profiles_by_status("pending_verification")
        assert [str(p.vendor_id) for p in pending] == ["vendor-1"]
        assert len(profiles_by_status()) == 2
