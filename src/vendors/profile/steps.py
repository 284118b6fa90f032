"""Onboarding form steps 0 to 5 — commands and handler.

Step 0 opens the profile. Later steps need an existing profile. Steps 4
and 5 accept drafts, which skip the required-field checks.
"""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Date, Identifier, String, Text
from protean.utils.globals import current_domain

from vendors.domain import vendors
from vendors.profile.profile import VendorProfile


@vendors.command(part_of="VendorProfile")
class SaveCompanyBasics:
    vendor_id: Identifier(required=True)
    country: String(required=True, max_length=100)
    company_type: String(max_length=50)


@vendors.command(part_of="VendorProfile")
class SaveCompanyDetails:
    vendor_id: Identifier(required=True)
    company_name: String(max_length=255)
    trade_license_number: String(max_length=100)
    license_expiry: Date()
    company_address: Text()
    city: String(max_length=100)
    company_email: String(max_length=254)
    company_phone: String(max_length=30)


@vendors.command(part_of="VendorProfile")
class SaveContactPerson:
    vendor_id: Identifier(required=True)
    contact_name: String(max_length=150)
    contact_email: String(max_length=254)
    contact_phone: String(max_length=30)
    contact_designation: String(max_length=100)
    terms_accepted: Boolean(default=False)


@vendors.command(part_of="VendorProfile")
class SaveDeclaration:
    vendor_id: Identifier(required=True)
    compliance_terms_accepted: Boolean(default=False)
    is_controlled_dealer: Boolean(default=False)
    controlled_license_number: String(max_length=100)


@vendors.command(part_of="VendorProfile")
class SaveSellingCategories:
    vendor_id: Identifier(required=True)
    selling_categories: Text(default="[]")  # JSON list of category ids
    is_draft: Boolean(default=False)


@vendors.command(part_of="VendorProfile")
class SaveBankDetails:
    vendor_id: Identifier(required=True)
    bank_name: String(max_length=150)
    account_number: String(max_length=50)
    iban: String(max_length=50)
    bank_proof_type: String(max_length=50)
    bank_proof_url: String(max_length=500)
    is_draft: Boolean(default=False)


def _values(command, step_fields):
    return {field: getattr(command, field) for field in step_fields}


def _require(errors, command, fields, message):
    for field in fields:
        if not getattr(command, field):
            errors.setdefault(field, []).append(message)


@vendors.command_handler(part_of=VendorProfile)
class OnboardingStepsHandler:
    def _existing(self, repo, vendor_id):
        try:
            return repo.get(vendor_id)
        except ObjectNotFoundError:
            raise ValidationError({"onboarding": ["Please complete previous steps first"]})

    @handle(SaveCompanyBasics)
    def save_company_basics(self, command):
        repo = current_domain.repository_for(VendorProfile)
        try:
            profile = repo.get(command.vendor_id)
        except ObjectNotFoundError:
            profile = VendorProfile.start(command.vendor_id)

        profile.save_step(0, country=command.country, company_type=command.company_type)
        repo.add(profile)

    @handle(SaveCompanyDetails)
    def save_company_details(self, command):
        repo = current_domain.repository_for(VendorProfile)
        profile = self._existing(repo, command.vendor_id)
        profile.save_step(
            1,
            **_values(
                command,
                (
                    "company_name",
                    "trade_license_number",
                    "license_expiry",
                    "company_address",
                    "city",
                    "company_email",
                    "company_phone",
                ),
            ),
        )
        repo.add(profile)

    @handle(SaveContactPerson)
    def save_contact_person(self, command):
        errors = {}
        _require(errors, command, ("contact_name", "contact_email", "contact_phone"), "is required")
        if not command.terms_accepted:
            errors.setdefault("terms_accepted", []).append("You must accept the terms and conditions")
        if errors:
            raise ValidationError(errors)

        repo = current_domain.repository_for(VendorProfile)
        profile = self._existing(repo, command.vendor_id)
        profile.save_step(
            2,
            **_values(
                command, ("contact_name", "contact_email", "contact_phone", "contact_designation", "terms_accepted")
            ),
        )
        repo.add(profile)

    @handle(SaveDeclaration)
    def save_declaration(self, command):
        if not command.compliance_terms_accepted:
            raise ValidationError({"compliance_terms_accepted": ["You must accept the compliance terms"]})

        repo = current_domain.repository_for(VendorProfile)
        profile = self._existing(repo, command.vendor_id)
        profile.save_step(
            3,
            **_values(command, ("compliance_terms_accepted", "is_controlled_dealer", "controlled_license_number")),
        )
        repo.add(profile)

    @handle(SaveSellingCategories)
    def save_selling_categories(self, command):
        categories = json.loads(command.selling_categories or "[]")
        if not command.is_draft and not categories:
            raise ValidationError({"selling_categories": ["Please select at least one selling category"]})

        repo = current_domain.repository_for(VendorProfile)
        profile = self._existing(repo, command.vendor_id)
        profile.save_step(4, is_draft=command.is_draft, selling_categories=categories)
        repo.add(profile)

    @handle(SaveBankDetails)
    def save_bank_details(self, command):
        if not command.is_draft:
            errors = {}
            _require(
                errors,
                command,
                ("bank_name", "account_number", "bank_proof_type", "bank_proof_url"),
                "is required",
            )
            if errors:
                raise ValidationError(errors)

        repo = current_domain.repository_for(VendorProfile)
        profile = self._existing(repo, command.vendor_id)
        profile.save_step(
            5,
            is_draft=command.is_draft,
            **_values(command, ("bank_name", "account_number", "iban", "bank_proof_type", "bank_proof_url")),
        )
        repo.add(profile)
