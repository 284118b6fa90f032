"""Reference list maintenance: create, update, deactivate, reorder and list."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.reference.reference import Reference, normalize_ref_type


@marketplace.command(part_of=Reference)
class CreateReference:
    ref_type = String(required=True, max_length=50)
    name = String(required=True, max_length=150)
    code = String(max_length=50)
    is_active = Boolean(default=True)


@marketplace.command(part_of=Reference)
class UpdateReference:
    reference_id = Identifier(required=True)
    ref_type = String(required=True, max_length=50)
    name = String(max_length=150)
    code = String(max_length=50)
    display_order = Integer()
    is_active = Boolean()


@marketplace.command(part_of=Reference)
class DeactivateReference:
    reference_id = Identifier(required=True)
    ref_type = String(required=True, max_length=50)


@marketplace.command(part_of=Reference)
class ReorderReferences:
    ref_type = String(required=True, max_length=50)
    reference_ids = Text(required=True)  # JSON list, in the new order


def _entries(ref_type):
    return current_domain.repository_for(Reference)._dao.query.filter(ref_type=ref_type).all().items


def _entry(ref_type, reference_id):
    reference = current_domain.repository_for(Reference).get(reference_id)
    if reference.ref_type != ref_type:
        raise ValidationError({"reference_id": [f"Item does not belong to {ref_type}"]})
    return reference


def _assert_unique_name(ref_type, name, exclude_id=None):
    wanted = name.strip().lower()
    for entry in _entries(ref_type):
        if entry.name.lower() == wanted and str(entry.id) != str(exclude_id):
            raise ValidationError({"name": [f"{name.strip()} already exists in {ref_type}"]})


def list_references(ref_type, include_inactive=False):
    """A list's entries ordered for display."""
    entries = _entries(normalize_ref_type(ref_type))
    if not include_inactive:
        entries = [e for e in entries if e.is_active]
    return sorted(entries, key=lambda e: (e.display_order or 0, e.name.lower()))


def reference_types():
    return sorted({e.ref_type for e in current_domain.repository_for(Reference)._dao.query.all().items})


@marketplace.command_handler(part_of=Reference)
class ReferenceHandler:
    @handle(CreateReference)
    def create_reference(self, command):
        ref_type = normalize_ref_type(command.ref_type)
        if not command.name.strip():
            raise ValidationError({"name": ["Name is required"]})
        _assert_unique_name(ref_type, command.name)

        last = max((e.display_order or 0 for e in _entries(ref_type)), default=0)
        reference = Reference.create(
            ref_type=ref_type,
            name=command.name,
            code=command.code,
            display_order=last + 1,
            is_active=command.is_active,
        )
        current_domain.repository_for(Reference).add(reference)

        logger.info("Reference created", ref_type=ref_type, name=reference.name)
        return reference.as_dict()

    @handle(UpdateReference)
    def update_reference(self, command):
        ref_type = normalize_ref_type(command.ref_type)
        reference = _entry(ref_type, command.reference_id)
        if command.name is not None and command.name.strip().lower() != reference.name.lower():
            _assert_unique_name(ref_type, command.name, exclude_id=reference.id)

        reference.update(
            name=command.name,
            code=command.code,
            display_order=command.display_order,
            is_active=command.is_active,
        )
        current_domain.repository_for(Reference).add(reference)
        return reference.as_dict()

    @handle(DeactivateReference)
    def deactivate_reference(self, command):
        reference = _entry(normalize_ref_type(command.ref_type), command.reference_id)
        reference.deactivate()
        current_domain.repository_for(Reference).add(reference)
        logger.info("Reference deactivated", ref_type=reference.ref_type, name=reference.name)

    @handle(ReorderReferences)
    def reorder_references(self, command):
        """Number the given entries 1..n in the order they were listed."""
        ref_type = normalize_ref_type(command.ref_type)
        ids = [str(i) for i in json.loads(command.reference_ids)]
        if len(set(ids)) != len(ids):
            raise ValidationError({"reference_ids": ["Duplicate ids in ordering"]})

        known = {str(e.id): e for e in _entries(ref_type)}
        unknown = [i for i in ids if i not in known]
        if unknown:
            raise ValidationError({"reference_ids": [f"Unknown {ref_type} ids: {', '.join(unknown)}"]})

        repo = current_domain.repository_for(Reference)
        for position, reference_id in enumerate(ids, start=1):
            reference = known[reference_id]
            reference.update(display_order=position)
            repo.add(reference)
        return len(ids)
