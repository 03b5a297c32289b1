"""Record lookup-or-create steps shared by the projection rules.

Every ``ensure_*`` function follows the same pattern: look the record up
(session link, resolver natural key, deterministic path), merge-update its
header when found while keeping its ``lineage_id``, otherwise create it
from a template. Found and created records are registered on the run state
so the session can link to them afterwards.
"""

import logging
from collections.abc import Iterable
from typing import Any

from lineage.config import Config, normalize_vault_path
from lineage.projection.resolver import find_file_by_lineage_id
from lineage.projection.templates import (
    build_event_template,
    build_person_template,
    build_place_template,
    build_relationship_template,
)
from lineage.projection.types import (
    ProjectionContext,
    ProjectionState,
    ProjectionSummary,
    RecordKind,
)
from lineage.session.model import Participant, Person
from lineage.store.base import VaultFile, VaultStore, extract_link_target
from lineage.utils.filename import person_filename, place_filename
from lineage.utils.ids import generate_lineage_id

logger = logging.getLogger(__name__)

ENTITY_SUBFOLDERS = {
    "person": "People",
    "place": "Places",
    "event": "Events",
    "relationship": "Relationships",
    "source": "Sources",
    "citation": "Citations",
}

UNKNOWN_PERSON_NAME = "Unknown Person"


# ------------------------------------------------------------------ #
#  Paths and links                                                    #
# ------------------------------------------------------------------ #


def get_entity_folder(config: Config, kind: RecordKind) -> str:
    return normalize_vault_path(f"{config.base_folder}/{ENTITY_SUBFOLDERS[kind]}")


def ensure_base_folders(store: VaultStore, config: Config) -> None:
    store.create_folder(config.base_folder)
    for kind in ENTITY_SUBFOLDERS:
        store.create_folder(get_entity_folder(config, kind))


def get_unique_path(store: VaultStore, path: str) -> str:
    """``path`` if free, else ``"<stem> (2).md"``, ``"<stem> (3).md"``, ..."""
    normalized = normalize_vault_path(path)
    if not store.exists(normalized):
        return normalized

    slash = normalized.rfind("/")
    dot = normalized.rfind(".")
    if dot > slash:
        base, ext = normalized[:dot], normalized[dot:]
    else:
        base, ext = normalized, ""

    counter = 2
    while store.exists(f"{base} ({counter}){ext}"):
        counter += 1
    return f"{base} ({counter}){ext}"


def wikilink_for_file(file: VaultFile) -> str:
    """Path-qualified wikilink to a record, without the ``.md`` extension.

    Qualifying the link with the folder keeps it pointing at this record
    even when another note in the vault shares the basename.
    """
    path = file.path[:-3] if file.path.lower().endswith(".md") else file.path
    return f"[[{path}]]"


def has_record_type(store: VaultStore, file: VaultFile, lineage_type: str) -> bool:
    """True when the record's ``lineage_type`` equals ``lineage_type`` (any case)."""
    value = store.get_frontmatter(file).get("lineage_type")
    return isinstance(value, str) and value.strip().lower() == lineage_type


def is_untyped(store: VaultStore, file: VaultFile) -> bool:
    value = store.get_frontmatter(file).get("lineage_type")
    return not (isinstance(value, str) and value.strip())


def order_participants(participants: Iterable[Participant]) -> list[Participant]:
    """Move the first principal participant to the front, keeping the rest in order."""
    ordered = list(participants)
    principal = next((p for p in ordered if p.is_principal), None)
    if principal is None:
        return ordered
    return [principal] + [p for p in ordered if p is not principal]


def update_record(store: VaultStore, file: VaultFile, updates: dict[str, Any]) -> None:
    """Merge ``updates`` into a record's header, keeping or assigning its lineage id."""
    existing_id = store.get_frontmatter(file).get("lineage_id")
    lineage_id = existing_id if isinstance(existing_id, str) and existing_id.strip() else None
    store.update_frontmatter(file, {**updates, "lineage_id": lineage_id or generate_lineage_id()})


# ------------------------------------------------------------------ #
#  Persons and places                                                 #
# ------------------------------------------------------------------ #


def ensure_person_file(
    context: ProjectionContext,
    state: ProjectionState,
    summary: ProjectionSummary,
    person: Person,
) -> VaultFile:
    """Resolve a session person to its person record, creating one if needed.

    Lookup order: the ``matched_to`` link, a previously projected person
    with the same name, then any record carrying the person's lineage id.
    A ``matched_to`` hit is only used when the record is untyped or already
    a person record. The result is cached per session person for the rest
    of the run.

    Args:
        context: Store, config and name index of the run.
        state: Run state; receives the resolved record.
        summary: Counters updated with the created or updated record.
        person: Session person to resolve.

    Returns:
        The person record the session person now points at.
    """
    cached = state.person_files.get(person.id)
    if cached is not None:
        return cached

    store = context.store
    name = (person.name or "").strip() or UNKNOWN_PERSON_NAME

    existing = store.resolve_link(person.matched_to) if person.is_matched else None
    if existing is not None and not (
        is_untyped(store, existing) or has_record_type(store, existing, "person")
    ):
        logger.warning(
            f"Ignoring matched_to {person.matched_to!r} for {person.id}: "
            f"{existing.path} is not a person record"
        )
        existing = None
    if existing is None:
        existing = state.resolver.find_person(name)
        if existing is None and person.lineage_id:
            existing = find_file_by_lineage_id(store, person.lineage_id)

    if existing is not None:
        update_record(
            store,
            existing,
            {
                "lineage_type": "person",
                "name": person.name.strip() if person.name and person.name.strip() else None,
                "sex": person.sex,
            },
        )
        summary.record_updated("person", existing)
        logger.debug(f"Person {person.id} resolved to {existing.path}")
    else:
        folder = get_entity_folder(context.config, "person")
        path = get_unique_path(store, f"{folder}/{person_filename(name)}.md")
        existing = store.create(path, build_person_template(name, sex=person.sex))
        summary.record_created("person", existing)
        logger.debug(f"Person {person.id} created at {existing.path}")

    state.person_files[person.id] = existing
    state.register(existing)
    return existing


def ensure_place_file(
    context: ProjectionContext,
    state: ProjectionState,
    summary: ProjectionSummary,
    place: str,
) -> VaultFile:
    """Place record for a place value: link target, then name index, then new.

    A record found through the link target only counts when it is typed as
    a place; a person or note sharing the name falls through to the index.
    """
    target = extract_link_target(place)

    direct = context.store.resolve_link(target)
    if direct is not None and has_record_type(context.store, direct, "place"):
        return direct

    matches = context.indexer.find_places_by_name(target)
    if matches:
        return matches[0]

    folder = get_entity_folder(context.config, "place")
    path = get_unique_path(context.store, f"{folder}/{place_filename(target)}.md")
    file = context.store.create(path, build_place_template(target))
    summary.record_created("place", file)
    state.register(file)
    return file


def resolve_participant_files(
    context: ProjectionContext,
    state: ProjectionState,
    summary: ProjectionSummary,
    persons_by_id: dict[str, Person],
    participants: Iterable[Participant],
    label: str,
) -> list[VaultFile]:
    """Person records for each participant; missing persons become summary errors."""
    files = []
    for participant in participants:
        person = persons_by_id.get(participant.person_ref)
        if person is None:
            summary.errors.append(
                f"{label} assertion references missing person {participant.person_ref}."
            )
            continue
        files.append(ensure_person_file(context, state, summary, person))
    return files


# ------------------------------------------------------------------ #
#  Events and relationships                                           #
# ------------------------------------------------------------------ #


def ensure_event_file(
    context: ProjectionContext,
    state: ProjectionState,
    summary: ProjectionSummary,
    filename: str,
    event_type: str,
    participants: list[str],
    date: str | None = None,
    place: str | None = None,
) -> VaultFile:
    """Update the matching event record or create one.

    Args:
        filename: Deterministic record name, used when the resolver has no match.
        event_type: ``birth``, ``death``, ``marriage`` or ``residence``.
        participants: Person links, principal first.
        date: Event date as written in the session.
        place: Place link, if any.

    Returns:
        The event record.
    """
    store = context.store
    path = f"{get_entity_folder(context.config, 'event')}/{filename}.md"

    existing = state.resolver.find_event(event_type, participants, date=date, place=place)
    if existing is None:
        existing = store.get_file(path)

    if existing is not None:
        update_record(
            store,
            existing,
            {
                "lineage_type": "event",
                "event_type": event_type,
                "date": date,
                "place": place,
                "participants": list(participants),
            },
        )
        summary.record_updated("event", existing)
        state.register(existing)
        return existing

    file = store.create(
        get_unique_path(store, path),
        build_event_template(event_type, date=date, place=place, participants=participants),
    )
    summary.record_created("event", file)
    state.register(file)
    return file


def ensure_relationship_file(
    context: ProjectionContext,
    state: ProjectionState,
    summary: ProjectionSummary,
    filename: str,
    relationship_type: str,
    person_a: str,
    person_b: str,
    person_a_role: str | None = None,
    person_b_role: str | None = None,
    date: str | None = None,
    place: str | None = None,
) -> VaultFile:
    """Update the matching relationship record or create one.

    Relationships are directional: ``person_a`` is the parent or first
    spouse, ``person_b`` the child or second spouse.

    Returns:
        The relationship record.
    """
    store = context.store
    path = f"{get_entity_folder(context.config, 'relationship')}/{filename}.md"

    existing = state.resolver.find_relationship(relationship_type, person_a, person_b)
    if existing is None:
        existing = store.get_file(path)

    if existing is not None:
        update_record(
            store,
            existing,
            {
                "lineage_type": "relationship",
                "relationship_type": relationship_type,
                "person_a": person_a,
                "person_b": person_b,
                "person_a_role": person_a_role,
                "person_b_role": person_b_role,
                "date": date,
                "place": place,
            },
        )
        summary.record_updated("relationship", existing)
        state.register(existing)
        return existing

    file = store.create(
        get_unique_path(store, path),
        build_relationship_template(
            relationship_type,
            person_a,
            person_b,
            person_a_role=person_a_role,
            person_b_role=person_b_role,
            date=date,
            place=place,
        ),
    )
    summary.record_created("relationship", file)
    state.register(file)
    return file
