"""Filter engine over the canonical record list."""

from __future__ import annotations

from typing import Iterable

from crichow.common.constants import MATERIAL_KEYS
from crichow.common.groups import GroupNameTranslator
from crichow.common.models import CleanedRecord, FilterState, MaterialTotals


def filter_records(
    records: Iterable[CleanedRecord],
    state: FilterState,
    translator: GroupNameTranslator | None = None,
) -> list[CleanedRecord]:
    """Keep records passing every active predicate.

    Group selections may be display names; they are mapped back to internal
    keys before matching. An empty group or household selection is no
    restriction. Materials are a projection and never drop records.
    """
    groups = translator.keys_for(state.groups) if translator is not None else state.groups
    households = state.households

    out: list[CleanedRecord] = []
    for record in records:
        if state.start is not None and record.date < state.start:
            continue
        if state.end is not None and record.date > state.end:
            continue
        if groups and record.group not in groups:
            continue
        if households and record.household_name not in households:
            continue
        out.append(record)
    return out


def selected_materials(state: FilterState) -> tuple[str, ...]:
    if not state.materials:
        return MATERIAL_KEYS
    return tuple(key for key in MATERIAL_KEYS if key in state.materials)


def project_materials(totals: MaterialTotals, state: FilterState) -> dict[str, float]:
    return {key: getattr(totals, key) for key in selected_materials(state)}


def households_for_groups(
    records: Iterable[CleanedRecord],
    groups: Iterable[str],
    translator: GroupNameTranslator | None = None,
) -> list[str]:
    selected = frozenset(groups)
    if translator is not None:
        selected = translator.keys_for(selected)
    names = {
        record.household_name
        for record in records
        if record.household_name and (not selected or record.group in selected)
    }
    return sorted(names)
