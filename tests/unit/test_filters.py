from datetime import date

from crichow.common.groups import GroupNameTranslator
from crichow.common.models import CleanedRecord, FilterState, MaterialTotals
from crichow.common.time_utils import week_bucket
from crichow.pipeline.aggregate import compute_global_kpis, compute_group_breakdown
from crichow.pipeline.filters import filter_records, households_for_groups, project_materials, selected_materials


def _rec(day: date, group: str, household: str, wet=1.0, dry=1.0):
    return CleanedRecord(
        date=day,
        date_string=day.isoformat(),
        group=group,
        household_name=household,
        wet_waste=wet,
        dry_waste=dry,
        hdpe=0.0,
        pet=0.0,
        pp=0.0,
        paper=0.0,
        metal=0.0,
        glass=0.0,
        week_bucket=week_bucket(day),
        is_business_household=False,
    )


RECORDS = [
    _rec(date(2025, 3, 1), "KT", "H1"),
    _rec(date(2025, 3, 15), "KT", "H2"),
    _rec(date(2025, 4, 1), "NW", "H3"),
    _rec(date(2025, 4, 30), "NW", ""),
]


def test_empty_state_passes_everything():
    assert filter_records(RECORDS, FilterState()) == RECORDS


def test_date_bounds_are_inclusive():
    state = FilterState(start=date(2025, 3, 15), end=date(2025, 4, 1))

    kept = filter_records(RECORDS, state)

    assert [record.household_name for record in kept] == ["H2", "H3"]


def test_empty_group_selection_means_all():
    with_empty = filter_records(RECORDS, FilterState(groups=frozenset()))
    without = filter_records(RECORDS, FilterState())
    assert len(with_empty) == len(without) == len(RECORDS)


def test_predicates_combine_with_and():
    state = FilterState(groups=frozenset({"KT"}), households=frozenset({"H3"}))
    assert filter_records(RECORDS, state) == []


def test_group_display_names_translate_to_keys():
    translator = GroupNameTranslator({"KT": "Kel Takau", "NW": "Nawal"})
    state = FilterState(groups=frozenset({"Kel Takau"}))

    kept = filter_records(RECORDS, state, translator)

    assert {record.group for record in kept} == {"KT"}


def test_range_excluding_everything_chains_to_zeroed_aggregates():
    state = FilterState(start=date(2026, 1, 1))

    kept = filter_records(RECORDS, state)

    assert kept == []
    assert compute_global_kpis(kept).total_weight == 0
    assert compute_group_breakdown(kept) == []


def test_material_selection_is_a_projection():
    totals = MaterialTotals(hdpe=1.0, pet=2.0, pp=0.0, paper=3.0, metal=0.0, glass=4.0)
    state = FilterState(materials=frozenset({"glass", "pet"}))

    assert filter_records(RECORDS, state) == RECORDS
    assert selected_materials(state) == ("pet", "glass")
    assert project_materials(totals, state) == {"pet": 2.0, "glass": 4.0}
    assert len(project_materials(totals, FilterState())) == 6


def test_households_for_groups_cascades():
    translator = GroupNameTranslator({"NW": "Nawal"})

    assert households_for_groups(RECORDS, []) == ["H1", "H2", "H3"]
    assert households_for_groups(RECORDS, ["Nawal"], translator) == ["H3"]
