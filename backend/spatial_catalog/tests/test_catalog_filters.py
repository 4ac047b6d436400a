import uuid

from spatial_catalog.services.ages import AgePolicy
from spatial_catalog.services.catalog import (
    CatalogEntry,
    CatalogFilters,
    CatalogSnapshot,
    facet_options,
    filter_catalog,
    is_adapted,
)
from spatial_catalog.services.tags import TagLink

SPATIAL_VIS = uuid.uuid4()
MENTAL_ROT = uuid.uuid4()
GENERAL = uuid.uuid4()
BLIND = uuid.uuid4()


def _entry(name, age_min=None, age_max=None, authors=None, status="published"):
    return CatalogEntry(
        id=uuid.uuid4(),
        name=name,
        authors=authors,
        year=None,
        age_min=age_min,
        age_max=age_max,
        source_url=None,
        access_notes=None,
        status=status,
    )


def _snapshot():
    block = _entry("Block Design")
    rotation = _entry("Mental Rotation Test", 6, 12, authors="Vandenberg & Kuse")
    snapshot = CatalogSnapshot(
        entries=[block, rotation],
        vocabularies={
            "ability": {SPATIAL_VIS: "Spatial Visualization", MENTAL_ROT: "Mental Rotation"},
            "platform": {},
            "modality": {},
            "population": {GENERAL: "General population", BLIND: "Blind or visually impaired"},
        },
        links={
            "ability": [TagLink(rotation.id, SPATIAL_VIS)],
            "population": [TagLink(rotation.id, GENERAL)],
        },
    )
    return snapshot, block, rotation


def _names(rows):
    return [row.entry.name for row in rows]


def test_text_search_matches_name_case_insensitively():
    snapshot, _, _ = _snapshot()
    rows = filter_catalog(snapshot, CatalogFilters(q="ROTATION"))
    assert _names(rows) == ["Mental Rotation Test"]


def test_text_search_matches_authors():
    snapshot, _, _ = _snapshot()
    assert _names(filter_catalog(snapshot, CatalogFilters(q="kuse"))) == ["Mental Rotation Test"]


def test_facet_filter_requires_link():
    snapshot, _, _ = _snapshot()
    rows = filter_catalog(snapshot, CatalogFilters(ability=SPATIAL_VIS))
    assert _names(rows) == ["Mental Rotation Test"]
    assert filter_catalog(snapshot, CatalogFilters(ability=MENTAL_ROT)) == []


def test_age_minimum_under_each_policy():
    snapshot, _, _ = _snapshot()
    strict = filter_catalog(snapshot, CatalogFilters(age_min=5, age_policy=AgePolicy.STRICT))
    assert _names(strict) == ["Mental Rotation Test"]
    open_rows = filter_catalog(snapshot, CatalogFilters(age_min=5, age_policy=AgePolicy.OPEN))
    assert _names(open_rows) == ["Block Design", "Mental Rotation Test"]


def test_criteria_combine_with_and():
    snapshot, _, _ = _snapshot()
    filters = CatalogFilters(q="block", ability=SPATIAL_VIS)
    assert filter_catalog(snapshot, filters) == []


def test_no_criteria_keeps_snapshot_order():
    snapshot, _, _ = _snapshot()
    assert _names(filter_catalog(snapshot, CatalogFilters())) == ["Block Design", "Mental Rotation Test"]


def test_filtering_is_idempotent():
    snapshot, _, _ = _snapshot()
    filters = CatalogFilters(q="test", age_min="3")
    first = filter_catalog(snapshot, filters)
    assert filter_catalog(snapshot, filters) == first


def test_status_filter():
    snapshot, _, _ = _snapshot()
    assert filter_catalog(snapshot, CatalogFilters(status="wip")) == []


def test_cleared_resets_criteria_but_keeps_policy():
    filters = CatalogFilters(q="x", ability=SPATIAL_VIS, age_min=4, age_policy=AgePolicy.STRICT)
    cleared = filters.cleared()
    assert cleared == CatalogFilters(age_policy=AgePolicy.STRICT)


def test_rows_carry_labels_and_adapted_flag():
    snapshot, block, rotation = _snapshot()
    rows = {row.entry.id: row for row in filter_catalog(snapshot, CatalogFilters())}
    assert rows[rotation.id].labels["ability"] == ["Spatial Visualization"]
    assert rows[rotation.id].adapted is False
    assert rows[block.id].labels["population"] == []
    assert rows[block.id].adapted is False


def test_is_adapted():
    assert not is_adapted([])
    assert not is_adapted(["General population"])
    assert is_adapted(["General population", "Blind or visually impaired"])


def test_facet_options_list_used_terms_only():
    snapshot, _, _ = _snapshot()
    options = facet_options(snapshot)
    assert options["ability"] == [(SPATIAL_VIS, "Spatial Visualization")]
    assert options["population"] == [(GENERAL, "General population")]
    assert options["platform"] == []
