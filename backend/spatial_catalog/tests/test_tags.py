from spatial_catalog.services.tags import TagLink, group_term_ids, resolve_labels, sorted_labels


def test_group_term_ids_keeps_first_seen_order_and_collapses_repeats():
    links = [
        TagLink("e1", "t2"),
        TagLink("e1", "t1"),
        TagLink("e1", "t2"),
        TagLink("e2", "t3"),
    ]
    grouped = group_term_ids(["e1", "e2"], links)
    assert grouped == {"e1": ["t2", "t1"], "e2": ["t3"]}


def test_entries_without_links_map_to_empty_list():
    grouped = group_term_ids(["e1", "e2"], [TagLink("e1", "t1")])
    assert grouped["e2"] == []


def test_links_outside_view_are_ignored():
    grouped = group_term_ids(["e1"], [TagLink("e9", "t1"), TagLink("e1", "t4")])
    assert grouped == {"e1": ["t4"]}


def test_resolve_labels_drops_unknown_terms():
    vocabulary = {"t1": "Mental Rotation", "t2": "Navigation and Wayfinding"}
    links = [TagLink("e1", "t1"), TagLink("e1", "stale"), TagLink("e1", "t2")]
    labels = resolve_labels(["e1"], links, vocabulary)
    assert labels == {"e1": ["Mental Rotation", "Navigation and Wayfinding"]}


def test_resolve_labels_with_no_links():
    assert resolve_labels(["e1"], [], {"t1": "Visual"}) == {"e1": []}


def test_sorted_labels_ignores_case():
    assert sorted_labels(["virtual reality", "Computer", "tablet"]) == [
        "Computer",
        "tablet",
        "virtual reality",
    ]
