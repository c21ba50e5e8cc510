import pytest

from stormrank.catalog import ReferenceCatalog, default_catalog
from stormrank.normalizer import LabelNormalizer, best_match, normalize


def test_catalog_labels_match_themselves():
    cat = default_catalog()
    for label in cat:
        assert best_match(f"  {label.upper()} ", cat) == (label, 0)


def test_misspelling_is_corrected(small_catalog):
    assert normalize("Tornadoe", small_catalog, 2) == "tornado"
    assert normalize("FLOOD ", small_catalog, 2) == "flood"


def test_far_label_is_no_match(small_catalog):
    assert normalize("blizzard!!", small_catalog, 2) is None
    assert best_match("blizzard!!", small_catalog, 2) == (None, None)


def test_max_distance_is_inclusive():
    cat = ReferenceCatalog(["hail"])
    # "hailstorm" is 5 edits from "hail"
    assert normalize("hailstorm", cat, 4) is None
    assert normalize("hailstorm", cat, 5) == "hail"


def test_flash_flooding_maps_to_flash_flood():
    assert normalize("FLASH FLOODING", default_catalog()) == "flash flood"


@pytest.mark.parametrize("raw", ["", "   ", None, float("nan")])
def test_blank_labels_do_not_match(raw):
    assert normalize(raw, ReferenceCatalog(["hail"]), 8) is None


def test_tie_first_policy_takes_lowest_catalog_index():
    cat = ReferenceCatalog(["cat", "bat"])
    assert normalize("hat", cat, 1) == "cat"
    assert normalize("hat", ReferenceCatalog(["bat", "cat"]), 1) == "bat"


def test_tie_reject_policy():
    cat = ReferenceCatalog(["cat", "bat"])
    assert normalize("hat", cat, 1, tie_policy="reject") is None
    # a strictly better match is not a tie
    assert normalize("bat", cat, 1, tie_policy="reject") == "bat"


def test_osa_counts_transposition_as_one_edit():
    cat = ReferenceCatalog(["tornado"])
    assert normalize("tornaod", cat, 1, method="levenshtein") is None
    assert normalize("tornaod", cat, 1, method="osa") == "tornado"


def test_label_normalizer_memoizes_per_cleaned_label(small_catalog):
    norm = LabelNormalizer(small_catalog, 2)
    assert norm("Flood") == "flood"
    assert norm(" FLOOD ") == "flood"
    assert norm("blizzard!!") is None
    assert norm.distinct_labels_seen == 2


def test_label_normalizer_rejects_unknown_method(small_catalog):
    with pytest.raises(ValueError):
        LabelNormalizer(small_catalog, method="jaro")


def test_blank_label_is_not_scored_against_short_entries():
    # "" is 4 edits from "hail", inside the default max_distance
    assert best_match("", default_catalog(), 8) == (None, None)
