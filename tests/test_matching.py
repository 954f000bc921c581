from indiastreamz.metadata.matching import (candidate_year, find_best_match,
                                            normalize_title, score_match,
                                            title_variations)


def test_normalize_title():
    assert normalize_title("Leo: Bloody Sweet!") == "leobloodysweet"
    assert normalize_title(None) == ""


def test_title_variations_are_ordered_and_unique():
    variations = title_variations("The Family Man: Season 2")
    assert variations[:3] == [
        "The Family Man: Season 2",
        "Family Man: Season 2",
        "The Family Man",
    ]
    assert len(variations) == len({variation.lower() for variation in variations})
    assert title_variations("Leo")[:2] == ["Leo", "The Leo"]
    assert title_variations("   ") == []


def test_candidate_year():
    assert candidate_year({"release_date": "2023-10-19"}) == 2023
    assert candidate_year({"first_air_date": "2022-12-02"}) == 2022
    assert candidate_year({"release_date": ""}) is None


def test_score_match_components():
    candidate = {"title": "Leo", "release_date": "2023-10-19", "popularity": 50}
    assert score_match(candidate, "Leo", 2023) == 120.5
    assert score_match(candidate, "Leo", 2024) == 110.5
    assert score_match(candidate, "Leo", 2019) == 100.5
    assert score_match({"title": "Leo Bloody Sweet"}, "Leo") == 50


def test_popularity_bonus_is_capped():
    assert score_match({"title": "Leo", "popularity": 5000}, "Leo") == 110


def test_find_best_match_prefers_highest_score():
    candidates = [
        {"id": 1, "title": "Leo Das"},
        {"id": 2, "title": "Leo", "release_date": "2023-10-19"},
    ]
    match = find_best_match(candidates, "Leo", 2023)
    assert match.candidate["id"] == 2
    assert match.score == 120
    assert match.weak is False


def test_find_best_match_ties_keep_provider_order():
    candidates = [{"id": 1, "title": "Leo"}, {"id": 2, "title": "Leo"}]
    assert find_best_match(candidates, "Leo").candidate["id"] == 1


def test_find_best_match_flags_weak_results():
    match = find_best_match([{"id": 3, "title": "Completely Unrelated"}], "Leo")
    assert match.weak is True
    assert find_best_match([], "Leo") is None
