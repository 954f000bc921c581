import re

from indiastreamz.scraper.identity import (content_id, episode_stream_id,
                                           language_prefix, movie_id,
                                           series_id, slugify)


def test_slugify():
    assert slugify("Leo (2023) Tamil TRUE WEB-DL!") == "leo-2023-tamil-true-web-dl"
    assert slugify("  --  ") == ""


def test_language_prefix():
    assert language_prefix({"tamil"}) == "tamil"
    assert language_prefix({"tamil", "telugu"}) == "multi"
    assert language_prefix(set()) == "unknown"


def test_movie_id_is_deterministic():
    first = movie_id("Leo (2023) Tamil 1080p", {"tamil"})
    second = movie_id("Leo (2023) Tamil 1080p", {"tamil"})
    assert first == second
    assert re.fullmatch(r"tamil-leo-2023-tamil-1080p-[0-9a-f]{8}", first)


def test_movie_id_ignores_language_order():
    assert movie_id("Jailer", ["tamil", "hindi"]) == movie_id("Jailer", ["hindi", "tamil"])


def test_movie_id_changes_with_languages_and_title():
    base = movie_id("Leo (2023)", {"tamil"})
    assert movie_id("Leo (2023)", {"telugu"}) != base
    assert movie_id("Leo (2023)", {"tamil", "telugu"}) != base
    assert movie_id("Leo (2023)", {"tamil", "telugu"}) != movie_id("Leo (2023)", {"tamil", "hindi"})
    assert movie_id("Leo (2024)", {"tamil"}) != base


def test_series_id_folds_season_into_hash():
    season_one = series_id("Vadhandhi", 1, {"tamil"})
    season_two = series_id("Vadhandhi", 2, {"tamil"})
    assert season_one != season_two
    assert season_one.startswith("tamil-vadhandhi-s1-")
    assert season_one != movie_id("Vadhandhi", {"tamil"})


def test_episode_stream_id():
    assert episode_stream_id("tamil-show-s1-0123abcd", 1, 4) == "tamil-show-s1-0123abcd:1:4"


def test_content_id_dispatches_on_season():
    assert content_id("Show", {"hindi"}) == movie_id("Show", {"hindi"})
    assert content_id("Show", {"hindi"}, 2) == series_id("Show", 2, {"hindi"})
