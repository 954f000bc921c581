import base64

import orjson
import pytest
from fastapi.testclient import TestClient

from indiastreamz.api.app import app
from indiastreamz.api.endpoints import admin, base, stream
from indiastreamz.background_scraper.worker import (ScrapeOrchestrator,
                                                    ScrapeState)
from indiastreamz.core.config_validation import config_check
from indiastreamz.core.exceptions import ScrapeInProgressError
from indiastreamz.core.models import settings
from indiastreamz.scraper.identity import episode_stream_id
from indiastreamz.scraper.records import build_content_record, to_catalog_entry
from indiastreamz.services import serving
from tests.conftest import HASH_A, HASH_B, magnet, make_draft

PASSWORD = "test-admin-password"


def write_json(cache, key, value):
    path = cache.path_for(key)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(orjson.dumps(value))


@pytest.fixture
def records():
    movie = build_content_record(
        make_draft(
            "https://tmv/topic/1",
            "Leo (2023) Tamil TRUE WEB-DL - 1080p - AVC - 2.5GB",
            [
                (magnet(HASH_A, "Leo.2023.1080p.AVC.2.5GB"), ""),
                (magnet(HASH_B, "Leo.2023.720p.HEVC.1.2GB"), ""),
            ],
        )
    )
    series = build_content_record(
        make_draft(
            "https://tmv/topic/2",
            "Vadhandhi (2022) S01 EP(01-02) Tamil WEB-DL - 720p - 1.4GB",
            [(magnet(HASH_B, "Vadhandhi.S01.720p.1.4GB"), "")],
        )
    )
    return movie, series


@pytest.fixture
def client(cache, records, monkeypatch):
    movie, series = records
    catalog = [to_catalog_entry(record).model_dump(mode="json") for record in records]
    write_json(cache, "catalog:tamil", catalog)
    for record in records:
        write_json(cache, f"content:{record.id}", record.model_dump(mode="json"))
        streams = [entry.model_dump(mode="json") for entry in record.streams]
        write_json(cache, f"streams:{record.id}", streams)
    for episode in series.episodes:
        write_json(
            cache,
            f"streams:{episode_stream_id(series.id, series.season, episode)}",
            [entry.model_dump(mode="json") for entry in series.streams],
        )

    monkeypatch.setattr(serving, "file_cache", cache)
    monkeypatch.setattr(settings, "ADMIN_DASHBOARD_PASSWORD", PASSWORD)
    return TestClient(app)


class StubScraper:
    def __init__(self, busy=False):
        self.busy = busy
        self.launched = []

    def launch_scrape(self, force=False):
        if self.busy:
            raise ScrapeInProgressError("scrape")
        self.launched.append(("incremental", force))

    def launch_full_replacement(self):
        if self.busy:
            raise ScrapeInProgressError("full replacement")
        self.launched.append(("full_replacement", True))

    async def clear_cache(self):
        if self.busy:
            raise ScrapeInProgressError("cache clear")
        return True

    def get_status(self):
        return {"state": "running" if self.busy else "idle"}


def test_root_redirects_to_manifest(client):
    response = client.get("/", follow_redirects=False)
    assert response.status_code in (302, 307)
    assert response.headers["location"] == "/manifest.json"


def test_manifest_lists_language_catalogs(client):
    manifest = client.get("/manifest.json").json()

    ids = [(catalog["type"], catalog["id"]) for catalog in manifest["catalogs"]]
    assert ("movie", "tamil") in ids
    assert ("series", "tamil-series") in ids
    assert manifest["resources"] == ["catalog", "meta", "stream"]
    assert "tamil-" in manifest["idPrefixes"]


def test_catalog_filters_by_type_search_and_skip(client, records):
    movie, series = records

    metas = client.get("/catalog/movie/tamil.json").json()["metas"]
    assert [meta["id"] for meta in metas] == [movie.id]

    metas = client.get("/catalog/series/tamil-series.json").json()["metas"]
    assert [meta["id"] for meta in metas] == [series.id]

    assert client.get("/catalog/movie/tamil/search=le.json").json()["metas"][0]["id"] == movie.id
    assert client.get("/catalog/movie/tamil/search=jailer.json").json() == {"metas": []}
    assert client.get("/catalog/movie/tamil/skip=1.json").json() == {"metas": []}


def test_unknown_catalogs_are_empty(client):
    assert client.get("/catalog/movie/klingon.json").json() == {"metas": []}
    assert client.get("/catalog/series/tamil.json").json() == {"metas": []}
    assert client.get("/catalog/movie/telugu.json").json() == {"metas": []}


def test_meta_for_movie_and_series(client, records):
    movie, series = records

    meta = client.get(f"/meta/movie/{movie.id}.json").json()["meta"]
    assert meta["name"] == "Leo"
    assert meta["language"] == "Tamil"
    assert "videos" not in meta

    meta = client.get(f"/meta/series/{series.id}.json").json()["meta"]
    assert [video["id"] for video in meta["videos"]] == [
        episode_stream_id(series.id, 1, 1),
        episode_stream_id(series.id, 1, 2),
    ]


def test_missing_meta_is_empty_not_an_error(client, records):
    movie, _ = records
    response = client.get("/meta/movie/tamil-nothing-00000000.json")
    assert response.status_code == 200
    assert response.json() == {"meta": None}

    response = client.get(f"/meta/series/{movie.id}.json")
    assert response.status_code == 200
    assert response.json() == {"meta": None}


def test_season_pack_is_playable_from_series_id(client, cache):
    pack = build_content_record(
        make_draft(
            "https://tmv/topic/3",
            "Mirzapur (2024) S03 Complete Hindi WEB-DL 1080p",
            [(magnet(HASH_A, "Mirzapur.S03.1080p.WEB-DL"), "")],
        )
    )
    assert pack.type == "series"
    assert pack.season == 3
    assert pack.episodes == []

    write_json(cache, f"content:{pack.id}", pack.model_dump(mode="json"))
    write_json(
        cache,
        f"streams:{pack.id}",
        [entry.model_dump(mode="json") for entry in pack.streams],
    )

    meta = client.get(f"/meta/series/{pack.id}.json").json()["meta"]
    assert [video["id"] for video in meta["videos"]] == [pack.id]
    assert meta["videos"][0]["season"] == 3

    streams = client.get(f"/stream/series/{pack.id}.json").json()["streams"]
    assert [entry["infoHash"] for entry in streams] == [HASH_A]


def test_streams_for_movie_and_episode(client, records):
    movie, series = records

    streams = client.get(f"/stream/movie/{movie.id}.json").json()["streams"]
    assert [entry["infoHash"] for entry in streams] == [HASH_A, HASH_B]

    episode = episode_stream_id(series.id, 1, 2)
    streams = client.get(f"/stream/series/{episode}.json").json()["streams"]
    assert [entry["infoHash"] for entry in streams] == [HASH_B]

    assert client.get("/stream/movie/unknown.json").json() == {"streams": []}


def test_streams_marked_when_cached_on_torbox(client, records, monkeypatch):
    movie, _ = records

    class FakeTorBox:
        def __init__(self, session, debrid_api_key):
            self.key = debrid_api_key

        async def get_cached_hashes(self, info_hashes):
            return {HASH_B}

    class NoSession:
        async def get_session(self):
            return None

    monkeypatch.setattr(stream, "TorBox", FakeTorBox)
    monkeypatch.setattr(stream, "http_client_manager", NoSession())
    monkeypatch.setattr(
        stream,
        "config_check",
        lambda b64config: {"debridService": "torbox", "debridApiKey": "key", "cachedFirst": True},
    )

    streams = client.get(f"/cfg/stream/movie/{movie.id}.json").json()["streams"]

    assert [entry["infoHash"] for entry in streams] == [HASH_B, HASH_A]
    assert streams[0]["name"].startswith("⚡ 720p")
    assert not streams[1]["name"].startswith("⚡")


def test_config_check_falls_back_to_defaults():
    encoded = base64.b64encode(
        orjson.dumps({"debridService": "torbox", "debridApiKey": "secret"})
    ).decode()
    assert config_check(encoded)["debridService"] == "torbox"

    no_key = base64.b64encode(orjson.dumps({"debridService": "torbox"})).decode()
    assert config_check(no_key)["debridService"] == "torrent"
    assert config_check("not-base64!")["debridService"] == "torrent"
    assert config_check(None)["cachedFirst"] is True


def test_health_reports_sentinel_catalogs(client, cache, monkeypatch):
    monkeypatch.setattr(base, "background_scraper", ScrapeOrchestrator(cache=cache))

    health = client.get("/health").json()

    assert health["scraper"] == ScrapeState.IDLE.value
    assert health["catalogs"]["tamil"] is True
    assert health["catalogs"]["telugu"] is False


def test_admin_requires_password(client, monkeypatch):
    monkeypatch.setattr(admin, "background_scraper", StubScraper())

    assert client.get("/admin/api/scraper/status").status_code == 401
    response = client.get(
        "/admin/api/scraper/status", headers={"X-Admin-Password": "wrong"}
    )
    assert response.status_code == 401


def test_admin_starts_runs(client, monkeypatch):
    scraper = StubScraper()
    monkeypatch.setattr(admin, "background_scraper", scraper)
    headers = {"X-Admin-Password": PASSWORD}

    response = client.post("/admin/api/scraper/run?force=true", headers=headers)
    assert response.status_code == 202
    response = client.post("/admin/api/scraper/full-replacement", headers=headers)
    assert response.status_code == 202

    assert scraper.launched == [("incremental", True), ("full_replacement", True)]
    assert client.delete("/admin/api/cache", headers=headers).json() == {"status": "cleared"}
    assert client.get("/admin/api/logs?limit=5", headers=headers).status_code == 200


def test_admin_conflicts_while_running(client, monkeypatch):
    monkeypatch.setattr(admin, "background_scraper", StubScraper(busy=True))
    headers = {"X-Admin-Password": PASSWORD}

    assert client.post("/admin/api/scraper/run", headers=headers).status_code == 409
    assert client.post("/admin/api/scraper/full-replacement", headers=headers).status_code == 409
    assert client.delete("/admin/api/cache", headers=headers).status_code == 409
    assert client.get("/admin/api/scraper/status", headers=headers).json() == {"state": "running"}
