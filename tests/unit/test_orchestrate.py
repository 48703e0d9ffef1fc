import pytest

from bomfeeds.common.constants import BULLETIN_FEEDS, PRECIS_FEEDS
from bomfeeds.common.errors import UnknownRegionError
from bomfeeds.pipeline.orchestrate import HttpFeedSource, feeds_for_region, resolve_region


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("QLD", "QLD"),
        ("qld", "QLD"),
        (" Queensland ", "QLD"),
        ("Quensland", "QLD"),
        ("Western Australia", "WA"),
        ("Canberra", "ACT"),
        ("AUS", "AUS"),
        ("Australia", "AUS"),
    ],
)
def test_resolve_region_accepts_codes_and_names(value, expected):
    assert resolve_region(value) == expected


@pytest.mark.parametrize("value", ["XX", "", "Atlantis"])
def test_resolve_region_unknown_lists_valid_codes(value):
    with pytest.raises(UnknownRegionError, match="NSW, NT, QLD"):
        resolve_region(value)


def test_act_is_served_by_the_nsw_feed():
    assert feeds_for_region("ACT", PRECIS_FEEDS) == ["IDN11060.xml"]
    assert feeds_for_region("ACT", PRECIS_FEEDS) == feeds_for_region("NSW", PRECIS_FEEDS)
    assert feeds_for_region("ACT", BULLETIN_FEEDS) == ["IDN65176.xml"]


def test_all_regions_expand_to_seven_feeds_in_fixed_order():
    assert feeds_for_region("AUS", PRECIS_FEEDS) == [
        "IDN11060.xml",
        "IDD10207.xml",
        "IDQ11295.xml",
        "IDS10044.xml",
        "IDT16710.xml",
        "IDV10753.xml",
        "IDW14199.xml",
    ]
    assert len(feeds_for_region("AUS", BULLETIN_FEEDS)) == 7


def test_http_feed_source_builds_address_from_base_url():
    class FakeClient:
        def __init__(self):
            self.urls = []

        def get_bytes(self, url):
            self.urls.append(url)
            return b"<product/>"

    client = FakeClient()
    source = HttpFeedSource(client, "http://example.test/fwo/")

    assert source.fetch("IDN11060.xml") == b"<product/>"
    assert client.urls == ["http://example.test/fwo/IDN11060.xml"]
