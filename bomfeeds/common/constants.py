"""Application constants."""

USER_AGENT = "bom-feeds/0.3 (+research; contact: configured-email)"
DEFAULT_BASE_URL = "http://www.bom.gov.au/fwo/"
ALL_REGIONS = "AUS"
REGION_CODES = ("ACT", "NSW", "NT", "QLD", "SA", "TAS", "VIC", "WA")
REGION_NAMES = {
    "AUSTRALIAN CAPITAL TERRITORY": "ACT",
    "CANBERRA": "ACT",
    "NEW SOUTH WALES": "NSW",
    "NORTHERN TERRITORY": "NT",
    "QUEENSLAND": "QLD",
    "SOUTH AUSTRALIA": "SA",
    "TASMANIA": "TAS",
    "VICTORIA": "VIC",
    "WESTERN AUSTRALIA": "WA",
    "AUSTRALIA": ALL_REGIONS,
}
# ACT has no feed of its own and is served by the NSW product.
PRECIS_FEEDS = {
    "ACT": "IDN11060.xml",
    "NSW": "IDN11060.xml",
    "NT": "IDD10207.xml",
    "QLD": "IDQ11295.xml",
    "SA": "IDS10044.xml",
    "TAS": "IDT16710.xml",
    "VIC": "IDV10753.xml",
    "WA": "IDW14199.xml",
}
BULLETIN_FEEDS = {
    "ACT": "IDN65176.xml",
    "NSW": "IDN65176.xml",
    "NT": "IDD65176.xml",
    "QLD": "IDQ60604.xml",
    "SA": "IDS65176.xml",
    "TAS": "IDT65176.xml",
    "VIC": "IDV65176.xml",
    "WA": "IDW65176.xml",
}
COMMANDS = (
    "precis",
    "ag-bulletin",
    "station",
)
EXIT_SUCCESS = 0
EXIT_BAD_INPUT = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "command",
    "region",
    "feed",
    "event",
    "status",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
