"""Application constants."""

USER_AGENT = "mobilithek-csv/1.0 (+local decode tool)"
XML_ACCEPT = "application/xml,text/xml,application/xhtml+xml,text/plain,*/*"
PASSPHRASE_ENV = "MOBILITHEK_P12_PASSPHRASE"
DEFAULT_HELPER_URL = "http://127.0.0.1:5173"
DEFAULT_CONFIG_PATH = "config/decoder.yml"
COMMANDS = (
    "fetch",
    "decode",
)
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "binary_id",
    "event",
    "status",
    "duration_ms",
    "items",
    "rows_out",
    "error_code",
    "message",
)

FUEL_LONG_COLUMNS = [
    "station_id",
    "station_version",
    "fuel",
    "price",
    "date_of_price",
    "publication_id",
    "publication_type",
    "binary_id",
]
OVERRIDE_COLUMNS = [
    "station_id",
    "station_version",
    "start_of_period",
    "end_of_period",
    "publication_id",
    "publication_type",
    "binary_id",
]
MISSING_STATION_ID = "(missing station_id)"
FUEL_PRICE_PUBLICATION = "FuelPricePublication"
EMPTY_BINARY_ERROR = "Empty <binary> content."
