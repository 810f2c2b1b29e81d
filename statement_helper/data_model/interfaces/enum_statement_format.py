from enum import Enum


class StatementFormat(Enum):
    """
    File formats handled by the ingest/export pipeline.
    """
    DELIMITED = "CSV"
    OFX = "OFX"
    IIF = "IIF"
    UNKNOWN = "UNKNOWN"
