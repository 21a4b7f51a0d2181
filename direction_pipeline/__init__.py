"""Direction Split Pipeline - Classify and split GTFS trips by curated stop order."""

from direction_pipeline.api import check_registry, split
from direction_pipeline.version import SCHEMA_VERSION, VERSION

__version__ = VERSION
__all__ = ["SCHEMA_VERSION", "VERSION", "check_registry", "split"]
