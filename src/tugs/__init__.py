from .bands import (
    BERTHING,
    OPERATIONS,
    UNBERTHING,
    Band,
    DatasetSnapshot,
    bands_to_dataframe,
)
from .loader import (
    LoadError,
    ParseError,
    load_dataset,
    load_dataset_file,
    load_dataset_text,
    parse,
    parse_number,
)
from .lookup import (
    LookupResult,
    NoMatch,
    ValidationError,
    compute_result,
    format_band_label,
    format_result,
    lookup,
    round_up_tugs,
)
from .settings import (
    CONFIG_KEYS,
    AppConfig,
    apply_overrides,
    config_from_dict,
    config_to_dict,
    get_config,
)

__all__ = [
    "BERTHING",
    "CONFIG_KEYS",
    "OPERATIONS",
    "UNBERTHING",
    "AppConfig",
    "Band",
    "DatasetSnapshot",
    "LoadError",
    "LookupResult",
    "NoMatch",
    "ParseError",
    "ValidationError",
    "apply_overrides",
    "bands_to_dataframe",
    "compute_result",
    "config_from_dict",
    "config_to_dict",
    "format_band_label",
    "format_result",
    "get_config",
    "load_dataset",
    "load_dataset_file",
    "load_dataset_text",
    "lookup",
    "parse",
    "parse_number",
    "round_up_tugs",
]
