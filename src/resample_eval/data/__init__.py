from .table import TableSchema, validate_table
from .splits import RandomSplit, bootstrap_resample, random_split, split_sizes
from .loader import DelimitedTableLoader, load_table
from .synthetic import simulate_growth, simulate_linear, simulate_linear_from_config

__all__ = [
    "TableSchema", "validate_table",
    "RandomSplit", "bootstrap_resample", "random_split", "split_sizes",
    "DelimitedTableLoader", "load_table",
    "simulate_growth", "simulate_linear", "simulate_linear_from_config",
]
