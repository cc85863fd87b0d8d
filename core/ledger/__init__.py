"""
Ledger loading and example dataset generation.
"""
from .loader import (
    dump_key_material,
    dump_ledger,
    load_key_material,
    load_ledger,
    parse_key_material,
    parse_ledger,
)
from .fixtures import (
    generate_key_material,
    generate_ledger,
    required_key_count,
    seeded_balances,
)

__all__ = [
    "dump_key_material",
    "dump_ledger",
    "load_key_material",
    "load_ledger",
    "parse_key_material",
    "parse_ledger",
    "generate_key_material",
    "generate_ledger",
    "required_key_count",
    "seeded_balances",
]
