"""
Ledger Loader Tests
Tests for core/ledger/loader.py

Tests:
1. Regular/multisig classification at load time
2. Field aliases and exact decimal parsing
3. Malformed entries are rejected with the entry index
4. Key material in 32- and 64-byte private key forms
"""
import json
from decimal import Decimal

import pytest

from core.ledger.loader import (
    dump_key_material,
    dump_ledger,
    load_key_material,
    load_ledger,
    parse_key_material,
    parse_ledger,
)
from core.schemas.errors import MalformedKeyMaterialError, MalformedLedgerError
from core.schemas.ledger import MultisigAuth, RegularAuth


class TestParseLedger:
    """Tests for parse_ledger()."""

    def test_regular_entry(self, keys):
        (record,) = parse_ledger([{"address": keys[0].address, "balance": Decimal("12.5")}])

        assert isinstance(record.auth, RegularAuth)
        assert record.source_address == keys[0].address
        assert record.balance_units == 1_250_000_000

    def test_threshold_zero_is_regular(self, keys):
        (record,) = parse_ledger([
            {"address": keys[0].address, "balance": 1, "threshold": 0, "mandatoryKeys": []},
        ])
        assert isinstance(record.auth, RegularAuth)

    def test_multisig_entry(self, keys):
        (record,) = parse_ledger([{
            "address": keys[5].address,
            "balance": 3,
            "threshold": 2,
            "mandatoryKeys": [keys[0].public_key.hex()],
            "optionalKeys": ["0x" + keys[1].public_key.hex(), keys[2].public_key.hex()],
        }])

        assert isinstance(record.auth, MultisigAuth)
        assert record.auth.threshold == 2
        assert record.auth.mandatory_keys == (keys[0].public_key,)
        assert record.auth.optional_keys == (keys[1].public_key, keys[2].public_key)

    def test_aliases(self, keys):
        (record,) = parse_ledger([{
            "lskAddress": keys[5].address,
            "balance": 1,
            "numberOfSignatures": 1,
            "mandatoryKeys": [keys[0].public_key.hex()],
        }])
        assert record.threshold == 1

    def test_order_preserved(self, keys):
        data = [{"address": k.address, "balance": i} for i, k in enumerate(keys)]
        records = parse_ledger(data)
        assert [r.source_address for r in records] == [k.address for k in keys]

    def test_keys_without_threshold_rejected(self, keys):
        with pytest.raises(MalformedLedgerError, match="no threshold") as exc_info:
            parse_ledger([
                {"address": keys[0].address, "balance": 1},
                {"address": keys[1].address, "balance": 1, "mandatoryKeys": [keys[2].public_key.hex()]},
            ])
        assert exc_info.value.details["entry_index"] == 1

    def test_threshold_without_keys_rejected(self, keys):
        with pytest.raises(MalformedLedgerError, match="multisig"):
            parse_ledger([{"address": keys[0].address, "balance": 1, "threshold": 2}])

    def test_invalid_address_rejected(self):
        with pytest.raises(MalformedLedgerError, match="Invalid address"):
            parse_ledger([{"address": "lsknotanaddress", "balance": 1}])

    def test_missing_balance_rejected(self, keys):
        with pytest.raises(MalformedLedgerError, match="entry 0"):
            parse_ledger([{"address": keys[0].address}])

    def test_negative_balance_rejected(self, keys):
        with pytest.raises(MalformedLedgerError):
            parse_ledger([{"address": keys[0].address, "balance": -1}])

    def test_bad_key_hex_rejected(self, keys):
        with pytest.raises(MalformedLedgerError, match="mandatoryKeys"):
            parse_ledger([{
                "address": keys[0].address, "balance": 1, "threshold": 1, "mandatoryKeys": ["abcd"],
            }])

    def test_not_a_list_rejected(self):
        with pytest.raises(MalformedLedgerError, match="array"):
            parse_ledger({"accounts": []})


class TestLoadLedger:
    """Tests for load_ledger() from disk."""

    def test_exact_decimal(self, tmp_path, keys):
        path = tmp_path / "balances.json"
        path.write_text(json.dumps([{"address": keys[0].address, "balance": 0.00000001}]))

        (record,) = load_ledger(path)
        assert record.balance == Decimal("1E-8")
        assert record.balance_units == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(MalformedLedgerError, match="not found"):
            load_ledger(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "balances.json"
        path.write_text("[{")
        with pytest.raises(MalformedLedgerError, match="not valid JSON"):
            load_ledger(path)

    def test_dump_round_trip(self, tmp_path, records):
        from orchestrator.artifacts.io import write_json

        path = write_json(tmp_path / "balances.json", dump_ledger(records))
        assert load_ledger(path) == records


class TestKeyMaterial:
    """Tests for parse_key_material()/load_key_material()."""

    def _entry(self, key, private: bytes, address: bool = True) -> dict:
        entry = {"publicKey": key.public_key.hex(), "privateKey": private.hex()}
        if address:
            entry["address"] = key.address
        return entry

    def test_seed_form(self, keys):
        (parsed,) = parse_key_material({"keys": [self._entry(keys[0], keys[0].private_key)]})
        assert parsed == keys[0]

    def test_expanded_form(self, keys):
        private = keys[0].private_key + keys[0].public_key
        (parsed,) = parse_key_material([self._entry(keys[0], private, address=False)])
        assert parsed == keys[0]

    def test_public_key_mismatch(self, keys):
        entry = self._entry(keys[0], keys[1].private_key)
        with pytest.raises(MalformedKeyMaterialError, match="derive"):
            parse_key_material({"keys": [entry]})

    def test_embedded_public_key_mismatch(self, keys):
        entry = self._entry(keys[0], keys[0].private_key + keys[1].public_key)
        with pytest.raises(MalformedKeyMaterialError, match="embed"):
            parse_key_material({"keys": [entry]})

    def test_address_mismatch(self, keys):
        entry = self._entry(keys[0], keys[0].private_key)
        entry["address"] = keys[1].address
        with pytest.raises(MalformedKeyMaterialError, match="does not belong"):
            parse_key_material({"keys": [entry]})

    def test_bad_private_key_length(self, keys):
        entry = self._entry(keys[0], keys[0].private_key[:16])
        with pytest.raises(MalformedKeyMaterialError, match="32 or 64"):
            parse_key_material({"keys": [entry]})

    def test_missing_keys_array(self):
        with pytest.raises(MalformedKeyMaterialError):
            parse_key_material({"validators": []})

    def test_is_a_ledger_error(self):
        """Key material problems are fatal input errors like ledger problems."""
        assert issubclass(MalformedKeyMaterialError, MalformedLedgerError)

    def test_file_round_trip(self, tmp_path, keys):
        path = tmp_path / "dev-validators.json"
        path.write_text(json.dumps(dump_key_material(keys)))

        assert load_key_material(path) == keys
