from __future__ import annotations
import io
import os
import pytest # type: ignore
import numpy as np # type: ignore
from nanohll.lib.hyperloglog import HyperLogLog
from nanohll.lib.errors import SerializationError


def make_payload(**overrides) -> bytes:
    """Build an npz payload with the serialized layout, overriding fields."""
    fields = {
        'registers': np.zeros(16, dtype=np.uint8),
        'precision': np.array([4], dtype=np.int64),
        'num_registers': np.array([16], dtype=np.int64),
        'seed': np.array([0], dtype=np.int64),
    }
    fields.update(overrides)
    fields = {k: v for k, v in fields.items() if v is not None}
    buffer = io.BytesIO()
    np.savez_compressed(buffer, **fields)
    return buffer.getvalue()


@pytest.mark.quick
class TestSketchesIOQuick:
    """Quick tests for sketch serialization."""

    def test_bytes_roundtrip(self):
        hll = HyperLogLog(precision=12)
        hll.add_batch(range(5000))

        restored = HyperLogLog.from_bytes(hll.to_bytes())

        assert restored.precision == hll.precision
        assert restored.num_registers == hll.num_registers
        assert restored.registers.dtype == np.uint8
        np.testing.assert_array_equal(hll.registers, restored.registers)
        assert restored.count() == hll.count()

    def test_empty_roundtrip(self):
        restored = HyperLogLog.from_bytes(HyperLogLog(precision=4).to_bytes())
        assert restored.is_empty()
        assert restored.count() == 0

    def test_roundtrip_is_independent(self):
        hll = HyperLogLog(precision=8)
        hll.add("a")
        restored = HyperLogLog.from_bytes(hll.to_bytes())
        restored.add_batch(range(1000))
        assert hll.count() == 1

    def test_hyperloglog_io(self, temp_dir):
        """Test HyperLogLog read/write functionality."""
        hll = HyperLogLog(precision=8)
        hll.add_string("ACGTACGT")

        filepath = os.path.join(temp_dir, "test.hll")
        hll.write(filepath)
        assert os.path.exists(filepath)

        hll2 = HyperLogLog.load(filepath)

        assert hll.precision == hll2.precision
        np.testing.assert_array_equal(hll.registers, hll2.registers)

    def test_manual_payload_accepted(self):
        registers = np.arange(16, dtype=np.int64)
        hll = HyperLogLog.from_bytes(make_payload(registers=registers))
        assert hll.registers.dtype == np.uint8
        assert hll.registers.tolist() == list(range(16))

    @pytest.mark.parametrize("data", [b"", b"garbage", b"PK\x03\x04truncated"])
    def test_garbage_rejected(self, data):
        with pytest.raises(SerializationError):
            HyperLogLog.from_bytes(data)

    def test_truncated_rejected(self):
        data = HyperLogLog(precision=10).to_bytes()
        with pytest.raises(SerializationError):
            HyperLogLog.from_bytes(data[:len(data) // 2])

    def test_npy_rejected(self):
        buffer = io.BytesIO()
        np.save(buffer, np.zeros(16, dtype=np.uint8))
        with pytest.raises(SerializationError):
            HyperLogLog.from_bytes(buffer.getvalue())

    @pytest.mark.parametrize("missing", ['registers', 'precision', 'num_registers', 'seed'])
    def test_missing_field_rejected(self, missing):
        with pytest.raises(SerializationError, match=missing):
            HyperLogLog.from_bytes(make_payload(**{missing: None}))

    def test_invalid_precision_rejected(self):
        payload = make_payload(precision=np.array([3], dtype=np.int64),
                               num_registers=np.array([8], dtype=np.int64),
                               registers=np.zeros(8, dtype=np.uint8))
        with pytest.raises(SerializationError, match="precision"):
            HyperLogLog.from_bytes(payload)

    def test_register_count_mismatch_rejected(self):
        with pytest.raises(SerializationError):
            HyperLogLog.from_bytes(make_payload(num_registers=np.array([32], dtype=np.int64)))
        with pytest.raises(SerializationError):
            HyperLogLog.from_bytes(make_payload(registers=np.zeros(32, dtype=np.uint8)))
        with pytest.raises(SerializationError):
            HyperLogLog.from_bytes(make_payload(registers=np.zeros((4, 4), dtype=np.uint8)))

    def test_register_values_out_of_range_rejected(self):
        too_big = np.zeros(16, dtype=np.uint8)
        too_big[3] = 62  # max rank at precision 4 is 61
        with pytest.raises(SerializationError):
            HyperLogLog.from_bytes(make_payload(registers=too_big))

        negative = np.zeros(16, dtype=np.int64)
        negative[0] = -1
        with pytest.raises(SerializationError):
            HyperLogLog.from_bytes(make_payload(registers=negative))

    def test_float_registers_rejected(self):
        with pytest.raises(SerializationError):
            HyperLogLog.from_bytes(make_payload(registers=np.zeros(16, dtype=np.float64)))

    @pytest.mark.parametrize("field", ["precision", "num_registers", "seed"])
    def test_float_header_rejected(self, field):
        with pytest.raises(SerializationError, match="non-integer"):
            HyperLogLog.from_bytes(make_payload(**{field: np.array([4.7])}))

    def test_infinite_precision_rejected(self):
        with pytest.raises(SerializationError):
            HyperLogLog.from_bytes(make_payload(precision=np.array([np.inf])))

    def test_foreign_seed_rejected(self):
        with pytest.raises(SerializationError, match="seed"):
            HyperLogLog.from_bytes(make_payload(seed=np.array([42], dtype=np.int64)))

    def test_serialization_error_is_value_error(self):
        with pytest.raises(ValueError):
            HyperLogLog.from_bytes(b"garbage")


@pytest.mark.full
class TestSketchesIOFull:
    """Round trips across all precisions."""

    @pytest.mark.parametrize("precision", range(4, 17))
    def test_roundtrip_all_precisions(self, precision, temp_dir):
        hll = HyperLogLog(precision=precision)
        hll.add_batch(f"user:{i}" for i in range(3000))

        restored = HyperLogLog.from_bytes(hll.to_bytes())
        np.testing.assert_array_equal(hll.registers, restored.registers)
        assert restored.count() == hll.count()

        filepath = os.path.join(temp_dir, f"p{precision}.hll")
        hll.write(filepath)
        loaded = HyperLogLog.load(filepath)
        np.testing.assert_array_equal(hll.registers, loaded.registers)
        assert loaded.count() == hll.count()
