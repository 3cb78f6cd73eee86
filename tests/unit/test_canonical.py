"""Unit tests for structural hashing of typed payloads."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Annotated

import pytest
from pydantic import BaseModel

from domain.signing.canonical import (
    ZERO_CHUNK,
    Bytes4,
    Bytes32,
    ByteVector,
    hash_tree_root,
    merkleize,
    mix_in_length,
    pack,
)
from domain.signing.exceptions import CanonicalizationError


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def chunk(data: bytes) -> bytes:
    return data + b"\x00" * (32 - len(data))


@dataclass
class Pair:
    left: Bytes32
    right: Bytes32


@dataclass
class Triple:
    a: int
    b: bool
    c: Bytes4


@dataclass
class Outer:
    pair: Pair
    values: list[int]


@dataclass
class WithString:
    label: str


@dataclass
class WithFloat:
    ratio: float


@dataclass
class WithOptional:
    value: int | None


@dataclass
class WithTuple:
    items: tuple[int, ...]


@dataclass
class WithFixedTuple:
    items: tuple[int, int]


@dataclass
class Empty:
    pass


class ModelPair(BaseModel):
    left: Bytes32
    right: Bytes32


class ModelWithString(BaseModel):
    label: str


class TestPacking:
    """Tests for chunk packing and merkleization helpers."""

    def test_pack_empty(self) -> None:
        assert pack(b"") == []

    def test_pack_pads_last_chunk(self) -> None:
        chunks = pack(b"\x01" * 33)
        assert len(chunks) == 2
        assert chunks[0] == b"\x01" * 32
        assert chunks[1] == chunk(b"\x01")

    def test_merkleize_empty_is_zero_chunk(self) -> None:
        assert merkleize([]) == ZERO_CHUNK

    def test_merkleize_single_chunk_is_identity(self) -> None:
        leaf = b"\xab" * 32
        assert merkleize([leaf]) == leaf

    def test_merkleize_pads_to_power_of_two(self) -> None:
        a, b, c = b"\x01" * 32, b"\x02" * 32, b"\x03" * 32
        expected = sha256(sha256(a + b) + sha256(c + ZERO_CHUNK))
        assert merkleize([a, b, c]) == expected

    def test_mix_in_length(self) -> None:
        root = b"\x07" * 32
        assert mix_in_length(root, 3) == sha256(root + (3).to_bytes(32, "little"))


class TestBasicValues:
    """Tests for roots of basic values."""

    def test_uint64_root(self) -> None:
        assert hash_tree_root(5) == chunk((5).to_bytes(8, "little"))

    def test_bool_root(self) -> None:
        assert hash_tree_root(True) == chunk(b"\x01")
        assert hash_tree_root(False) == ZERO_CHUNK

    def test_uint64_bounds(self) -> None:
        assert hash_tree_root(2**64 - 1) == chunk(b"\xff" * 8)

        with pytest.raises(CanonicalizationError, match="out of uint64 range"):
            hash_tree_root(2**64)

        with pytest.raises(CanonicalizationError, match="out of uint64 range"):
            hash_tree_root(-1)

    def test_bool_is_not_uint64(self) -> None:
        with pytest.raises(CanonicalizationError, match="Expected uint64"):
            hash_tree_root(True, int)

    def test_byte_vector_root(self) -> None:
        value = b"\x42" * 32
        assert hash_tree_root(value, Bytes32) == value

    def test_byte_vector_wrong_length(self) -> None:
        with pytest.raises(CanonicalizationError, match="Expected 32 bytes, got 31"):
            hash_tree_root(b"\x00" * 31, Bytes32)

    def test_custom_byte_vector(self) -> None:
        value = b"\x01" * 64
        root = hash_tree_root(value, Annotated[bytes, ByteVector(64)])
        assert root == sha256(value)

    def test_byte_list_mixes_in_length(self) -> None:
        assert hash_tree_root(b"") == mix_in_length(ZERO_CHUNK, 0)
        assert hash_tree_root(b"\x01\x02") == mix_in_length(chunk(b"\x01\x02"), 2)

    def test_uninferable_value(self) -> None:
        with pytest.raises(CanonicalizationError, match="Cannot infer canonical type"):
            hash_tree_root("text")


class TestContainers:
    """Tests for roots of dataclass and pydantic containers."""

    def test_two_field_container(self) -> None:
        left, right = b"\x01" * 32, b"\x02" * 32
        assert hash_tree_root(Pair(left, right)) == sha256(left + right)

    def test_three_field_container(self) -> None:
        value = Triple(a=9, b=True, c=b"\xde\xad\xbe\xef")
        expected = merkleize(
            [chunk((9).to_bytes(8, "little")), chunk(b"\x01"), chunk(b"\xde\xad\xbe\xef")]
        )
        assert hash_tree_root(value) == expected

    def test_nested_container_and_list(self) -> None:
        pair = Pair(b"\x01" * 32, b"\x02" * 32)
        value = Outer(pair=pair, values=[1, 2, 3])

        packed = b"".join(i.to_bytes(8, "little") for i in (1, 2, 3))
        values_root = mix_in_length(chunk(packed), 3)
        assert hash_tree_root(value) == sha256(hash_tree_root(pair) + values_root)

    def test_list_of_containers(self) -> None:
        first = Pair(b"\x01" * 32, b"\x02" * 32)
        second = Pair(b"\x03" * 32, b"\x04" * 32)
        root = hash_tree_root([first, second], list[Pair])
        expected = mix_in_length(
            sha256(hash_tree_root(first) + hash_tree_root(second)), 2
        )
        assert root == expected

    def test_homogeneous_tuple_matches_list(self) -> None:
        assert hash_tree_root(WithTuple(items=(1, 2))) == hash_tree_root(
            [1, 2], list[int]
        )

    def test_pydantic_model_matches_dataclass(self) -> None:
        left, right = b"\x01" * 32, b"\x02" * 32
        assert hash_tree_root(ModelPair(left=left, right=right)) == hash_tree_root(
            Pair(left, right)
        )

    def test_deterministic(self, attestation: object) -> None:
        assert hash_tree_root(attestation) == hash_tree_root(attestation)

    def test_field_change_changes_root(self) -> None:
        a = Triple(a=1, b=False, c=b"\x00" * 4)
        b = Triple(a=2, b=False, c=b"\x00" * 4)
        assert hash_tree_root(a) != hash_tree_root(b)

    def test_wrong_container_instance(self) -> None:
        with pytest.raises(CanonicalizationError, match="Expected Pair, got Triple"):
            hash_tree_root(Triple(a=1, b=True, c=b"\x00" * 4), Pair)


class TestUnsupportedShapes:
    """Tests for payload shapes the scheme rejects."""

    @pytest.mark.parametrize(
        "value",
        [
            WithString(label="x"),
            WithFloat(ratio=0.5),
            WithOptional(value=None),
            WithFixedTuple(items=(1, 2)),
            ModelWithString(label="x"),
        ],
    )
    def test_unsupported_field_types(self, value: object) -> None:
        with pytest.raises(CanonicalizationError):
            hash_tree_root(value)

    def test_empty_container(self) -> None:
        with pytest.raises(CanonicalizationError, match="has no fields"):
            hash_tree_root(Empty())

    def test_error_reports_path(self) -> None:
        pair = Pair(b"\x01" * 32, b"\x02" * 31)

        with pytest.raises(CanonicalizationError) as exc_info:
            hash_tree_root(Outer(pair=pair, values=[]))

        assert exc_info.value.path == "payload.pair.right"
        assert exc_info.value.error_code == "CANONICALIZATION_ERROR"

    def test_bad_list_element_reports_index(self) -> None:
        with pytest.raises(CanonicalizationError) as exc_info:
            hash_tree_root(Outer(pair=Pair(b"\x00" * 32, b"\x00" * 32), values=[1, -2]))

        assert exc_info.value.path == "payload.values[1]"
