"""Structural hashing of typed payloads.

Payloads are dataclasses or pydantic models whose fields are annotated with
the types below. Every value is reduced to a 32-byte root by packing basic
values into 32-byte chunks and merkleizing them with SHA-256, so two payloads
with equal field values always share a root regardless of how they were
built.

Supported annotations:
    bool                        one byte
    int                         little-endian uint64
    Annotated[bytes, ByteVector(n)]
                                fixed-size byte vector (see Bytes32 and friends)
    bytes                       variable-length byte list, length mixed in
    list[T] / tuple[T, ...]     homogeneous list, length mixed in
    dataclass / BaseModel       container, field roots merkleized in order

Example:
    @dataclass(frozen=True)
    class Checkpoint:
        epoch: int
        root: Bytes32

    hash_tree_root(Checkpoint(epoch=3, root=b"\\x00" * 32))
"""

from __future__ import annotations

import dataclasses
import hashlib
from dataclasses import dataclass
from typing import Annotated, Any, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from domain.signing.exceptions import CanonicalizationError


BYTES_PER_CHUNK = 32
ZERO_CHUNK = b"\x00" * BYTES_PER_CHUNK
MAX_UINT64 = 2**64 - 1


@dataclass(frozen=True)
class ByteVector:
    """Annotation marker for a fixed-size byte vector."""

    length: int


Uint64 = int
Bytes4 = Annotated[bytes, ByteVector(4)]
Bytes32 = Annotated[bytes, ByteVector(32)]
Bytes48 = Annotated[bytes, ByteVector(48)]
Bytes96 = Annotated[bytes, ByteVector(96)]


def _hash(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def pack(serialized: bytes) -> list[bytes]:
    """Split serialized bytes into zero-padded 32-byte chunks.

    Args:
        serialized: Concatenated serialization of basic values

    Returns:
        List of 32-byte chunks (empty for empty input)
    """
    if not serialized:
        return []
    remainder = len(serialized) % BYTES_PER_CHUNK
    if remainder:
        serialized += b"\x00" * (BYTES_PER_CHUNK - remainder)
    return [
        serialized[i : i + BYTES_PER_CHUNK] for i in range(0, len(serialized), BYTES_PER_CHUNK)
    ]


def merkleize(chunks: list[bytes]) -> bytes:
    """Compute the binary merkle root of chunks.

    The leaf layer is padded with zero chunks up to the next power of two.
    An empty chunk list has the zero chunk as its root.

    Args:
        chunks: 32-byte leaves

    Returns:
        32-byte root
    """
    if not chunks:
        return ZERO_CHUNK

    width = 1
    while width < len(chunks):
        width *= 2

    layer = list(chunks) + [ZERO_CHUNK] * (width - len(chunks))
    while len(layer) > 1:
        layer = [_hash(layer[i] + layer[i + 1]) for i in range(0, len(layer), 2)]
    return layer[0]


def mix_in_length(root: bytes, length: int) -> bytes:
    """Bind a list length into its root."""
    return _hash(root + length.to_bytes(BYTES_PER_CHUNK, "little"))


def hash_tree_root(value: Any, annotation: Any = None, *, path: str = "payload") -> bytes:
    """Compute the structural root of a typed value.

    Args:
        value: Value to hash
        annotation: Type annotation describing value; inferred for containers
            and basic values when omitted
        path: Location of value inside the top-level payload, used in errors

    Returns:
        32-byte root

    Raises:
        CanonicalizationError: If the value or its annotation is unsupported
    """
    if annotation is None:
        annotation = _infer_annotation(value, path)

    if get_origin(annotation) is Annotated:
        base, *metadata = get_args(annotation)
        vectors = [m for m in metadata if isinstance(m, ByteVector)]
        if vectors:
            return _byte_vector_root(value, vectors[0].length, path)
        return hash_tree_root(value, base, path=path)

    if _is_basic(annotation):
        return merkleize(pack(_serialize_basic(value, annotation, path)))

    if annotation in (bytes, bytearray):
        if not isinstance(value, bytes | bytearray):
            raise CanonicalizationError(f"Expected bytes, got {type(value).__name__}", path)
        return mix_in_length(merkleize(pack(bytes(value))), len(value))

    origin = get_origin(annotation)
    if origin in (list, tuple):
        return _list_root(value, annotation, path)

    if _is_container(annotation):
        return _container_root(value, annotation, path)

    raise CanonicalizationError(f"Unsupported type {annotation!r}", path)


def _infer_annotation(value: Any, path: str) -> Any:
    if isinstance(value, BaseModel) or (
        dataclasses.is_dataclass(value) and not isinstance(value, type)
    ):
        return type(value)
    if isinstance(value, bool | int | bytes | bytearray):
        return type(value)
    raise CanonicalizationError(
        f"Cannot infer canonical type for {type(value).__name__}; annotate it", path
    )


def _is_basic(annotation: Any) -> bool:
    return annotation is bool or annotation is int


def _is_container(annotation: Any) -> bool:
    if not isinstance(annotation, type):
        return False
    return dataclasses.is_dataclass(annotation) or issubclass(annotation, BaseModel)


def _serialize_basic(value: Any, annotation: Any, path: str) -> bytes:
    if annotation is bool:
        if not isinstance(value, bool):
            raise CanonicalizationError(f"Expected bool, got {type(value).__name__}", path)
        return b"\x01" if value else b"\x00"

    if isinstance(value, bool) or not isinstance(value, int):
        raise CanonicalizationError(f"Expected uint64, got {type(value).__name__}", path)
    if not 0 <= value <= MAX_UINT64:
        raise CanonicalizationError(f"Integer {value} out of uint64 range", path)
    return value.to_bytes(8, "little")


def _byte_vector_root(value: Any, length: int, path: str) -> bytes:
    if not isinstance(value, bytes | bytearray):
        raise CanonicalizationError(f"Expected bytes, got {type(value).__name__}", path)
    if len(value) != length:
        raise CanonicalizationError(f"Expected {length} bytes, got {len(value)}", path)
    return merkleize(pack(bytes(value)))


def _list_root(value: Any, annotation: Any, path: str) -> bytes:
    args = get_args(annotation)
    if get_origin(annotation) is tuple:
        if len(args) != 2 or args[1] is not Ellipsis:
            raise CanonicalizationError("Only homogeneous tuple[T, ...] is supported", path)
    if not args:
        raise CanonicalizationError(f"List annotation {annotation!r} has no element type", path)
    if not isinstance(value, list | tuple):
        raise CanonicalizationError(f"Expected sequence, got {type(value).__name__}", path)

    element = args[0]
    if _is_basic(element):
        serialized = b"".join(
            _serialize_basic(item, element, f"{path}[{i}]") for i, item in enumerate(value)
        )
        root = merkleize(pack(serialized))
    else:
        root = merkleize(
            [hash_tree_root(item, element, path=f"{path}[{i}]") for i, item in enumerate(value)]
        )
    return mix_in_length(root, len(value))


def _field_annotations(container: type, path: str) -> dict[str, Any]:
    # Pydantic strips Annotated from fields and keeps the extras as metadata
    if issubclass(container, BaseModel):
        annotations: dict[str, Any] = {}
        for name, field in container.model_fields.items():
            if field.metadata:
                annotations[name] = Annotated[(field.annotation, *field.metadata)]
            else:
                annotations[name] = field.annotation
        return annotations

    try:
        hints = get_type_hints(container, include_extras=True)
    except Exception as e:
        raise CanonicalizationError(
            f"Cannot resolve field types of {container.__name__}: {e}", path
        ) from e
    return {f.name: hints[f.name] for f in dataclasses.fields(container)}


def _container_root(value: Any, container: type, path: str) -> bytes:
    if not isinstance(value, container):
        raise CanonicalizationError(
            f"Expected {container.__name__}, got {type(value).__name__}", path
        )

    hints = _field_annotations(container, path)
    names = list(hints)
    if not names:
        raise CanonicalizationError(f"Container {container.__name__} has no fields", path)

    return merkleize(
        [hash_tree_root(getattr(value, name), hints[name], path=f"{path}.{name}") for name in names]
    )
