# sav_codec.py - Read and write .sav containers (uint32 size + zlib JSON)
import json
import logging
import math
import os
import shutil
import struct
import warnings
import zlib

log = logging.getLogger(__name__)

ZLIB_MARKER = 0x78
HEADER_SIZE = 4
MIN_FILE_SIZE = 6
COMPRESSION_LEVEL = 9
BACKUP_SUFFIX = ".backup"


class SaveFileError(ValueError):
    """Base class for containers the codec cannot decode."""


class FormatError(SaveFileError):
    """The container header or compressed body is malformed."""


class ParseError(SaveFileError):
    """The decompressed payload is not valid UTF-8 JSON."""


class SizeMismatchWarning(UserWarning):
    """Decompressed payload length differs from the size in the header."""


class DecodedSave:
    """Decompressed payload of a container, before JSON parsing."""

    def __init__(self, text, expected_size, actual_size):
        self.text = text
        self.expected_size = expected_size
        self.actual_size = actual_size

    @property
    def size_mismatch(self):
        return self.expected_size != self.actual_size


def decode_container(data):
    """Split the size header off and inflate the zlib body.

    A size mismatch is reported through SizeMismatchWarning and otherwise
    ignored.
    """
    if len(data) < MIN_FILE_SIZE:
        raise FormatError(f"file too small to be a save file ({len(data)} bytes)")
    if data[HEADER_SIZE] != ZLIB_MARKER:
        raise FormatError(f"not zlib-compressed (byte 4 is 0x{data[HEADER_SIZE]:02x}, expected 0x78)")

    expected_size = struct.unpack("<I", data[:HEADER_SIZE])[0]
    try:
        payload = zlib.decompress(data[HEADER_SIZE:])
    except zlib.error as e:
        raise FormatError(f"corrupt zlib stream: {e}") from e

    if len(payload) != expected_size:
        msg = f"header declares {expected_size} bytes, decompressed {len(payload)} bytes"
        log.debug("Size mismatch: %s", msg)
        warnings.warn(msg, SizeMismatchWarning, stacklevel=2)

    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"payload is not UTF-8: {e}") from e
    return DecodedSave(text, expected_size, len(payload))


def _reject_constant(name):
    raise ParseError(f"payload is not valid JSON: {name} is not a JSON number")


def _finite_float(literal):
    value = float(literal)
    if math.isinf(value):
        raise ParseError(f"payload is not valid JSON: {literal} is out of range")
    return value


def parse_text(text):
    try:
        return json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)
    except json.JSONDecodeError as e:
        raise ParseError(f"payload is not valid JSON: {e}") from e


def decode(data):
    """Decode container bytes into a JSON document tree."""
    return parse_text(decode_container(data).text)


def to_json_text(obj, pretty=False):
    # The game rejects indented JSON and does not unescape \uXXXX for
    # non-ASCII or HTML characters, so only the mandatory escapes are written.
    if pretty:
        return json.dumps(obj, ensure_ascii=False, indent=2, allow_nan=False)
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"), allow_nan=False)


def encode(obj):
    """Encode a document tree into container bytes."""
    payload = to_json_text(obj).encode("utf-8")
    comp = zlib.compress(payload, COMPRESSION_LEVEL)
    return struct.pack("<I", len(payload)) + comp


def export_pretty(obj):
    return to_json_text(obj, pretty=True)


def read_sav(path):
    """Load a .sav file. Returns (document, DecodedSave)."""
    with open(path, "rb") as f:
        data = f.read()
    decoded = decode_container(data)
    log.debug("Read %s: %d compressed bytes, %d decompressed", path, len(data), decoded.actual_size)
    return parse_text(decoded.text), decoded


def backup_file(path, suffix=BACKUP_SUFFIX):
    """Copy path to path + suffix, replacing any older backup.

    Returns the backup path, or None when there is nothing to back up.
    """
    path = os.fspath(path)
    if not os.path.exists(path):
        return None
    backup_path = path + suffix
    shutil.copyfile(path, backup_path)
    log.debug("Backed up %s -> %s", path, backup_path)
    return backup_path


def write_sav(obj, path, backup=False):
    """Encode obj and write it to path.

    With backup, the file being replaced is first copied to path.backup.
    Returns the backup path, if one was made.
    """
    # Serialize before touching the file so a bad document never truncates it
    data = encode(obj)
    backup_path = backup_file(path) if backup else None
    with open(path, "wb") as f:
        f.write(data)
    log.debug("Wrote %s (%d bytes)", path, len(data))
    return backup_path


def export_json(obj, path, pretty=True):
    with open(path, "w", encoding="utf-8") as f:
        f.write(to_json_text(obj, pretty=pretty))
