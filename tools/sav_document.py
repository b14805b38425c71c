# sav_document.py - Path access and mutation over a decoded save document
import logging
import re

import sav_codec

log = logging.getLogger(__name__)


class _Absent:
    """Result of a lookup that found nothing. Distinct from JSON null."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "ABSENT"


ABSENT = _Absent()


def split_path(path):
    """Normalize a path to a list of segments.

    "a.b.0" -> ["a", "b", 0]. Lists and tuples are returned as lists
    unchanged, which is the only way to address keys containing dots.
    """
    if isinstance(path, (list, tuple)):
        return list(path)
    if not path:
        return []
    return [int(part) if part.isdecimal() else part for part in path.split(".")]


def _is_index(segment):
    return isinstance(segment, int) and not isinstance(segment, bool)


def _child(node, segment):
    if isinstance(node, dict):
        key = str(segment) if _is_index(segment) else segment
        return node.get(key, ABSENT) if isinstance(key, str) else ABSENT
    if isinstance(node, list) and _is_index(segment):
        if 0 <= segment < len(node):
            return node[segment]
    return ABSENT


def lookup(root, path):
    """Walk path from root. Returns ABSENT as soon as a segment is missing."""
    node = root
    for segment in split_path(path):
        node = _child(node, segment)
        if node is ABSENT:
            return ABSENT
    return node


def _matches(value, kind):
    if kind is None:
        return True
    if isinstance(value, bool):
        return kind is bool
    if kind is float:
        return isinstance(value, (int, float))
    return isinstance(value, kind)


def get_value(root, path, default=None, kind=None):
    """Read a leaf, falling back to default when absent or of the wrong type.

    kind is one of str, int, float or bool. Integers are accepted for float,
    but neither floats nor booleans are accepted for int.
    """
    value = lookup(root, path)
    if value is ABSENT or not _matches(value, kind):
        return default
    if kind is float:
        return float(value)
    return value


def set_value(root, path, value, create=True):
    """Set the leaf at path, inserting the final key if it is missing.

    Existing members keep their position; new members are appended. Missing
    intermediate objects are created when create is true. Returns False
    without mutating anything if the parent cannot be reached.
    """
    segments = split_path(path)
    if not segments:
        return False

    node = root
    parents = segments[:-1]
    for i, segment in enumerate(parents):
        child = _child(node, segment)
        if child is ABSENT:
            missing = parents[i:]
            if not create or not isinstance(node, dict) or any(_is_index(s) for s in missing):
                return False
            for name in missing:
                child = {}
                node[name] = child
                node = child
            break
        node = child

    return _assign(node, segments[-1], value)


def _assign(node, key, value):
    if isinstance(node, dict):
        node[str(key) if _is_index(key) else key] = value
        return True
    if isinstance(node, list) and _is_index(key) and 0 <= key < len(node):
        node[key] = value
        return True
    return False


def delete_key(root, container_path, key):
    """Remove key from the object at container_path. Returns True if removed."""
    node = lookup(root, container_path)
    if isinstance(node, dict) and key in node:
        del node[key]
        return True
    return False


def remove_keys(root, container_path, keys):
    """Remove every member of keys from the object at container_path.

    Members not named in keys, and their subtrees, are left as they are.
    Returns the keys that were actually removed, in the order given.
    """
    node = lookup(root, container_path)
    if not isinstance(node, dict):
        return []
    removed = []
    for key in keys:
        if key in node:
            del node[key]
            removed.append(key)
    return removed


def asset_id(path):
    """Last path segment without its class suffix (/Game/Items/I_Foo.I_Foo_C -> I_Foo)."""
    if not path:
        return ""
    if "/" not in path:
        return path
    segment = path.rsplit("/", 1)[-1]
    dot = segment.find(".")
    if dot > 0:
        segment = segment[:dot]
    return segment


def spaced_words(text):
    """Insert a space before each uppercase letter that follows a lowercase one."""
    return re.sub(r"(?<=[a-z])(?=[A-Z])", " ", text)


def friendly_name(path, prefixes=("I_", "CR_"), empty="Unknown"):
    """Display name for an asset path.

    "/Game/Items/I_IronPlate.I_IronPlate_C" -> "Iron Plate"
    """
    if not path:
        return empty
    if "/" not in path:
        return path
    segment = path.rsplit("/", 1)[-1]
    for prefix in prefixes:
        if segment.startswith(prefix):
            segment = segment[len(prefix):]
            break
    dot = segment.find(".")
    if dot > 0:
        segment = segment[:dot]
    return spaced_words(segment)


class SaveDocument:
    """A loaded save file and the document tree decoded from it.

    Mutations go through get/set/delete_key so the handle knows which paths
    were touched; editors may also mutate root directly and call
    mark_modified.
    """

    def __init__(self, root, path=None, decoded=None):
        self.root = root
        self.path = path
        self.expected_size = decoded.expected_size if decoded else None
        self.actual_size = decoded.actual_size if decoded else None
        self.touched = set()

    @classmethod
    def load(cls, path):
        root, decoded = sav_codec.read_sav(path)
        log.info("Loaded %s", path)
        return cls(root, path, decoded)

    @property
    def size_mismatch(self):
        return self.expected_size is not None and self.expected_size != self.actual_size

    @property
    def has_unsaved_changes(self):
        return bool(self.touched)

    def mark_modified(self, path):
        self.touched.add(tuple(split_path(path)))

    def get(self, path, default=None, kind=None):
        return get_value(self.root, path, default, kind)

    def lookup(self, path):
        return lookup(self.root, path)

    def set(self, path, value, create=True):
        ok = set_value(self.root, path, value, create)
        if ok:
            self.mark_modified(path)
        return ok

    def delete_key(self, container_path, key):
        ok = delete_key(self.root, container_path, key)
        if ok:
            self.mark_modified(split_path(container_path) + [key])
        return ok

    def remove_keys(self, container_path, keys):
        removed = remove_keys(self.root, container_path, keys)
        for key in removed:
            self.mark_modified(split_path(container_path) + [key])
        return removed

    def export_text(self, pretty=False):
        return sav_codec.to_json_text(self.root, pretty=pretty)

    def export_json(self, path, pretty=True):
        sav_codec.export_json(self.root, path, pretty=pretty)

    def summary(self):
        text = self.export_text(pretty=True)
        return f"{len(text.splitlines()):,} lines, {len(text):,} characters"

    def save(self, path=None, backup=True, reload=True):
        """Write the document, backing up the file being replaced first.

        On success the file is read back and becomes the new root, so what
        stays in memory is exactly what the game will see. If writing fails
        the exception propagates and the in-memory tree is left as it was.
        """
        path = path or self.path
        if path is None:
            raise ValueError("no path to save to")
        backup_path = sav_codec.write_sav(self.root, path, backup=backup)
        log.info("Saved %s", path)

        self.path = path
        if reload:
            root, decoded = sav_codec.read_sav(path)
            self.root = root
            self.expected_size = decoded.expected_size
            self.actual_size = decoded.actual_size
        self.touched.clear()
        return backup_path


def load(path):
    return SaveDocument.load(path)


def save(document, path=None, backup=True):
    return document.save(path, backup=backup)


def export_text(document, pretty=False):
    return document.export_text(pretty)
