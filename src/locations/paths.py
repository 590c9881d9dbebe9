"""Materialized path helpers for the location hierarchy.

A path is a dot-joined sequence of labels that always starts with the anchor
label "root":

    root                      depth 1 (anchor only, never stored)
    root.garage               depth 2 (top-level location)
    root.garage.shelf_a       depth 3

Ancestor and descendant relations are plain prefix relations on the path.
All functions are pure.
"""

from src.locations.naming import LABEL_MAX_LENGTH, normalize_name

ANCHOR = "root"
SEPARATOR = "."

# Anchor plus five levels of nesting.
MAX_DEPTH = 6

# Longest possible path: the anchor plus MAX_DEPTH - 1 full-length labels.
PATH_MAX_LENGTH = len(ANCHOR) + (MAX_DEPTH - 1) * (len(SEPARATOR) + LABEL_MAX_LENGTH)


def build_path(parent_path: str | None, label: str) -> str:
    """Append `label` to `parent_path`, or to the anchor when there is no parent.

    The label is used as given; normalize it first.
    """
    if not parent_path:
        return f"{ANCHOR}{SEPARATOR}{label}"
    return f"{parent_path}{SEPARATOR}{label}"


def split_path(path: str) -> list[str]:
    return path.split(SEPARATOR)


def path_depth(path: str) -> int:
    """Number of segments, anchor included."""
    return len(split_path(path))


def parent_path(path: str) -> str:
    """All segments but the last. Empty string for a single-segment path."""
    segments = split_path(path)
    if len(segments) <= 1:
        return ""
    return SEPARATOR.join(segments[:-1])


def last_label(path: str) -> str:
    return split_path(path)[-1]


def regenerate_path(old_path: str, new_name: str) -> str:
    """Replace the final segment of `old_path` with the label of `new_name`.

        regenerate_path("root.garage.shelf_a", "Top Shelf") -> "root.garage.top_shelf"
        regenerate_path("single", "New Root")               -> "new_root"
    """
    parent = parent_path(old_path)
    label = normalize_name(new_name)
    if not parent:
        return label
    return build_path(parent, label)


def descendant_prefix(path: str) -> str:
    """Prefix shared by every descendant of `path` (and nothing else)."""
    return f"{path}{SEPARATOR}"


def is_descendant(path: str, ancestor: str) -> bool:
    return path.startswith(descendant_prefix(ancestor))


def replace_prefix(path: str, old_prefix: str, new_prefix: str) -> str:
    """Rewrite the `old_prefix` part of `path`, keeping the rest untouched.

    `path` must be `old_prefix` itself or one of its descendants.
    """
    if path != old_prefix and not is_descendant(path, old_prefix):
        msg = f"Path {path!r} is not under {old_prefix!r}."
        raise ValueError(msg)
    return new_prefix + path[len(old_prefix):]


def ancestor_paths(path: str) -> list[str]:
    """Paths of every stored ancestor, nearest to the anchor first.

    The anchor itself is not a stored location and is excluded, as is `path`.

        ancestor_paths("root.a.b.c") -> ["root.a", "root.a.b"]
    """
    segments = split_path(path)
    return [
        SEPARATOR.join(segments[:end])
        for end in range(2, len(segments))
    ]
