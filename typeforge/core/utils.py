"""
Pure string and path helpers shared by the type service, the dependency
resolver and the template engine.

All path arithmetic is lexical and POSIX-style; nothing here touches the
file system, so the results are the same on every platform.
"""

import re
import posixpath
from typing import Optional


_ARITY_PATTERN = re.compile(r"`\d+$")


def remove_type_arity(name: str) -> str:
    """Strip a generic arity suffix: "Page`1" -> "Page"."""
    return _ARITY_PATTERN.sub("", name)


def get_tab_text(tab_length: int) -> str:
    """Indentation text for one tab stop."""
    return " " * max(tab_length, 0)


def normalize_dir(directory: Optional[str]) -> str:
    """
    Normalize an output directory to an absolute POSIX path rooted at "/".

    None or an empty string means the output root. Backslashes are treated as
    separators so Windows-style configuration behaves the same.

    Examples:
        None -> "/"
        "model/shared/" -> "/model/shared"
        "..\\x" -> "/x"
    """
    if not directory:
        return "/"
    path = directory.replace("\\", "/")
    if not path.startswith("/"):
        path = "/" + path
    return posixpath.normpath(path).replace("//", "/")


def relative_path(from_dir: Optional[str], to_dir: Optional[str]) -> str:
    """
    Calculate the shortest relative path between two directories.

    The result always starts with "./" or "../" so it can be used directly as
    an import specifier prefix. This function never fails.

    Examples:
        ("/out/a", "/out/a") -> "./"
        ("/out/a", "/out/a/b") -> "./b"
        ("/out/a/b", "/out/a") -> "../"
        ("/out/a", "/out/c") -> "../c"
    """
    source = normalize_dir(from_dir)
    target = normalize_dir(to_dir)

    relative = posixpath.relpath(target, source)

    if relative == ".":
        return "./"
    if all(segment == ".." for segment in relative.split("/")):
        return relative + "/"
    if relative.startswith("../"):
        return relative
    return f"./{relative}"


def join_import_path(directory_diff: str, file_name: str) -> str:
    """Join a relative directory (from relative_path) with a file name."""
    return posixpath.join(directory_diff, file_name)


def join_output_path(output_root: str, output_dir: Optional[str], file_name: str) -> str:
    """Build a type's output file path below the output root."""
    root = (output_root or ".").replace("\\", "/")
    relative_dir = normalize_dir(output_dir).lstrip("/")
    return posixpath.normpath(posixpath.join(root, relative_dir, file_name))
