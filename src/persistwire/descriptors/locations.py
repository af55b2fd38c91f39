"""URL resolution for descriptor roots and jar references.

Resolution follows RFC 3986 reference resolution with one adjustment: a base
whose final path segment is ``.`` or ``..`` names a directory, so it is
resolved as if it ended with ``/``. This keeps roots of the form
``file:/app/META-INF/..`` meaning "the directory above META-INF".

The output keeps the scheme/authority spelling of the input (``file:/app/``
stays ``file:/app/``).

Examples:
    >>> resolve_location("file:/app/META-INF/..", "lib/x.jar")
    'file:/app/lib/x.jar'
    >>> descriptor_root("file:/foo/META-INF/persistence.xml")
    'file:/foo/'
"""

from urllib.parse import SplitResult, urlsplit

from persistwire.base.errors import LocationResolutionError


def _remove_dot_segments(path: str) -> str:
    segments = path.split("/")
    output: list[str] = []
    for i, segment in enumerate(segments):
        last = i == len(segments) - 1
        if segment == ".":
            if last:
                output.append("")
        elif segment == "..":
            if len(output) > 1 or (output and output[0] != ""):
                output.pop()
            if last:
                output.append("")
        else:
            output.append(segment)
    resolved = "/".join(output)
    if path.startswith("/") and not resolved.startswith("/"):
        resolved = "/" + resolved
    return resolved


def _directory_of(path: str) -> str:
    if path.endswith("/"):
        return path
    last_segment = path.rsplit("/", 1)[-1]
    if last_segment in (".", ".."):
        return path + "/"
    return path[: path.rfind("/") + 1] if "/" in path else ""


def _unsplit(base: SplitResult, path: str, query: str, fragment: str, original: str) -> str:
    if base.netloc or original.startswith(f"{base.scheme}://"):
        result = f"{base.scheme}://{base.netloc}{path}"
    else:
        result = f"{base.scheme}:{path}"
    if query:
        result += f"?{query}"
    if fragment:
        result += f"#{fragment}"
    return result


def resolve_location(root: str, reference: str) -> str:
    """Resolve ``reference`` against ``root``.

    Absolute references (with a scheme) are returned unchanged.

    :raises LocationResolutionError: If either value is empty or malformed
    """
    if not isinstance(reference, str) or not reference.strip():
        raise LocationResolutionError("Empty location reference", reference, root)
    if not isinstance(root, str) or not root.strip():
        raise LocationResolutionError("Empty root location", reference, root)

    reference = reference.strip()
    try:
        ref = urlsplit(reference)
        base = urlsplit(root)
    except ValueError as e:
        raise LocationResolutionError(f"Malformed location {reference!r} (root {root!r}): {e}", reference, root) from e

    if ref.scheme:
        return reference
    if not base.scheme:
        raise LocationResolutionError(f"Root location {root!r} is not an absolute URL", reference, root)
    if ref.netloc:
        return f"{base.scheme}:{reference}"

    if ref.path.startswith("/"):
        path = _remove_dot_segments(ref.path)
    elif ref.path:
        path = _remove_dot_segments(_directory_of(base.path) + ref.path)
    else:
        path = _remove_dot_segments(base.path)

    return _unsplit(base, path, ref.query, ref.fragment, root)


def descriptor_root(descriptor_location: str) -> str:
    """Root of the unit described at ``descriptor_location`` (the parent of its directory)."""
    return resolve_location(descriptor_location, "..")
