"""Descriptor resource handles.

A :class:`DescriptorResource` pairs a location URL with a way to open its
bytes. Resources are found by :meth:`persistwire.units.class_loading.ClassLoader.get_resources`;
tests and hosts may also build in-memory resources directly.
"""

import io
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from persistwire.base.errors import ResourceError
from persistwire.descriptors.locations import descriptor_root
from persistwire.descriptors.marshalling import media_type_for, unmarshal
from persistwire.descriptors.schema import PersistenceDocument


@dataclass(frozen=True)
class DescriptorResource:
    """A readable descriptor at a known location.

    :param url: Location of the descriptor, e.g. ``file:///app/META-INF/persistence.xml``
    :param path: Filesystem path to read from, if the resource is a file
    :param data: In-memory content, used instead of ``path`` when given
    """

    url: str
    path: Path | None = None
    data: bytes | None = None

    @classmethod
    def from_path(cls, path: str | Path) -> "DescriptorResource":
        resolved = Path(path).resolve()
        return cls(url=resolved.as_uri(), path=resolved)

    @classmethod
    def from_bytes(cls, url: str, data: bytes | str) -> "DescriptorResource":
        return cls(url=url, data=data.encode("utf-8") if isinstance(data, str) else data)

    @property
    def root(self) -> str:
        """Root location of the units described here (the parent of the descriptor's directory)."""
        return descriptor_root(self.url)

    @property
    def media_type(self) -> str:
        return media_type_for(self.url)

    def open(self) -> BinaryIO:
        """Open the resource for binary reading.

        :raises ResourceError: If the resource cannot be opened
        """
        if self.data is not None:
            return io.BytesIO(self.data)
        if self.path is None:
            raise ResourceError(f"Descriptor resource {self.url} has neither a path nor data")
        try:
            return open(self.path, "rb")
        except OSError as e:
            raise ResourceError(f"Cannot read descriptor resource {self.url}: {e}", {"url": self.url}) from e


def load_document(resource: DescriptorResource) -> PersistenceDocument:
    """Open, unmarshal and close one descriptor resource.

    :raises ResourceError: If reading fails
    :raises DescriptorFormatError: If the content does not match the schema
    """
    try:
        with resource.open() as stream:
            return unmarshal(stream, resource.media_type, resource.url)
    except OSError as e:
        raise ResourceError(f"Failed reading descriptor resource {resource.url}: {e}", {"url": resource.url}) from e
