"""Tests for descriptor location resolution."""

import pytest

from persistwire.base.errors import LocationResolutionError
from persistwire.descriptors.locations import descriptor_root, resolve_location


class TestResolveLocation:
    @pytest.mark.parametrize(
        ("root", "reference", "expected"),
        [
            ("file:/app/META-INF/..", "lib/x.jar", "file:/app/lib/x.jar"),
            ("file:/app/", "lib/x.jar", "file:/app/lib/x.jar"),
            ("file:///srv/app/", "lib/x.jar", "file:///srv/app/lib/x.jar"),
            ("file:/app/", "../shared/y.jar", "file:/shared/y.jar"),
            ("file:/app/", "/opt/lib/z.jar", "file:/opt/lib/z.jar"),
            ("file:/app/", "lib/x.jar?v=1", "file:/app/lib/x.jar?v=1"),
            ("file:/app/", "//host/x.jar", "file://host/x.jar"),
            ("https://repo.example.org/app/", "lib/x.jar", "https://repo.example.org/app/lib/x.jar"),
        ],
    )
    def test_relative_references(self, root, reference, expected):
        assert resolve_location(root, reference) == expected

    def test_absolute_reference_unchanged(self):
        assert resolve_location("file:/app/", "jar:file:/libs/a.jar!/") == "jar:file:/libs/a.jar!/"
        assert resolve_location("file:/app/", "http://h/x.jar") == "http://h/x.jar"

    def test_cannot_climb_above_root(self):
        assert resolve_location("file:/", "../../x.jar") == "file:/x.jar"

    def test_surrounding_whitespace_ignored(self):
        assert resolve_location("file:/app/", "  lib/x.jar\n") == "file:/app/lib/x.jar"

    @pytest.mark.parametrize("reference", ["", "   "])
    def test_empty_reference(self, reference):
        with pytest.raises(LocationResolutionError) as exc_info:
            resolve_location("file:/app/", reference)

        assert exc_info.value.root == "file:/app/"

    def test_malformed_reference(self):
        with pytest.raises(LocationResolutionError, match="Malformed"):
            resolve_location("file:/app/", "http://[::1/x.jar")

    def test_relative_root_rejected(self):
        with pytest.raises(LocationResolutionError, match="not an absolute URL"):
            resolve_location("/app/", "lib/x.jar")


class TestDescriptorRoot:
    def test_parent_of_meta_inf(self):
        assert descriptor_root("file:/foo/META-INF/persistence.xml") == "file:/foo/"

    def test_keeps_authority_form(self):
        assert descriptor_root("file:///tmp/x/META-INF/persistence.xml") == "file:///tmp/x/"

    def test_root_then_jar(self):
        """Test that jar references resolve against the descriptor's root."""
        root = descriptor_root("file:/app/META-INF/persistence.xml")

        assert resolve_location(root, "lib/x.jar") == "file:/app/lib/x.jar"
