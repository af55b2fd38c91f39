"""Tests for descriptor resources."""

import pytest

from persistwire.base.errors import DescriptorFormatError, ResourceError
from persistwire.descriptors.marshalling import XML_MEDIA_TYPE, YAML_MEDIA_TYPE
from persistwire.descriptors.resources import DescriptorResource, load_document


class TestDescriptorResource:
    def test_from_path(self, tmp_path):
        """Test that a file resource knows its URL, root and media type."""
        descriptor = tmp_path / "app" / "META-INF" / "persistence.xml"
        descriptor.parent.mkdir(parents=True)
        descriptor.write_text("<persistence/>")

        resource = DescriptorResource.from_path(descriptor)

        assert resource.url == descriptor.resolve().as_uri()
        assert resource.root == (tmp_path / "app").resolve().as_uri() + "/"
        assert resource.media_type == XML_MEDIA_TYPE

    def test_from_bytes(self):
        resource = DescriptorResource.from_bytes("file:/app/META-INF/persistence.yaml", "- name: u\n")

        assert resource.data == b"- name: u\n"
        assert resource.root == "file:/app/"
        assert resource.media_type == YAML_MEDIA_TYPE

    def test_open_missing_file(self, tmp_path):
        resource = DescriptorResource.from_path(tmp_path / "missing.xml")

        with pytest.raises(ResourceError, match="Cannot read"):
            resource.open()

    def test_open_without_source(self):
        with pytest.raises(ResourceError):
            DescriptorResource(url="file:/nowhere.xml").open()


class TestLoadDocument:
    def test_yaml_file(self, tmp_path):
        descriptor = tmp_path / "META-INF" / "persistence.yaml"
        descriptor.parent.mkdir()
        descriptor.write_text("persistence-unit:\n  - name: orders\n")

        document = load_document(DescriptorResource.from_path(descriptor))

        assert [u.name for u in document.persistence_units] == ["orders"]

    def test_format_error_names_resource(self, resource_factory):
        resource = resource_factory("<beans/>")

        with pytest.raises(DescriptorFormatError) as exc_info:
            load_document(resource)

        assert exc_info.value.location == resource.url
