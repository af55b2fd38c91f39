"""Tests for the persistwire exception hierarchy."""

import pytest

from persistwire.base.errors import (
    ConfigurationError,
    DescriptorFormatError,
    ErrorCategory,
    LocationResolutionError,
    PersistwireError,
    ProviderInstantiationError,
    RegistryError,
    ResourceError,
    StartupFailure,
)


@pytest.mark.parametrize(
    "error, category",
    [
        (RegistryError("x"), ErrorCategory.REGISTRY),
        (ConfigurationError("x"), ErrorCategory.CONFIGURATION),
        (ResourceError("x"), ErrorCategory.RESOURCE),
        (LocationResolutionError("x"), ErrorCategory.RESOURCE),
        (DescriptorFormatError("x"), ErrorCategory.SCHEMA),
        (ProviderInstantiationError("x"), ErrorCategory.PROVIDER),
    ],
)
def test_categories(error, category):
    assert isinstance(error, PersistwireError)
    assert error.category is category
    assert error.is_fatal


def test_location_resolution_error_is_resource_error():
    error = LocationResolutionError("bad", reference="../x.jar", root="file:/app/")

    assert isinstance(error, ResourceError)
    assert error.reference == "../x.jar"
    assert error.root == "file:/app/"
    assert error.technical_details == {"reference": "../x.jar", "root": "file:/app/"}


def test_descriptor_format_error_location():
    error = DescriptorFormatError("bad", location="file:/app/META-INF/persistence.xml")

    assert error.location == "file:/app/META-INF/persistence.xml"
    assert error.technical_details == {}
    assert str(error) == "bad"


def test_provider_instantiation_error_class_name():
    error = ProviderInstantiationError("cannot load", class_name="acme.Provider")

    assert error.class_name == "acme.Provider"
    assert error.technical_details["class_name"] == "acme.Provider"


class TestStartupFailure:
    def test_format_with_resource(self):
        failure = StartupFailure("PARSE_UNIT", RegistryError("boom"), "file:/app/META-INF/persistence.xml")

        assert failure.format() == (
            "Persistence unit registration failed in state PARSE_UNIT "
            "while processing file:/app/META-INF/persistence.xml: boom"
        )

    def test_format_without_resource(self):
        failure = StartupFailure("SCAN_COMPLETE", RegistryError("boom"))

        assert failure.format() == "Persistence unit registration failed in state SCAN_COMPLETE: boom"
