"""
Pytest configuration and shared test utilities.

This module provides shared fixtures and utilities for all persistwire tests.
"""

import importlib
import sys
import textwrap

import pytest

from persistwire.descriptors.resources import DescriptorResource
from persistwire.units.class_loading import set_context_class_loader
from persistwire.utils.config import reset_config

# ===================================================================
# Isolation
# ===================================================================


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Run every test in an empty working directory with no configuration loaded."""
    workdir = tmp_path / "workdir"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    monkeypatch.delenv("CONFIG_FILE", raising=False)
    reset_config()
    set_context_class_loader(None)
    yield workdir
    reset_config()
    set_context_class_loader(None)


# ===================================================================
# Throwaway modules
# ===================================================================


@pytest.fixture
def module_factory(tmp_path, monkeypatch):
    """Write importable modules under a temporary directory on ``sys.path``.

    Usage::

        module_factory("shop/model.py", '''
            @entity
            class Order: ...
        ''')

    Missing package ``__init__.py`` files are created. Modules are removed from
    ``sys.modules`` at teardown.
    """
    root = tmp_path / "modules"
    root.mkdir()
    monkeypatch.syspath_prepend(str(root))
    created: list[str] = []

    def write(relative_path: str, source: str = ""):
        target = root / relative_path
        target.parent.mkdir(parents=True, exist_ok=True)
        for parent in target.relative_to(root).parents:
            if str(parent) != ".":
                init = root / parent / "__init__.py"
                if not init.exists():
                    init.write_text("")
        target.write_text(textwrap.dedent(source))
        importlib.invalidate_caches()
        module_name = ".".join(target.relative_to(root).with_suffix("").parts)
        created.append(module_name.split(".")[0])
        return target

    write.root = root
    yield write

    for top_level in set(created):
        for name in [n for n in sys.modules if n == top_level or n.startswith(f"{top_level}.")]:
            del sys.modules[name]


PROVIDER_MODULE = """
from persistwire.providers.base import PersistenceProvider


class RecordingProvider(PersistenceProvider):
    name = "recording"
    instances = 0

    def __init__(self):
        type(self).instances += 1

    def create_container_factory(self, unit_info, properties=None):
        return {"unit": unit_info.persistence_unit_name, **dict(properties or {})}


class OtherProvider(PersistenceProvider):
    name = "other"
    instances = 0

    def __init__(self):
        type(self).instances += 1

    def create_container_factory(self, unit_info, properties=None):
        return unit_info


class ExplodingProvider(PersistenceProvider):
    name = "exploding"

    def __init__(self):
        raise RuntimeError("backend unavailable")

    def create_container_factory(self, unit_info, properties=None):
        return None


class NotAProvider:
    pass
"""


@pytest.fixture
def provider_module(module_factory):
    """Importable module ``fake_backend`` with provider classes that count their instances."""
    module_factory("fake_backend.py", PROVIDER_MODULE)
    import fake_backend

    return fake_backend


# ===================================================================
# Data sources and descriptors
# ===================================================================


class RecordingResolver:
    """Data source resolver that records every call and returns a fresh handle."""

    def __init__(self, result=None):
        self.calls = []
        self.result = result

    def __call__(self, jta, use_default, name):
        self.calls.append((jta, use_default, name))
        return self.result if self.result is not None else object()


@pytest.fixture
def recording_resolver():
    return RecordingResolver()


@pytest.fixture
def resolver_factory():
    """The RecordingResolver class, for tests that need several or a fixed result."""
    return RecordingResolver


SIMPLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<persistence xmlns="http://xmlns.jcp.org/xml/ns/persistence" version="2.2">
  <persistence-unit name="orders" transaction-type="RESOURCE_LOCAL">
    <description>Order storage</description>
    <provider>fake_backend.RecordingProvider</provider>
    <non-jta-data-source>ordersDS</non-jta-data-source>
    <mapping-file>META-INF/orders.xml</mapping-file>
    <jar-file>lib/orders-model.jar</jar-file>
    <class>shop.model.Order</class>
    <exclude-unlisted-classes>false</exclude-unlisted-classes>
    <shared-cache-mode>ENABLE_SELECTIVE</shared-cache-mode>
    <validation-mode>CALLBACK</validation-mode>
    <properties>
      <property name="hibernate.show_sql" value="true"/>
    </properties>
  </persistence-unit>
</persistence>
"""


@pytest.fixture
def resource_factory():
    """Build in-memory descriptor resources."""

    def make(content: str, url: str = "file:/app/META-INF/persistence.xml") -> DescriptorResource:
        return DescriptorResource.from_bytes(url, content)

    return make


@pytest.fixture
def simple_xml():
    return SIMPLE_XML
