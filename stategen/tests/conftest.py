"""Unit tests configuration file."""

import itertools
import sys
import types

import pytest

from stategen.generator.extractor import DataclassMetadataProvider
from stategen.generator.processor import build_schema
from stategen.generator.python import render, synthesize

_counter = itertools.count()


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


def gen_module(definition):
    """Generate, render and import the state container of a definition.

    The code runs in a registered module so that dataclasses_json can resolve
    the string annotations of generated snapshot types.
    """
    schema = build_schema(definition, DataclassMetadataProvider())
    code = render(synthesize(schema))
    name = f"stategen_tests_generated_{next(_counter)}"
    module = types.ModuleType(name)
    sys.modules[name] = module
    exec(compile(code, name, "exec"), module.__dict__)
    return module


@pytest.fixture
def generate():
    created = []

    def run(definition):
        module = gen_module(definition)
        created.append(module.__name__)
        return module

    yield run
    for name in created:
        sys.modules.pop(name, None)
