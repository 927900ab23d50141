"""Runs the generator over a batch of state definitions."""

import importlib
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any

from stategen.log import get_logger
from stategen.runtime.markers import is_state

from .extractor import DataclassMetadataProvider, MetadataError, MetadataProvider, extract
from .output import OutputSink
from .python import render, synthesize
from .schema import classify
from .signature import ParseError
from .types import GeneratedArtifactSet, Schema

logger = get_logger("processor")


@dataclass
class ProcessReport:
    """Outcome of one processing run."""

    generated: list[GeneratedArtifactSet] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)  # qualified name -> reason

    @property
    def ok(self) -> bool:
        return not self.failures


def find_definitions(module: ModuleType | str) -> list[type]:
    """Return the @state classes defined in a module, in source order."""
    if isinstance(module, str):
        module = importlib.import_module(module)
    return [
        obj
        for obj in vars(module).values()
        if is_state(obj) and obj.__module__ == module.__name__
    ]


def build_schema(definition: Any, provider: MetadataProvider) -> Schema:
    """Extract and classify one definition."""
    info = provider.describe_definition(definition)
    return classify(extract(definition, provider), info)


def process(
    definitions: list[Any],
    sink: OutputSink,
    provider: MetadataProvider | None = None,
    runtime_import: str = "stategen.runtime",
) -> ProcessReport:
    """Generate and emit a module for every definition.

    A definition that fails with a ParseError or MetadataError is reported
    and skipped; the remaining definitions are still processed.
    """
    if provider is None:
        provider = DataclassMetadataProvider()

    report = ProcessReport()
    for definition in definitions:
        info = provider.describe_definition(definition)
        try:
            schema = build_schema(definition, provider)
        except (ParseError, MetadataError) as e:
            logger.error("%s.%s: %s", info.module, info.name, e)
            report.failures[f"{info.module}.{info.name}"] = str(e)
            continue

        artifacts = synthesize(schema)
        sink.emit(info.package, artifacts.module_name, render(artifacts, runtime_import))
        logger.debug(
            "%s: %d properties -> %s",
            info.name,
            len(schema.properties),
            ", ".join(t.name for t in artifacts.types),
        )
        report.generated.append(artifacts)

    return report
