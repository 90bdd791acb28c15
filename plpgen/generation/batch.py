# plpgen/generation/batch.py
"""
Batch orchestrator.

    FETCHING_TEMPLATE -> VALIDATING_TEMPLATE -> GENERATING_UNITS
        -> PACKING_OUTPUT -> DONE

Any exception moves the job to FAILED and is re-raised unchanged; nothing
generated so far is returned. Units are produced strictly in order because
filename de-duplication and the progress cadence depend on it.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import httpx

from plpgen.core.config import GeneratorSettings
from plpgen.core.exceptions import FormatError
from plpgen.core.logging import log, log_section
from plpgen.generation import archive
from plpgen.generation.descriptor import REQUIRED_LAYERS, Descriptor
from plpgen.generation.filenames import FilenameAllocator
from plpgen.generation.options import GenerationOptions
from plpgen.generation.progress import (
    ProgressReporter,
    ProgressSink,
    generating_message,
    packing_message,
    should_report,
)
from plpgen.generation.records import RecordGenerator
from plpgen.generation.template_source import fetch_template_bytes
from plpgen.lib.monitoring import active_generation_jobs, generated_units


class BatchState(str, Enum):
    FETCHING_TEMPLATE = "fetching_template"
    VALIDATING_TEMPLATE = "validating_template"
    GENERATING_UNITS = "generating_units"
    PACKING_OUTPUT = "packing_output"
    DONE = "done"
    FAILED = "failed"


@dataclass
class Template:
    """A validated template: its entries plus the parsed base descriptor."""
    entries: Dict[str, bytes]
    descriptor: Descriptor
    descriptor_entry: str


def load_template(raw: bytes, descriptor_entry: str = "data.plab") -> Template:
    """Unpack and validate a template archive."""
    entries = archive.unpack(raw)
    if descriptor_entry not in entries:
        raise FormatError(f"Template missing {descriptor_entry}", entry=descriptor_entry)

    descriptor = Descriptor.parse(entries[descriptor_entry], entry=descriptor_entry)
    descriptor.require_layers(REQUIRED_LAYERS)
    return Template(entries=entries, descriptor=descriptor, descriptor_entry=descriptor_entry)


def build_unit(template: Template, layer_texts: Dict[str, str], compression_level: int) -> bytes:
    """Pack one variant of the template with the given layer texts."""
    descriptor = template.descriptor.clone()
    for layer_name, text in layer_texts.items():
        descriptor.substitute(layer_name, text)

    # Opaque payload is shared by reference; only the descriptor entry differs
    entries = dict(template.entries)
    entries[template.descriptor_entry] = descriptor.to_bytes()
    return archive.pack(entries, compression_level)


class BatchJob:
    """One run of the pipeline; state is kept on the instance for callers to inspect."""

    def __init__(
        self,
        options: GenerationOptions,
        progress: Optional[ProgressSink] = None,
        settings: Optional[GeneratorSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
        records: Optional[RecordGenerator] = None,
        job_id: Optional[str] = None,
    ):
        self.options = options
        self.settings = settings or GeneratorSettings()
        self.client = client
        self.records = records or RecordGenerator()
        self.reporter = ProgressReporter(progress)
        self.job_id = job_id
        self.state = BatchState.FETCHING_TEMPLATE
        self.failure: Optional[str] = None
        self.units_done = 0

    def _enter(self, state: BatchState) -> None:
        self.state = state
        log("BATCH", f"→ {state.value}", session_id=self.job_id)

    async def run(self) -> bytes:
        log_section("BATCH", f"Generating {self.options.count} unit(s)", session_id=self.job_id)
        active_generation_jobs.inc()
        try:
            return await self._run()
        except Exception as e:
            self.state = BatchState.FAILED
            self.failure = str(e) or type(e).__name__
            log("BATCH", f"❌ Failed: {self.failure}", session_id=self.job_id)
            raise
        finally:
            active_generation_jobs.dec()

    async def _run(self) -> bytes:
        cfg = self.settings
        total = self.options.count

        self._enter(BatchState.FETCHING_TEMPLATE)
        raw = await fetch_template_bytes(cfg.template_url, client=self.client, timeout=cfg.fetch_timeout)

        self._enter(BatchState.VALIDATING_TEMPLATE)
        template = load_template(raw, cfg.descriptor_entry)

        self._enter(BatchState.GENERATING_UNITS)
        outputs: Dict[str, bytes] = {}
        allocator = FilenameAllocator(cfg.output_extension)

        for index in range(1, total + 1):
            record = self.records.next_record(self.options)
            payload = build_unit(template, record.layer_texts(), cfg.compression_level)
            outputs[allocator.allocate(record.full_name)] = payload
            self.units_done = index
            generated_units.inc()

            if should_report(index, total):
                await self.reporter.notify(generating_message(index, total))

        self._enter(BatchState.PACKING_OUTPUT)
        await self.reporter.notify(packing_message(cfg.archive_name))
        result = archive.pack(outputs, cfg.compression_level)

        self._enter(BatchState.DONE)
        log("BATCH", f"✅ {len(outputs)} file(s), {len(result)} bytes", session_id=self.job_id)
        return result


async def generate_batch(
    options: GenerationOptions,
    progress: Optional[ProgressSink] = None,
    settings: Optional[GeneratorSettings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> bytes:
    """
    Generate options.count variants of the configured template.

    Returns the outer zip holding one .plp per unit.

    Raises:
        TemplateFetchError: template URL unset, unreachable or non-2xx
        FormatError: template is not a usable archive/descriptor
    """
    job = BatchJob(options, progress=progress, settings=settings, client=client)
    return await job.run()
