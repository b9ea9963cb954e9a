"""Discovery of output files in a completed job's history entry."""

from typing import Iterable, Iterator

from comfyrun.execution.job import OutputDescriptor


RETRIEVABLE_LOCATIONS = ("output", "temp")


def get_file_extension(filename: str) -> str:
    """Return the lower-cased suffix after the last dot."""
    return filename.lower().rsplit(".", 1)[-1]


def iter_descriptors(outputs: dict) -> Iterator[OutputDescriptor]:
    """Yield every file descriptor across all nodes, in encounter order.

    ComfyUI lists saved files (audio included) under each node's "images" key.
    Malformed nodes and entries are skipped.
    """
    for node_output in outputs.values():
        if not isinstance(node_output, dict):
            continue

        files = node_output.get("images") or []
        if not isinstance(files, list):
            continue

        for entry in files:
            descriptor = OutputDescriptor.from_payload(entry)
            if descriptor is not None:
                yield descriptor


def resolve_outputs(outputs: dict, allowed_file_types: Iterable[str]) -> list[OutputDescriptor]:
    """Select the retrievable descriptors whose extension is allowed."""
    allowed = {t.lower() for t in allowed_file_types}
    return [
        descriptor
        for descriptor in iter_descriptors(outputs)
        if descriptor.location_kind in RETRIEVABLE_LOCATIONS
        and get_file_extension(descriptor.filename) in allowed
    ]
