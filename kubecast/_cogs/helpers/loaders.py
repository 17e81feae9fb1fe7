"""
Manifest-loading from YAML/JSON texts and files.

The manifests are usually specified on the command-line as files (``-f``),
each file possibly containing multiple YAML documents separated by ``---``.
The empty documents (e.g. a trailing separator) are skipped.
JSON is a subset of YAML, so JSON files are loaded the same way.

Multiple files can be specified. They are loaded in the order,
and the documents keep their order within every file.
"""
import collections.abc
from typing import Any, Iterable, List

import yaml

from kubecast._cogs.helpers import typedefs


def parse_manifest(text: str) -> typedefs.RawDocument:
    """
    Parse a single manifest from a YAML/JSON text.
    """
    document = yaml.safe_load(text)
    return _ensure_mapping(document, source='<text>')


def parse_manifests(text: str, *, source: str = '<text>') -> List[typedefs.RawDocument]:
    documents = yaml.safe_load_all(text)
    return [_ensure_mapping(document, source=source) for document in documents if document is not None]


def load_manifests(paths: Iterable[str]) -> List[typedefs.RawDocument]:
    """
    Load all the manifests from the files, in the order of the files.
    """
    manifests: List[typedefs.RawDocument] = []
    for path in paths:
        with open(path, encoding='utf-8') as f:
            manifests.extend(parse_manifests(f.read(), source=path))
    return manifests


def _ensure_mapping(document: Any, *, source: str) -> typedefs.RawDocument:
    if not isinstance(document, collections.abc.Mapping):
        raise ValueError(f"A manifest must be a mapping, got {type(document).__name__} in {source}.")
    return document
