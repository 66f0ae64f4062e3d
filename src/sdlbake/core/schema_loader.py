"""
Schema loading: parse SDL files, merge them, build and validate the schema.

Parsing and validation are delegated to graphql-core; every diagnostic it
produces is surfaced verbatim through SchemaValidationFailed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from graphql import (
    DocumentNode,
    GraphQLError,
    GraphQLSchema,
    GraphQLSyntaxError,
    Source,
    build_ast_schema,
    parse,
    validate_schema,
)
from graphql.validation.validate import validate_sdl

from .errors import ErrorContext, SchemaValidationFailed
from .merger import merge_documents

logger = logging.getLogger(__name__)


def parse_schema_source(body: str, name: str) -> DocumentNode:
    """Parse one SDL text, keeping ``name`` as its source identity."""
    try:
        return parse(Source(body, name), no_location=False)
    except GraphQLSyntaxError as e:
        line, column = (e.locations[0].line, e.locations[0].column) if e.locations else (1, 1)
        raise SchemaValidationFailed(
            [e.message], ErrorContext(file=name, line=line, column=column)
        ) from e


def _parse_file(path: Path) -> DocumentNode:
    return parse_schema_source(path.read_text(encoding="utf-8"), str(path))


def parse_schema_files(paths: Sequence[Path], max_workers: int = 4) -> list[DocumentNode]:
    """Parse schema files concurrently; results keep the order of ``paths``."""
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        documents = list(executor.map(_parse_file, paths))
    logger.debug("Parsed %d schema file(s)", len(documents))
    return documents


def build_schema(document: DocumentNode) -> GraphQLSchema:
    """Build an executable schema from a merged document and validate it."""
    sdl_errors = validate_sdl(document)
    if sdl_errors:
        raise SchemaValidationFailed(_messages(sdl_errors))

    schema = build_ast_schema(document, assume_valid_sdl=True)
    schema_errors = validate_schema(schema)
    if schema_errors:
        raise SchemaValidationFailed(_messages(schema_errors))
    return schema


def load_schema(paths: Sequence[Path]) -> GraphQLSchema:
    """
    Load a schema from SDL files.

    Performs:
    1. Concurrent parsing of every file
    2. Document merging
    3. Schema construction and validation

    Raises:
        MergeError: If the documents conflict
        SchemaValidationFailed: If graphql-core rejects the input
    """
    documents = parse_schema_files(paths)
    merged = merge_documents(documents)
    return build_schema(merged)


def _messages(errors: Sequence[GraphQLError]) -> list[str]:
    return [str(error) for error in errors]
