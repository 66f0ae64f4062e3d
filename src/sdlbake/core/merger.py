from collections.abc import Sequence

from graphql import DocumentNode

from .errors import MergeError
from .merger_impl import DefinitionTable


def merge_documents(documents: Sequence[DocumentNode]) -> DocumentNode:
    """
    Merge per-file schema documents into a single document.

    Performs:
    1. Rejection of schema blocks, extensions, and executable definitions
    2. Kind conflict detection
    3. Per-kind merging (fields, members, values, directives, descriptions)
    4. Directive definition de-duplication checks

    Args:
        documents: Parsed schema documents, in file order

    Returns:
        One document whose definitions keep first-seen order

    Raises:
        MergeError: If a definition is unsupported or two definitions conflict
    """
    if not documents:
        raise MergeError("No schema documents to merge")

    table = DefinitionTable()
    for document in documents:
        for definition in document.definitions:
            table.add(definition)

    return DocumentNode(definitions=table.definitions())
