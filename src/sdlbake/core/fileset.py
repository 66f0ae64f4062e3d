from collections.abc import Sequence
from fnmatch import fnmatch
from pathlib import Path

SCHEMA_SUFFIXES = (".graphql", ".gql")


def discover_schema_files(paths: Sequence[Path], ignore: Sequence[str] = ()) -> list[Path]:
    files: list[Path] = []
    for base in paths:
        base = base.resolve()
        if base.is_file():
            candidates = [base]
        elif base.is_dir():
            candidates = [p for p in base.rglob("*") if p.suffix in SCHEMA_SUFFIXES]
        else:
            continue
        for p in candidates:
            if not _is_ignored(p, ignore):
                files.append(p)
    return sorted(set(files))


def _is_ignored(path: Path, patterns: Sequence[str]) -> bool:
    posix = path.as_posix()
    return any(fnmatch(posix, pattern) or fnmatch(path.name, pattern) for pattern in patterns)
