"""Git utilities for diff explanation."""

import subprocess

from .errors import DiffSourceError


def get_diff(args: list[str] | None = None, cwd: str | None = None) -> str:
    """
    Run git diff with extra arguments.

    Args:
        args: Flags, revisions and paths appended to ``git diff``
        cwd: Working directory

    Returns:
        Git diff output

    Raises:
        DiffSourceError: If git cannot be run or exits non-zero
    """
    cmd = ["git", "diff", *(args or [])]

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, cwd=cwd)
    except OSError as e:
        raise DiffSourceError(f"Git diff failed: {e}") from e

    if result.returncode != 0:
        raise DiffSourceError(
            f"Git diff failed with exit status {result.returncode}",
            stderr=result.stderr,
        )

    return result.stdout


def build_diff_args(
    patch: bool = False,
    stat: bool = False,
    name_only: bool = False,
    name_status: bool = False,
    diff_filter: str | None = None,
    unified: int | None = None,
    extra: tuple[str, ...] | list[str] = (),
) -> list[str]:
    """Translate CLI flags back into git diff arguments."""
    args = []
    if patch:
        args.append("--patch")
    if stat:
        args.append("--stat")
    if name_only:
        args.append("--name-only")
    if name_status:
        args.append("--name-status")
    if diff_filter:
        args.append(f"--diff-filter={diff_filter}")
    if unified is not None:
        args.append(f"--unified={unified}")
    args.extend(extra)
    return args


def get_changed_files(diff_content: str) -> list[str]:
    """
    List changed file paths from ``diff --git`` headers.

    Returns the ``b/`` side of each header, in diff order.
    """
    files = []
    for line in diff_content.split("\n"):
        if not line.startswith("diff --git "):
            continue
        parts = line.split(" ")
        if len(parts) >= 4:
            path = parts[3]
            if path.startswith("b/"):
                path = path[2:]
            files.append(path)
    return files
