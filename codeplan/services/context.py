"""
Project context for prompts: flat file listing, rendered tree and file reads.
"""
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# Dependency caches, build output and VCS metadata never go into a prompt
EXCLUDE_DIRS = {"node_modules", "dist", "build", ".git", "__pycache__", ".venv"}


def _visible_entries(dir_path: Path) -> list[Path]:
    """
    Children of a directory minus excluded and dot-prefixed entries, sorted by name.

    Symlinked directories are left out so a link back up the tree cannot
    make the walk recurse forever.
    """
    return sorted(
        (
            entry for entry in dir_path.iterdir()
            if entry.name not in EXCLUDE_DIRS
            and not entry.name.startswith(".")
            and not (entry.is_symlink() and entry.is_dir())
        ),
        key=lambda entry: entry.name
    )


def list_files(root: Path) -> list[str]:
    """List all files under root as sorted, POSIX-style relative paths."""
    root = Path(root)
    files = []

    def scan(dir_path: Path):
        for entry in _visible_entries(dir_path):
            if entry.is_dir():
                scan(entry)
            else:
                files.append(entry.relative_to(root).as_posix())

    scan(root)
    logger.debug(f"Listed {len(files)} files under {root}")
    return sorted(files)


def render_tree(root: Path) -> str:
    """
    Render the directory tree under root, e.g.:

        File Tree (/work/project)
        ==================================================
        ├── 📁 src
        │   └── 📄 index.ts
        └── 📄 package.json
    """
    root = Path(root)

    def build(dir_path: Path, prefix: str = "") -> str:
        entries = _visible_entries(dir_path)
        result = ""
        for index, entry in enumerate(entries):
            is_last = index == len(entries) - 1
            connector = "└── " if is_last else "├── "
            next_prefix = prefix + ("    " if is_last else "│   ")

            if entry.is_dir():
                result += f"{prefix}{connector}📁 {entry.name}\n"
                result += build(entry, next_prefix)
            else:
                result += f"{prefix}{connector}📄 {entry.name}\n"
        return result

    return f"File Tree ({root})\n{'=' * 50}\n{build(root)}"


def read_file_content(project_path: Path, relative_path: str) -> str:
    """Read file content from project."""
    file_path = Path(project_path) / relative_path
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {relative_path}")
    return file_path.read_text(encoding="utf-8")
