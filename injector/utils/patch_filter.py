"""
Media and binary file filtering for diffs.

Sections for images, archives, fonts and similar files carry no reviewable
lines; they are dropped before parsing so that the line map only holds files
a suggestion can target.
"""

from dataclasses import dataclass, field
from typing import List

from injector.utils.diff_parser import FILE_HEADER_PREFIX, FILE_HEADER_RE

FILTERED_EXTENSIONS = (
    # Images
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".svg", ".webp", ".ico", ".tiff", ".tif",
    ".heic", ".heif", ".raw", ".psd", ".ai", ".eps", ".indd",
    # Videos
    ".mp4", ".avi", ".mov", ".wmv", ".flv", ".mkv", ".webm", ".m4v", ".mpg", ".mpeg",
    ".3gp", ".ogv",
    # Audio
    ".mp3", ".wav", ".ogg", ".m4a", ".flac", ".aac", ".wma", ".opus",
    # Archives & compressed
    ".zip", ".tar", ".gz", ".rar", ".7z", ".bz2", ".xz", ".tgz",
    # Documents
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    # Fonts
    ".ttf", ".otf", ".woff", ".woff2", ".eot",
    # Other binary formats
    ".exe", ".dll", ".so", ".dylib", ".bin", ".dat",
    ".db", ".sqlite", ".dmg", ".iso", ".img",
)


@dataclass
class PatchFile:
    filename: str
    content: str
    is_filtered: bool


@dataclass
class FilterResult:
    filtered_patch: str = ""
    original_file_count: int = 0
    filtered_file_count: int = 0
    removed_files: List[str] = field(default_factory=list)

    @property
    def removed_file_count(self) -> int:
        return len(self.removed_files)


def should_filter_file(filename: str) -> bool:
    """Return True when the file's extension marks it as media or binary."""
    if not filename:
        return False
    return filename.lower().endswith(FILTERED_EXTENSIONS)


def split_patch_files(patch_content: str) -> List[PatchFile]:
    """
    Split a patch into per-file sections, each starting at its ``diff --git`` line.

    Lines before the first file header are dropped.
    """
    if not patch_content:
        return []

    files: List[PatchFile] = []
    current_file = None
    current_lines: List[str] = []

    def flush() -> None:
        if current_file is not None:
            files.append(
                PatchFile(
                    filename=current_file,
                    content="\n".join(current_lines),
                    is_filtered=should_filter_file(current_file),
                )
            )

    for line in patch_content.split("\n"):
        if line.startswith(FILE_HEADER_PREFIX):
            flush()
            match = FILE_HEADER_RE.match(line.rstrip("\r"))
            # Unrecognised headers stay attached so the parser can reject them
            current_file = match.group("new") if match else line
            current_lines = [line]
        elif current_file is not None:
            current_lines.append(line)

    flush()
    return files


def _preamble(patch_content: str) -> List[str]:
    lines = []
    for line in patch_content.split("\n"):
        if line.startswith(FILE_HEADER_PREFIX):
            break
        lines.append(line)
    return lines


def filter_patch(patch_content: str) -> FilterResult:
    """
    Remove media/binary file sections from a patch.

    Text before the first file header is kept as-is so a malformed diff still
    reaches the parser unchanged.
    """
    if not patch_content:
        return FilterResult()

    files = split_patch_files(patch_content)
    kept = [f for f in files if not f.is_filtered]
    sections = [f.content for f in kept]
    preamble = _preamble(patch_content)
    if any(preamble):
        sections.insert(0, "\n".join(preamble))

    return FilterResult(
        filtered_patch="\n".join(sections),
        original_file_count=len(files),
        filtered_file_count=len(kept),
        removed_files=[f.filename for f in files if f.is_filtered],
    )


def get_filter_summary(result: FilterResult) -> str:
    """Human-readable note about what was excluded, or an empty string."""
    if not result or result.removed_file_count == 0:
        return ""

    removed = result.removed_files
    if len(removed) == 1:
        return f"Note: 1 media/binary file ({removed[0]}) was excluded from the review."
    if len(removed) <= 3:
        return (
            f"Note: {len(removed)} media/binary files ({', '.join(removed)}) "
            "were excluded from the review."
        )
    return f"Note: {len(removed)} media/binary files were excluded from the review."
