"""Category descriptors and mirror configuration.

Loads categories.yaml: one block per reel category plus an optional
``_mirrors`` block listing a GitHub repo and the refs to try, in order.

Design assumptions:
- categories.yaml lives at repo root (BRAINSTORMER_CATEGORIES_PATH env override)
- Every category requires: title, and either file or sources
- Candidate order is: data base override, explicit sources, then one raw
  URL per mirror ref (pinned commit first, floating branch last)
- payload_key defaults to the category key
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import quote

import yaml

CATEGORIES_ENV_VAR = "BRAINSTORMER_CATEGORIES_PATH"
CATEGORIES_FILENAME = "categories.yaml"

# Regex to parse GitHub repo URL (HTTPS only)
GITHUB_REPO_PATTERN = re.compile(
    r"https?://github\.com/(?P<owner>[^/]+)/(?P<project>[^/]+?)(?:\.git)?/?$"
)


class CategoryConfigError(Exception):
    """Raised when categories.yaml is invalid."""

    def __init__(self, message: str, category: str | None = None):
        self.category = category
        full_message = f"[{category}] {message}" if category else message
        super().__init__(full_message)


def raw_github_url(owner: str, project: str, ref: str, file_path: str) -> str:
    """Build a raw GitHub URL for a ref and file.

    File path is URL-encoded to handle spaces and special characters.
    """
    encoded_path = "/".join(quote(part, safe="") for part in file_path.split("/"))
    return f"https://raw.githubusercontent.com/{owner}/{project}/{ref}/{encoded_path}"


def join_location(base: str, file_path: str) -> str:
    """Join a base URL or directory with a file name."""
    if "://" in base:
        return f"{base.rstrip('/')}/{file_path.lstrip('/')}"
    return str(Path(base) / file_path)


@dataclass(frozen=True)
class MirrorSet:
    """Ordered refs of one GitHub repository that host the catalog files."""

    repo: str
    refs: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "MirrorSet":
        repo = data.get("repo", "")
        if not GITHUB_REPO_PATTERN.match(repo.rstrip("/")):
            raise CategoryConfigError(f"Invalid mirror repo URL: '{repo}'", "_mirrors")
        refs = data.get("refs") or []
        if not isinstance(refs, list) or not all(isinstance(r, str) for r in refs):
            raise CategoryConfigError("Mirror refs must be a list of strings", "_mirrors")
        return cls(repo=repo, refs=tuple(refs))

    def urls_for(self, file_path: str) -> list[str]:
        match = GITHUB_REPO_PATTERN.match(self.repo.rstrip("/"))
        if match is None:
            return []
        owner, project = match.group("owner"), match.group("project")
        return [raw_github_url(owner, project, ref, file_path) for ref in self.refs]


@dataclass(frozen=True)
class CategoryDescriptor:
    """Static configuration of one reel category.

    Required fields:
        key: Unique identifier (e.g., "theme")
        title: Human-readable name
        source_files: Ordered candidate locations (URLs or local paths)

    Optional fields:
        payload_key: Field holding the entry list inside a JSON object
    """

    key: str
    title: str
    source_files: tuple[str, ...]
    payload_key: str = ""

    def __post_init__(self) -> None:
        if not self.payload_key:
            object.__setattr__(self, "payload_key", self.key)
        if not isinstance(self.source_files, tuple):
            object.__setattr__(self, "source_files", tuple(self.source_files))

    @property
    def fetch_key(self) -> tuple[tuple[str, ...], str]:
        """Descriptors with equal fetch keys can share one load."""
        return (self.source_files, self.payload_key)

    @classmethod
    def from_dict(
        cls,
        key: str,
        data: dict,
        mirrors: MirrorSet | None = None,
        data_base: str = "",
    ) -> "CategoryDescriptor":
        """Create a descriptor from a categories.yaml block."""
        title = data.get("title", "")
        if not title:
            raise CategoryConfigError("Missing required field: title", key)

        file_path = data.get("file", "")
        explicit = data.get("sources") or []
        if not isinstance(explicit, list):
            raise CategoryConfigError("sources must be a list", key)

        candidates: list[str] = []
        if file_path and data_base:
            candidates.append(join_location(data_base, file_path))
        candidates.extend(str(s) for s in explicit)
        if file_path and mirrors is not None:
            candidates.extend(mirrors.urls_for(file_path))

        # Drop duplicates, keep first occurrence
        ordered = tuple(dict.fromkeys(candidates))
        if not ordered:
            raise CategoryConfigError(
                "No candidate sources (set 'file' with _mirrors, or 'sources')", key
            )

        return cls(
            key=key,
            title=title,
            source_files=ordered,
            payload_key=data.get("payload_key", ""),
        )

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "title": self.title,
            "source_files": list(self.source_files),
            "payload_key": self.payload_key,
        }


@dataclass
class CategoryRegistry:
    """All configured categories, in file order."""

    categories: dict[str, CategoryDescriptor] = field(default_factory=dict)
    mirrors: MirrorSet | None = None
    path: Path | None = None

    def get(self, key: str) -> CategoryDescriptor | None:
        return self.categories.get(key)

    @property
    def descriptors(self) -> list[CategoryDescriptor]:
        return list(self.categories.values())

    @classmethod
    def from_dict(cls, raw_data: dict, data_base: str = "") -> "CategoryRegistry":
        mirrors = None
        raw_mirrors = raw_data.get("_mirrors")
        if isinstance(raw_mirrors, dict):
            mirrors = MirrorSet.from_dict(raw_mirrors)

        categories = {}
        for key, value in raw_data.items():
            # Skip special keys
            if key.startswith("_") or not isinstance(value, dict):
                continue
            categories[key] = CategoryDescriptor.from_dict(key, value, mirrors, data_base)

        if not categories:
            raise CategoryConfigError("No categories defined")
        return cls(categories=categories, mirrors=mirrors)

    @classmethod
    def load(cls, path: Path | str | None = None, data_base: str = "") -> "CategoryRegistry":
        """Load categories from YAML.

        Args:
            path: Path to categories.yaml. If None, uses:
                  1. BRAINSTORMER_CATEGORIES_PATH env var
                  2. categories.yaml found by walking up from the package

        Raises:
            CategoryConfigError: If the file is invalid
            FileNotFoundError: If the file is not found
        """
        if path is None:
            env_path = os.environ.get(CATEGORIES_ENV_VAR)
            path = Path(env_path) if env_path else _find_categories_path()
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Categories file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            raw_data = yaml.safe_load(f)

        if not isinstance(raw_data, dict):
            raise CategoryConfigError("Categories file must be a YAML mapping")

        registry = cls.from_dict(raw_data, data_base=data_base)
        registry.path = path
        return registry


def _find_categories_path() -> Path:
    """Find categories.yaml by walking up from the package directory."""
    current = Path(__file__).resolve().parent
    for _ in range(10):  # Max depth
        candidate = current / CATEGORIES_FILENAME
        if candidate.exists():
            return candidate
        if (current / ".git").exists() or (current / "pyproject.toml").exists():
            return candidate
        current = current.parent

    return Path.cwd() / CATEGORIES_FILENAME
