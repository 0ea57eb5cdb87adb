"""Theme folder discovery for the selector list."""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from themeselector.core.selector import ThemeSelector

_MAX_THEME_DIR_CANDIDATES = 512
_MAX_MANIFEST_BYTES = 256 * 1024
SUB_THEMES_DIR = "sub-themes"
LEGACY_THEMES_DIR = "themes"
PAGE_FILE = "page.html"
PREVIEW_DIR = "preview"
_PREVIEW_SUFFIXES = {".png", ".jpg", ".jpeg", ".webp", ".gif"}


class ManifestError(ValueError):
    """Raised when a manifest or meta file cannot be read."""


@dataclass(frozen=True, slots=True)
class ThemeMeta:
    """Display metadata for a theme or sub-theme card."""

    name: str
    description: str = ""
    version: str = ""
    repository: str = ""
    tags: tuple[str, ...] = ()
    authors: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class SubTheme:
    name: str
    source_dir: Path
    manifest: Mapping[str, Any] | None = None
    error: str = ""


@dataclass(frozen=True, slots=True)
class ThemeEntry:
    """A top-level theme folder."""

    theme_id: str
    meta: ThemeMeta
    source_dir: Path
    sub_themes: tuple[SubTheme, ...] = ()
    preview_paths: tuple[Path, ...] = ()
    error: str = ""
    legacy: bool = False

    @property
    def has_subs(self) -> bool:
        return bool(self.sub_themes)


@dataclass(frozen=True, slots=True)
class ThemePage:
    """A theme's page.html and the selector it describes."""

    path: Path
    selector: ThemeSelector


class ThemeCatalog:
    """Lists theme folders under `<root>/<theme>/[sub-themes/<sub>]`.

    Themes in the older `themes/<name>/manifest.json` layout, next to the
    root, are listed too; a folder of the same name under the root wins.

    Metadata is taken from the first source that parses: manifest.json,
    meta.json, meta.yaml / meta.yml, the first sub-theme's manifest, and
    finally the folder name. Problems are collected in `load_errors`.
    """

    def __init__(self, root: Path, legacy_root: Path | None = None) -> None:
        self._root = Path(root)
        self._legacy_root = Path(legacy_root) if legacy_root is not None else None
        self._themes: dict[str, ThemeEntry] = {}
        self._load_errors: list[str] = []

    @property
    def root(self) -> Path:
        return self._root

    @property
    def legacy_root(self) -> Path:
        if self._legacy_root is not None:
            return self._legacy_root
        return self._root.parent / LEGACY_THEMES_DIR

    def set_root(self, path: Path, legacy_root: Path | None = None) -> None:
        self._root = Path(path)
        self._legacy_root = Path(legacy_root) if legacy_root is not None else None

    def reload(self) -> list[str]:
        self._themes = {}
        self._load_errors = []
        if self.legacy_root.is_dir():
            for theme_dir in self._candidate_dirs(self.legacy_root):
                if not (theme_dir / "manifest.json").exists():
                    continue
                entry = self._load_theme(theme_dir)
                self._themes[entry.theme_id] = replace(entry, legacy=True)
        if not self.root.exists():
            self._load_errors.append(f"Themes folder not found: {self.root}")
            return self.load_errors()
        for theme_dir in self._candidate_dirs(self.root):
            entry = self._load_theme(theme_dir)
            self._themes[entry.theme_id] = entry
        return self.load_errors()

    def find_page(self, selector: ThemeSelector | str) -> ThemePage | None:
        """Locate page.html for a theme or `theme/sub`.

        For a bare theme the legacy folder is tried first, then the theme
        folder, then the page of its only sub-theme.
        """
        selector = ThemeSelector.coerce(selector)
        theme_dir = self.root / selector.theme
        if selector.sub:
            candidates = [(theme_dir / SUB_THEMES_DIR / selector.sub / PAGE_FILE, selector)]
        else:
            candidates = [
                (self.legacy_root / selector.theme / PAGE_FILE, selector),
                (theme_dir / PAGE_FILE, selector),
            ]
            sub_root = theme_dir / SUB_THEMES_DIR
            if sub_root.is_dir():
                subs = [path for path in sub_root.iterdir() if path.is_dir()]
                if len(subs) == 1:
                    only = subs[0]
                    candidates.append((only / PAGE_FILE, ThemeSelector(selector.theme, only.name)))
        for path, page_selector in candidates:
            if path.is_file():
                return ThemePage(path=path, selector=page_selector)
        return None
        for theme_dir in self._candidate_dirs(self.root):
            entry = self._load_theme(theme_dir)
            self._themes[entry.theme_id] = entry
        return self.load_errors()

    def list_themes(self) -> list[ThemeEntry]:
        return sorted(self._themes.values(), key=lambda entry: entry.meta.name.lower())

    def get_theme(self, theme_id: str) -> ThemeEntry | None:
        return self._themes.get(theme_id)

    def list_sub_themes(self, theme_id: str) -> list[SubTheme]:
        entry = self._themes.get(theme_id)
        if entry is None:
            return []
        return list(entry.sub_themes)

    def load_errors(self) -> list[str]:
        return list(self._load_errors)

    def _candidate_dirs(self, root: Path) -> list[Path]:
        try:
            all_dirs = sorted(path for path in root.iterdir() if path.is_dir())
        except OSError as exc:
            self._load_errors.append(f"Failed to list themes in {root}: {exc}")
            return []
        candidates: list[Path] = []
        for path in all_dirs:
            if path.is_symlink():
                self._load_errors.append(f"Skipping symlink theme directory: {path}")
                continue
            candidates.append(path)
        if len(candidates) > _MAX_THEME_DIR_CANDIDATES:
            self._load_errors.append(
                f"Theme directory limit exceeded in {root}; "
                f"only first {_MAX_THEME_DIR_CANDIDATES} folders were scanned."
            )
            candidates = candidates[:_MAX_THEME_DIR_CANDIDATES]
        return candidates

    def _load_theme(self, theme_dir: Path) -> ThemeEntry:
        theme_id = theme_dir.name
        subs = tuple(self._load_subs(theme_dir))
        previews = _preview_paths(theme_dir / PREVIEW_DIR)
        error = ""
        meta: ThemeMeta | None = None

        for loader, filename in (
            (_load_json, "manifest.json"),
            (_load_json, "meta.json"),
            (_load_yaml, "meta.yaml"),
            (_load_yaml, "meta.yml"),
        ):
            path = theme_dir / filename
            if not path.exists():
                continue
            try:
                data = loader(path)
            except ManifestError as exc:
                error = str(exc)
                self._load_errors.append(error)
                continue
            meta = _meta_from(data, fallback=theme_id)
            break

        if meta is None:
            representative = next((sub for sub in subs if sub.manifest is not None), None)
            if representative is not None and representative.manifest is not None:
                meta = _meta_from(representative.manifest, fallback=theme_id)
            else:
                meta = ThemeMeta(name=theme_id)

        return ThemeEntry(
            theme_id=theme_id,
            meta=meta,
            source_dir=theme_dir,
            sub_themes=subs,
            preview_paths=previews,
            error=error,
        )

    def _load_subs(self, theme_dir: Path) -> list[SubTheme]:
        sub_root = theme_dir / SUB_THEMES_DIR
        if not sub_root.is_dir():
            return []
        subs: list[SubTheme] = []
        for sub_dir in self._candidate_dirs(sub_root):
            manifest_path = sub_dir / "manifest.json"
            if not manifest_path.exists():
                subs.append(SubTheme(name=sub_dir.name, source_dir=sub_dir))
                continue
            try:
                manifest = _load_json(manifest_path)
            except ManifestError as exc:
                self._load_errors.append(str(exc))
                subs.append(SubTheme(name=sub_dir.name, source_dir=sub_dir, error=str(exc)))
                continue
            subs.append(SubTheme(name=sub_dir.name, source_dir=sub_dir, manifest=manifest))
        return subs


def _read_text_limited(path: Path) -> str:
    try:
        size = path.stat().st_size
        if size > _MAX_MANIFEST_BYTES:
            raise ManifestError(f"{path} exceeds {_MAX_MANIFEST_BYTES} bytes")
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"Cannot read {path}: {exc}") from exc


def _load_json(path: Path) -> Mapping[str, Any]:
    try:
        data = json.loads(_read_text_limited(path))
    except json.JSONDecodeError as exc:
        raise ManifestError(f"manifest parse error in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(f"Expected JSON object in {path}")
    return data


def _load_yaml(path: Path) -> Mapping[str, Any]:
    try:
        data = yaml.safe_load(_read_text_limited(path))
    except yaml.YAMLError as exc:
        raise ManifestError(f"meta parse error in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(f"Expected mapping in {path}")
    return data


def _meta_from(data: Mapping[str, Any], *, fallback: str) -> ThemeMeta:
    # manifest.json nests metadata under "meta"; meta.json/meta.yaml are flat.
    block = data.get("meta") if isinstance(data.get("meta"), Mapping) else data
    description = (
        block.get("description")
        or block.get("short-description")
        or block.get("long-description")
        or ""
    )
    repository = str(block.get("repository") or "")
    if repository == "Null":
        repository = ""
    tags = block.get("tags")
    authors = block.get("authors")
    if isinstance(authors, Mapping):
        author_names = tuple(str(name) for name in authors)
    elif isinstance(authors, (list, tuple)):
        author_names = tuple(str(name) for name in authors)
    else:
        author_names = ()
    return ThemeMeta(
        name=str(block.get("name") or fallback),
        description=str(description),
        version=str(block.get("version") or ""),
        repository=repository,
        tags=tuple(str(tag) for tag in tags) if isinstance(tags, (list, tuple)) else (),
        authors=author_names,
    )


def _preview_paths(preview_dir: Path) -> tuple[Path, ...]:
    if not preview_dir.is_dir():
        return ()
    return tuple(
        sorted(
            path for path in preview_dir.iterdir()
            if path.is_file() and path.suffix.lower() in _PREVIEW_SUFFIXES
        )
    )
