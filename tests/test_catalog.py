"""Tests for theme folder discovery."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from themeselector.core.catalog import ThemeCatalog
from themeselector.core.selector import ThemeSelector


def _write_json(path: Path, data: dict[str, object]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


@pytest.fixture
def themes_root(tmp_path: Path) -> Path:
    root = tmp_path / "yasb-themes"
    root.mkdir()
    return root


def test_manifest_meta_block(themes_root: Path) -> None:
    _write_json(
        themes_root / "nord" / "manifest.json",
        {"meta": {"name": "Nord", "description": "Arctic", "version": "1.2.0", "tags": ["dark"]}},
    )
    catalog = ThemeCatalog(themes_root)
    assert catalog.reload() == []

    entry = catalog.get_theme("nord")
    assert entry is not None
    assert entry.meta.name == "Nord"
    assert entry.meta.description == "Arctic"
    assert entry.meta.version == "1.2.0"
    assert entry.meta.tags == ("dark",)


def test_meta_json_short_description(themes_root: Path) -> None:
    _write_json(
        themes_root / "gruvbox" / "meta.json",
        {"name": "Gruvbox", "short-description": "Retro", "repository": "Null"},
    )
    catalog = ThemeCatalog(themes_root)
    catalog.reload()
    meta = catalog.get_theme("gruvbox").meta
    assert meta.description == "Retro"
    assert meta.repository == ""


def test_meta_yaml(themes_root: Path) -> None:
    theme_dir = themes_root / "rose-pine"
    theme_dir.mkdir()
    (theme_dir / "meta.yaml").write_text(
        "name: Rose Pine\nlong-description: Soho vibes\nauthors:\n  alice: {}\n  bob: {}\n",
        encoding="utf-8",
    )
    catalog = ThemeCatalog(themes_root)
    catalog.reload()
    meta = catalog.get_theme("rose-pine").meta
    assert meta.name == "Rose Pine"
    assert meta.description == "Soho vibes"
    assert meta.authors == ("alice", "bob")


def test_sub_themes_and_representative_manifest(themes_root: Path) -> None:
    _write_json(themes_root / "nord" / "sub-themes" / "aurora" / "manifest.json", {"meta": {"name": "Nord Aurora"}})
    _write_json(themes_root / "nord" / "sub-themes" / "frost" / "manifest.json", {"meta": {"name": "Nord Frost"}})
    catalog = ThemeCatalog(themes_root)
    catalog.reload()

    entry = catalog.get_theme("nord")
    assert entry.has_subs is True
    assert [sub.name for sub in catalog.list_sub_themes("nord")] == ["aurora", "frost"]
    assert entry.meta.name == "Nord Aurora"


def test_folder_name_fallback(themes_root: Path) -> None:
    (themes_root / "plain").mkdir()
    catalog = ThemeCatalog(themes_root)
    catalog.reload()
    assert catalog.get_theme("plain").meta.name == "plain"
    assert catalog.list_sub_themes("plain") == []


def test_broken_manifest_is_collected(themes_root: Path) -> None:
    broken = themes_root / "broken"
    broken.mkdir()
    (broken / "manifest.json").write_text("{not json", encoding="utf-8")
    catalog = ThemeCatalog(themes_root)
    errors = catalog.reload()

    assert len(errors) == 1
    assert "manifest parse error" in errors[0]
    entry = catalog.get_theme("broken")
    assert entry.error
    assert entry.meta.name == "broken"


def test_broken_sub_manifest(themes_root: Path) -> None:
    sub_dir = themes_root / "nord" / "sub-themes" / "frost"
    sub_dir.mkdir(parents=True)
    (sub_dir / "manifest.json").write_text("[]", encoding="utf-8")
    catalog = ThemeCatalog(themes_root)
    catalog.reload()
    (sub,) = catalog.list_sub_themes("nord")
    assert sub.manifest is None
    assert "Expected JSON object" in sub.error


def test_missing_root(tmp_path: Path) -> None:
    catalog = ThemeCatalog(tmp_path / "missing")
    errors = catalog.reload()
    assert catalog.list_themes() == []
    assert errors and "not found" in errors[0]


def test_list_sorted_by_name(themes_root: Path) -> None:
    _write_json(themes_root / "b" / "meta.json", {"name": "alpha"})
    _write_json(themes_root / "a" / "meta.json", {"name": "Zulu"})
    catalog = ThemeCatalog(themes_root)
    catalog.reload()
    assert [entry.theme_id for entry in catalog.list_themes()] == ["b", "a"]


def test_preview_images(themes_root: Path) -> None:
    preview = themes_root / "nord" / "preview"
    preview.mkdir(parents=True)
    (preview / "2.png").write_bytes(b"")
    (preview / "1.jpg").write_bytes(b"")
    (preview / "notes.txt").write_text("x", encoding="utf-8")
    catalog = ThemeCatalog(themes_root)
    catalog.reload()
    assert [path.name for path in catalog.get_theme("nord").preview_paths] == ["1.jpg", "2.png"]


def test_legacy_themes_listed_next_to_root(themes_root: Path, tmp_path: Path) -> None:
    legacy = tmp_path / "themes"
    _write_json(legacy / "classic" / "manifest.json", {"meta": {"name": "Classic"}})
    (legacy / "no-manifest").mkdir()
    catalog = ThemeCatalog(themes_root)
    catalog.reload()

    assert catalog.legacy_root == legacy
    entry = catalog.get_theme("classic")
    assert entry is not None
    assert entry.legacy is True
    assert entry.meta.name == "Classic"
    assert catalog.get_theme("no-manifest") is None


def test_root_theme_overrides_legacy(themes_root: Path, tmp_path: Path) -> None:
    _write_json(tmp_path / "themes" / "nord" / "manifest.json", {"meta": {"name": "Old Nord"}})
    _write_json(themes_root / "nord" / "manifest.json", {"meta": {"name": "Nord"}})
    catalog = ThemeCatalog(themes_root)
    catalog.reload()
    entry = catalog.get_theme("nord")
    assert entry.meta.name == "Nord"
    assert entry.legacy is False
    assert len(catalog.list_themes()) == 1


def test_explicit_legacy_root(themes_root: Path, tmp_path: Path) -> None:
    other = tmp_path / "old"
    _write_json(other / "classic" / "manifest.json", {"meta": {"name": "Classic"}})
    catalog = ThemeCatalog(themes_root, legacy_root=other)
    catalog.reload()
    assert catalog.get_theme("classic").legacy is True


class TestFindPage:
    def _page(self, folder: Path) -> Path:
        folder.mkdir(parents=True, exist_ok=True)
        page = folder / "page.html"
        page.write_text("<html></html>", encoding="utf-8")
        return page

    def test_sub_theme_page(self, themes_root: Path) -> None:
        page = self._page(themes_root / "nord" / "sub-themes" / "frost")
        found = ThemeCatalog(themes_root).find_page("nord:frost")
        assert found.path == page
        assert found.selector == ThemeSelector("nord", "frost")

    def test_legacy_page_wins_for_bare_theme(self, themes_root: Path, tmp_path: Path) -> None:
        legacy_page = self._page(tmp_path / "themes" / "nord")
        self._page(themes_root / "nord")
        assert ThemeCatalog(themes_root).find_page("nord").path == legacy_page

    def test_theme_folder_page(self, themes_root: Path) -> None:
        page = self._page(themes_root / "nord")
        found = ThemeCatalog(themes_root).find_page(ThemeSelector("nord"))
        assert found.path == page
        assert found.selector == ThemeSelector("nord")

    def test_single_sub_theme_fallback(self, themes_root: Path) -> None:
        page = self._page(themes_root / "nord" / "sub-themes" / "frost")
        found = ThemeCatalog(themes_root).find_page("nord")
        assert found.path == page
        assert str(found.selector) == "nord/frost"

    def test_several_sub_themes_without_theme_page(self, themes_root: Path) -> None:
        self._page(themes_root / "nord" / "sub-themes" / "frost")
        self._page(themes_root / "nord" / "sub-themes" / "aurora")
        assert ThemeCatalog(themes_root).find_page("nord") is None

    def test_missing_sub_theme_page(self, themes_root: Path) -> None:
        (themes_root / "nord" / "sub-themes" / "frost").mkdir(parents=True)
        assert ThemeCatalog(themes_root).find_page("nord/frost") is None
