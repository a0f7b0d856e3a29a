"""Shared test fixtures for guidelint."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from guidelint.rules import build_default_registry

if TYPE_CHECKING:
    from pathlib import Path

    from guidelint.core.registry import RuleRegistry


@pytest.fixture()
def registry() -> RuleRegistry:
    """The frozen default rule catalog."""
    return build_default_registry()


@pytest.fixture()
def tmp_project(tmp_path: Path) -> Path:
    """Create a minimal project with a clean SQL file and a clean Elm module."""
    db_dir = tmp_path / "db"
    db_dir.mkdir()
    (db_dir / "schema.sql").write_text(
        "CREATE TABLE customer (\n"
        "    customer_id integer NOT NULL,\n"
        "    full_name text NULL\n"
        ");\n"
    )
    views_dir = tmp_path / "src" / "Views"
    views_dir.mkdir(parents=True)
    (views_dir / "Home.elm").write_text(
        "module Views.Home exposing (view)\n"
        "\n"
        "view : Model -> Html Msg\n"
        "view model =\n"
        "    text model.title\n"
    )
    return tmp_path
