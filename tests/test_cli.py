"""CLI tests for search, history and trending commands."""

import json
from pathlib import Path

import storefront_search.main as main_module
from typer.testing import CliRunner


def _write_catalog(tmp_path: Path) -> Path:
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "p1",
                    "name": "Paracetamol 500mg Tablets",
                    "category": "Pain Relief",
                    "brand": "Calpol",
                    "price": 25,
                },
                {
                    "id": "p2",
                    "name": "Crocin Advance",
                    "description": "Paracetamol 650mg",
                    "category": "Pain Relief",
                    "brand": "Crocin",
                    "price": 30,
                },
            ]
        )
    )
    return path


def test_search_command_prints_ranked_products(tmp_path: Path) -> None:
    catalog = _write_catalog(tmp_path)
    db_path = tmp_path / "state.duckdb"
    runner = CliRunner()

    result = runner.invoke(
        main_module.app,
        ["search", "paracetamol", "--catalog", str(catalog), "--db-path", str(db_path), "--no-ai"],
    )

    assert result.exit_code == 0, result.stdout
    assert "Paracetamol" in result.stdout
    assert "Crocin" in result.stdout
    assert "Confidence:" in result.stdout

    history = runner.invoke(main_module.app, ["history", "--db-path", str(db_path)])
    assert history.exit_code == 0
    assert "paracetamol" in history.stdout


def test_search_command_reports_missing_catalog(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        main_module.app,
        [
            "search",
            "paracetamol",
            "--catalog",
            str(tmp_path / "missing.json"),
            "--db-path",
            str(tmp_path / "state.duckdb"),
            "--no-ai",
        ],
    )

    assert result.exit_code == 0
    assert "Could not load products" in result.stdout


def test_search_command_rejects_unknown_business_type(tmp_path: Path) -> None:
    catalog = _write_catalog(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        main_module.app,
        ["search", "rice", "--catalog", str(catalog), "--business-type", "bakery", "--no-ai"],
    )

    assert result.exit_code != 0


def test_trending_and_clear_history_commands(tmp_path: Path) -> None:
    db_path = str(tmp_path / "state.duckdb")
    runner = CliRunner()

    saved = runner.invoke(main_module.app, ["trending", "vitamins", "zinc", "--db-path", db_path])
    assert saved.exit_code == 0
    assert "vitamins, zinc" in saved.stdout

    history = runner.invoke(main_module.app, ["history", "--db-path", db_path])
    assert "0. vitamins" in history.stdout

    cleared = runner.invoke(main_module.app, ["clear-history", "--db-path", db_path])
    assert cleared.exit_code == 0
    assert "Search history cleared" in cleared.stdout
