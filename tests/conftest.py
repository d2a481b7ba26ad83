"""Shared fixtures: an in-memory stand-in for the budget projections API."""

import copy
from pathlib import Path
from typing import Any

import pytest
import requests

from budgetplan import api

EXPORT_TEXT = "Tipo,Categoría,Mes 1,Mes 2\nIngreso,Eventos,1000,0\n"


def matrix_payload(year: int, eventos: float = 0, nomina: float = 0) -> dict[str, Any]:
    return {
        "year": year,
        "incomeCategories": [
            {"categoryId": 1, "categoryName": "Eventos", "categoryColor": "#16a34a", "months": {"1": eventos}},
            {"categoryId": 2, "categoryName": "Concesiones", "months": {}},
        ],
        "expenseCategories": [
            {"categoryId": 3, "categoryName": "Nómina", "months": {"1": nomina}},
        ],
    }


class FakeApi:
    """Records calls and keeps one matrix per year like the real server."""

    def __init__(self) -> None:
        self.matrices: dict[int, dict[str, Any]] = {
            2025: matrix_payload(2025, eventos=500, nomina=200),
            2026: matrix_payload(2026),
        }
        self.fail: set[str] = set()
        self.conflict = False
        self.fetches: list[int] = []
        self.saves: list[dict[str, Any]] = []
        self.uploads: list[tuple[str, int]] = []
        self.downloads: list[int] = []
        self.records_imported = 10
        self.export_text = EXPORT_TEXT

    def fetch_matrix(self, base_url: str, year: int, token: str | None = None) -> dict[str, Any]:
        self.fetches.append(year)
        if "fetch" in self.fail:
            raise requests.ConnectionError("connection refused")
        return copy.deepcopy(self.matrices.get(year, {"year": year}))

    def save_projections(self, base_url, year, projections, token=None, revision=None) -> dict[str, Any]:
        if self.conflict:
            response = requests.Response()
            response.status_code = 409
            raise requests.HTTPError("409 Client Error: Conflict", response=response)
        if "save" in self.fail:
            raise requests.ConnectionError("connection reset")

        records = [p.to_payload() for p in projections]
        self.saves.append({"year": year, "projections": records, "revision": revision})

        payload = self.matrices.setdefault(year, matrix_payload(year))
        for category in payload["incomeCategories"] + payload["expenseCategories"]:
            category["months"] = {
                str(r["month"]): r["projectedAmount"] for r in records if r["categoryId"] == category["categoryId"]
            }
        return {"success": True, "count": len(records)}

    def upload_csv(self, base_url: str, path: Path, year: int, token: str | None = None) -> dict[str, Any]:
        if "import" in self.fail:
            raise requests.HTTPError("400 Client Error: Bad Request")
        self.uploads.append((path.name, year))
        self.matrices[year] = matrix_payload(year, eventos=9000, nomina=3000)
        return {"success": True, "recordsImported": self.records_imported}

    def download_csv(self, base_url: str, year: int, token: str | None = None) -> str:
        if "export" in self.fail:
            raise requests.ConnectionError("connection refused")
        self.downloads.append(year)
        return self.export_text


@pytest.fixture
def fake_api(monkeypatch: pytest.MonkeyPatch) -> FakeApi:
    fake = FakeApi()
    monkeypatch.setattr(api, "fetch_matrix", fake.fetch_matrix)
    monkeypatch.setattr(api, "save_projections", fake.save_projections)
    monkeypatch.setattr(api, "upload_csv", fake.upload_csv)
    monkeypatch.setattr(api, "download_csv", fake.download_csv)
    return fake


@pytest.fixture
def budget_csv(tmp_path: Path) -> Path:
    path = tmp_path / "presupuesto.csv"
    path.write_text(
        "Categoría,Tipo,Enero,Febrero\n"
        "Eventos,Ingreso,9000,0\n"
        "Nómina,Gasto,3000,0\n",
        encoding="utf-8",
    )
    return path
