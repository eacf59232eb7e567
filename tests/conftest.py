from collections.abc import AsyncGenerator, Callable
from io import BytesIO
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from openpyxl import Workbook

from filament_insights.api.main import app
from filament_insights.core.config import XLSX_MEDIA_TYPE

WorkbookFactory = Callable[..., bytes]

HEADER = [
    "#",
    "Brand",
    "Filament type",
    "Base",
    "Fibers",
    "Tensile (kg)",
    "Layer adhesion (kg)",
    "YouTube Link",
]


def build_workbook(sheets: dict[str, list[list[Any]]]) -> bytes:
    workbook = Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        worksheet = workbook.create_sheet(title=name)
        for row in rows:
            worksheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture()
def make_workbook() -> WorkbookFactory:
    return build_workbook


@pytest.fixture()
def filament_rows() -> list[list[Any]]:
    return [
        ["Filament strength tests"],
        HEADER,
        [1, "Acme", "PLA", "PLA", None, 12.5, 8.25, "https://youtu.be/abc123"],
        [2, "Bolt", "PETG CF", "PETG", "Carbon", 15, 10, "https://evil.example.com/x"],
        [3, "Core", "ABS", "ABS", None, "9.75", 4, None],
        ["New rows below have orange BG"],
        [4, "undefined", "ASA", "ASA", None, 11, 6, None],
    ]


@pytest.fixture()
def filament_workbook_bytes(filament_rows: list[list[Any]]) -> bytes:
    return build_workbook({"Info": [["About"], ["this"], ["file"]], "Filaments": filament_rows})


@pytest.fixture()
def xlsx_media_type() -> str:
    return XLSX_MEDIA_TYPE


@pytest.fixture()
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client
