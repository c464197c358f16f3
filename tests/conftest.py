from pathlib import Path

import pytest

from ssi.tracing import set_tracing

# Импорт из унифицированной инфраструктуры
from tests.infrastructure.file_utils import write_site


@pytest.fixture(autouse=True)
def _quiet_tracing(monkeypatch):
    # трассировка из окружения разработчика не должна влиять на тесты
    monkeypatch.delenv("SSI_TRACE", raising=False)
    yield
    set_tracing(False)


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """Минимальный сайт: документ с include, echo и условным блоком."""
    return write_site(tmp_path, {
        "index.shtml": (
            '<!--#include file="parts/header.html" -->\n'
            '<h1><!--#echo var="TITLE" --></h1>\n'
            '<!--#if expr="$USER_NAME" -->Hello, <!--#echo var="USER_NAME" -->'
            '<!--#else -->Hello, guest<!--#endif -->\n'
        ),
        "parts/header.html": (
            '<!--#set var="TITLE" value="Home" -->'
            '[<!--#echo var="DOCUMENT_NAME" -->]'
        ),
        "robots.txt": "User-agent: *\n",
    })
