import functools
import http.server
import socketserver
import threading
from collections.abc import Iterator
from pathlib import Path

import pytest

from fluent_page.core.errors import LaunchError
from fluent_page.core.page import Page

pytestmark = pytest.mark.e2e


@pytest.fixture(scope="session")
def web_server() -> Iterator[str]:
    root = Path(__file__).resolve().parent  # tests/, holds fixtures/
    Handler = functools.partial(http.server.SimpleHTTPRequestHandler, directory=str(root))
    httpd = socketserver.TCPServer(("127.0.0.1", 0), Handler)
    port = httpd.server_address[1]
    t = threading.Thread(target=httpd.serve_forever, daemon=True)
    t.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        httpd.shutdown()
        httpd.server_close()


@pytest.fixture()
def browser_page() -> Iterator[Page]:
    try:
        page = Page.new(headless=True)
    except LaunchError as e:
        pytest.skip(f"no browser available: {e}")
    with page:
        yield page


def test_smoke_end_to_end(web_server: str, browser_page: Page, tmp_path: Path) -> None:
    page = browser_page
    page.navigate(f"{web_server}/fixtures/smoke.html")

    assert page.find("title").text() == "Smoke Page"
    assert page.url().endswith("/fixtures/smoke.html")
    assert "<input id=\"q\"" in page.html()

    q = page.find("#q")
    q.send_keys("hello")
    assert q.value() == "hello"
    page.find("#go").click()
    assert page.find("#result").text() == "hello"
    assert page.find_xpath("//p[@id='result']").text() == "hello"

    q.remove_input()
    assert q.get_input_value() == ""
    assert q.attribute("data-role") == "search"
    assert q.attribute("data-missing") == ""

    page.find("select#size option[value='M']").click()
    assert page.find("#picked").text() == "M"

    upload = tmp_path / "resume.txt"
    upload.write_text("cv", encoding="utf-8")
    page.find("#resume").upload_file(str(upload))
    assert page.run_script("[document.getElementById('resume').files[0].name]") == ["resume.txt"]
    assert page.run_script("void 0") == []
