import os

import pytest

from trace_waterfall.config import Config


def send_line(
    ts="2024-05-02T09:12:00.000Z",
    conn="c1",
    req=1,
    method="GET",
    uri="https://a.example/x",
    extra="",
) -> str:
    """A matrix-sdk http_client log line for one send event."""
    return (
        f"{ts} DEBUG matrix_sdk::http_client: sending > "
        f'sync_once{{conn_id="{conn}"}} > '
        f'send{{request_id="REQ-{req}" method={method} uri="{uri}"{extra}}}'
    )


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def line():
    return send_line


@pytest.fixture
def write_log(tmp_path):
    """Write lines to a log file under tmp_path and return its path."""
    def _write(lines, name="app.log"):
        path = os.path.join(tmp_path, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write("".join(l + "\n" for l in lines))
        return path
    return _write
