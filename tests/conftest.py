from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from portfolio_api.config import Cfg
from portfolio_api.main import create_app


@pytest.fixture
def cfg(tmp_path) -> Cfg:
    return Cfg(data_file=tmp_path / "portfolios.json")


@pytest.fixture
def app(cfg: Cfg):
    return create_app(cfg)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
