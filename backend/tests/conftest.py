import pytest
from fastapi.testclient import TestClient

from auction.config import CALLER_HEADER
from auction.main import create_app
from auction.services.auction import AuctionService
from auction.storage import ItemStore


@pytest.fixture
def store():
    """In-memory item store"""
    return ItemStore()


@pytest.fixture
def service(store):
    return AuctionService(store)


@pytest.fixture
def client(store):
    """HTTP client over an app wired to the in-memory store"""
    return TestClient(create_app(store))


@pytest.fixture
def as_caller():
    def headers(caller):
        return {CALLER_HEADER: caller}

    return headers
