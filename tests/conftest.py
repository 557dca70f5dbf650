import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from metricboard.config import MetricboardConfig
from metricboard.main import create_app
from metricboard.models.data_models import MetricEntry
from metricboard.services.pipeline import MetricPipeline
from metricboard.services.storage import MetricStore


@pytest.fixture
def metrics_dir(tmp_path):
    return str(tmp_path / "metrics")


@pytest.fixture
def config(metrics_dir):
    return MetricboardConfig(metrics_dir=metrics_dir)


@pytest.fixture
def store(metrics_dir):
    return MetricStore(metrics_dir)


@pytest.fixture
def pipeline(config):
    pipe = MetricPipeline(config)
    yield pipe
    pipe.close()


@pytest.fixture
def make_entry():
    """Factory for MetricEntry values with overridable fields."""

    def _make(url="/orders/1", method="GET", status_code=200, response_time=10,
              payload=None, timestamp="2024-01-15T10:30:00.000Z", **extra):
        return MetricEntry(
            timestamp=timestamp,
            method=method,
            url=url,
            status_code=status_code,
            response_time=response_time,
            payload=payload,
            **extra,
        )

    return _make


@pytest.fixture
def app(pipeline):
    """Host app with a few demo routes behind the capture middleware."""
    application = create_app(pipeline=pipeline)

    @application.get("/")
    def root():
        return {"status": "ok"}

    @application.get("/orders/{order_id}")
    def get_order(order_id: int):
        return {"id": order_id}

    @application.post("/orders/{order_id}")
    def update_order(order_id: int, body: dict):
        return {"id": order_id, "updated": True}

    @application.get("/users")
    def list_users():
        return [{"id": 1}]

    @application.get("/api/v1/shop/items/{item_id}")
    def get_item(item_id: str):
        return {"item": item_id}

    @application.get("/missing/{thing}")
    def missing(thing: str):
        raise HTTPException(status_code=404, detail="not found")

    @application.get("/boom")
    def boom():
        raise RuntimeError("handler exploded")

    @application.post("/webhooks/{name}")
    def webhook(name: str):
        return {"accepted": name}

    @application.get("/files/{name}")
    def get_file(name: str):
        return {"name": name}

    return application


@pytest.fixture
def client(app):
    return TestClient(app)
