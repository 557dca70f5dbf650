import json
import os
import re

import pytest

from metricboard.models.errors import RenderError
from metricboard.services.aggregator import Aggregator
from metricboard.services.renderer import ReportRenderer

DATA_BLOCK = re.compile(
    r'<script type="application/json" id="metricboard-data">(.*?)</script>', re.S
)


def embedded_data(document):
    match = DATA_BLOCK.search(document)
    assert match is not None
    return json.loads(match.group(1))


@pytest.fixture
def renderer(store):
    return ReportRenderer(store, Aggregator(), chart_js_url="https://cdn.example/chart.js")


class TestServiceReport:
    def test_document_structure(self, renderer, make_entry):
        log = [make_entry(url="/orders/1", response_time=120)]
        summary = Aggregator().summarize(log)
        doc = renderer.render_service_report("orders", log, summary)

        assert doc.startswith("<!DOCTYPE html>")
        assert "MetricBoard For orders : 1 Requests" in doc
        assert "https://cdn.example/chart.js" in doc
        assert "<td>120 ms</td>" in doc
        assert "0.00 bytes" in doc
        for element_id in ("methodChart", "statusChart", "requestsOverTimeChart",
                           "datePicker", "logFilterStatus", "logFilterMethod",
                           "prevPage", "nextPage", "logsContainer"):
            assert f'id="{element_id}"' in doc

    def test_data_contract(self, renderer, make_entry):
        log = [
            make_entry(url="/orders/1", timestamp="2024-01-15T09:00:00.000Z"),
            make_entry(url="/orders/2", method="POST", timestamp="2024-01-16T10:00:00.000Z"),
        ]
        summary = Aggregator().summarize(log)
        data = embedded_data(renderer.render_service_report("orders", log, summary))

        assert data["service"] == "orders"
        assert data["endpoint"] is None
        assert data["pageSize"] == 10
        assert data["defaultDate"] == "2024-01-16"
        assert data["hourly"][10] == 1
        assert data["summary"]["totalApiCalls"] == 2
        assert data["summary"]["methodCounts"] == {"GET": 1, "POST": 1}
        assert [e["url"] for e in data["entries"]] == ["/orders/1", "/orders/2"]

    def test_script_content_is_escaped(self, renderer, make_entry):
        hostile = "</script><script>alert(1)</script>"
        log = [make_entry(method="POST", payload={"note": hostile})]
        doc = renderer.render_service_report("orders", log, Aggregator().summarize(log))

        assert "<script>alert(1)" not in doc
        assert embedded_data(doc)["entries"][0]["payload"]["note"] == hostile

    def test_lone_surrogate_payload_renders(self, renderer, make_entry):
        log = [make_entry(method="POST", payload={"a": "\ud800"})]
        doc = renderer.render_service_report("orders", log, Aggregator().summarize(log))
        doc.encode("utf-8")
        assert embedded_data(doc)["entries"][0]["payload"] == {"a": "\ud800"}

    def test_service_name_is_html_escaped(self, renderer, make_entry):
        log = [make_entry()]
        doc = renderer.render_service_report("<b>x</b>", log, Aggregator().summarize(log))
        assert "<b>x</b>" not in doc
        assert "&lt;b&gt;x&lt;/b&gt;" in doc

    def test_links_endpoint_reports(self, renderer, make_entry):
        log = [make_entry(url="/api/v1/shop/items/1")]
        doc = renderer.render_service_report("api", log, Aggregator().summarize(log))
        assert 'href="_api_v1_shop_items__report.html"' in doc

    def test_write_service_report(self, renderer, store, make_entry):
        log = [make_entry()]
        path = renderer.write_service_report("orders", log, Aggregator().summarize(log))
        assert path == store.report_path("orders")
        with open(path, encoding="utf-8") as f:
            assert "MetricBoard For orders" in f.read()


class TestEndpointReport:
    def test_scoped_to_prefix_with_own_summary(self, renderer, make_entry):
        log = [
            make_entry(url="/api/v1/shop/items/1", response_time=10),
            make_entry(url="/api/v1/shop/items/2", response_time=30),
            make_entry(url="/api/v1/shop/carts/1", response_time=500),
        ]
        doc = renderer.render_endpoint_report("/api/v1/shop/items/", log, "api")
        data = embedded_data(doc)

        assert "Endpoint Metric Report: /api/v1/shop/items/ - api" in doc
        assert data["endpoint"] == "/api/v1/shop/items/"
        assert len(data["entries"]) == 2
        assert data["summary"]["slowestResponse"] == 30
        assert data["summary"]["medianResponse"] == 20

    def test_no_matching_entries_renders_na(self, renderer, make_entry):
        doc = renderer.render_endpoint_report("/x/y/z/w/", [make_entry()], "orders")
        assert "<td>n/a</td>" in doc
        assert embedded_data(doc)["entries"] == []

    def test_write_endpoint_report(self, renderer, store, make_entry):
        log = [make_entry(url="/api/v1/shop/items/1")]
        path = renderer.write_endpoint_report("/api/v1/shop/items/", log, "api")
        assert path == store.endpoint_report_path("api", "/api/v1/shop/items/")
        assert os.path.isfile(path)


class TestFailures:
    def test_unwritable_location_raises_render_error(self, renderer, store, make_entry):
        log = [make_entry()]
        # a plain file where the service directory should be
        os.makedirs(store.root_dir, exist_ok=True)
        with open(os.path.join(store.root_dir, "orders"), "w") as f:
            f.write("")
        with pytest.raises(RenderError):
            renderer.write_service_report("orders", log, Aggregator().summarize(log))
