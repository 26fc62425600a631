import os
import sys
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

BACKEND_DIR = Path(__file__).resolve().parents[1]
os.environ.setdefault("OPENAI_API_KEY", "test-key")
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from fastapi.testclient import TestClient

import storage
from main import app

SALES_CSV = (
    "region,units,price,email\n"
    "North,12,2.5,a@x.io\n"
    "South,7,,b@x.io\n"
    ",3,4,c@x.io\n"
    "North,5,1,d@x.io\n"
)


class BundleApiTestCase(unittest.TestCase):
    def setUp(self):
        storage.BUNDLES.clear()
        storage.CHAT_HISTORY.clear()
        self.client = TestClient(app)

    def upload(self, name="Q3 Sales", content=SALES_CSV, filename="sales.csv", content_type="text/csv"):
        return self.client.post(
            "/bundles",
            data={"name": name},
            files={"file": (filename, content.encode("utf-8"), content_type)},
        )


class BundleCrudTests(BundleApiTestCase):
    def test_upload_list_rename_delete(self):
        resp = self.upload()
        self.assertEqual(resp.status_code, 201)
        bundle = resp.json()
        self.assertEqual(bundle["name"], "Q3 Sales")
        self.assertEqual(bundle["total_rows"], 4)
        self.assertEqual(bundle["columns"], ["region", "units", "price", "email"])

        listed = self.client.get("/bundles").json()["bundles"]
        self.assertEqual([b["id"] for b in listed], [bundle["id"]])

        renamed = self.client.patch(f"/bundles/{bundle['id']}", json={"name": "  Q4 Sales "})
        self.assertEqual(renamed.status_code, 200)
        self.assertEqual(renamed.json()["name"], "Q4 Sales")

        self.assertEqual(self.client.delete(f"/bundles/{bundle['id']}").status_code, 204)
        self.assertEqual(self.client.get(f"/bundles/{bundle['id']}").status_code, 404)

    def test_upload_rejects_invalid_files(self):
        resp = self.upload(filename="sales.txt")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "File must have a .csv extension")

        resp = self.upload(content="a,b\n")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "File appears to be empty or too small")

    def test_upload_and_rename_validate_names(self):
        self.assertEqual(self.upload(name="   ").json()["detail"], "Bundle name is required")

        bundle_id = self.upload().json()["id"]
        resp = self.client.patch(f"/bundles/{bundle_id}", json={"name": 'bad "name"'})
        self.assertEqual(resp.status_code, 400)

    def test_duplicate_headers_report_parsed_columns(self):
        bundle = self.upload(content="a,a,b\n1,2,3\n").json()
        self.assertEqual(bundle["columns"], ["a", "b"])
        self.assertEqual(bundle["total_columns"], 2)

        overview = self.client.get(f"/bundles/{bundle['id']}/overview").json()
        self.assertEqual(overview["summary"]["total_columns"], 2)
        self.assertEqual([c["name"] for c in overview["columns"]], ["a", "b"])

    def test_unknown_bundle_is_404(self):
        self.assertEqual(self.client.get("/bundles/nope/overview").status_code, 404)
        self.assertEqual(self.client.delete("/bundles/nope").status_code, 404)

    def test_capacity_evicts_least_recently_used(self):
        with patch("storage.MAX_BUNDLES", 2):
            first = self.upload(name="first").json()["id"]
            second = self.upload(name="second").json()["id"]
            self.client.get(f"/bundles/{first}")
            self.upload(name="third")

        self.assertIn(first, storage.BUNDLES)
        self.assertNotIn(second, storage.BUNDLES)


class OverviewAndChartTests(BundleApiTestCase):
    def setUp(self):
        super().setUp()
        self.bundle_id = self.upload().json()["id"]

    def test_overview(self):
        body = self.client.get(f"/bundles/{self.bundle_id}/overview").json()

        self.assertEqual(body["summary"]["total_rows"], 4)
        self.assertEqual(body["summary"]["total_missing"], 2)
        self.assertEqual(body["summary"]["missing_percent"], 12.5)
        types = {c["name"]: c["inferred_type"] for c in body["columns"]}
        self.assertEqual(types, {
            "region": "Categorical",
            "units": "Numeric",
            "price": "Numeric",
            "email": "Categorical",
        })
        self.assertEqual(body["preview"][2], {"region": "", "units": "3", "price": "4", "email": "c@x.io"})
        self.assertEqual(body["preview_placeholder"], "—")

    def test_chart_options(self):
        body = self.client.get(f"/bundles/{self.bundle_id}/chart-options").json()
        self.assertEqual(body["numeric_columns"], ["units", "price"])
        self.assertEqual(len(body["chart_types"]), 5)

    def test_pie_chart(self):
        resp = self.client.post(f"/bundles/{self.bundle_id}/chart", json={"chart_type": "pie", "x_column": "region"})
        body = resp.json()
        self.assertFalse(body["empty"])
        self.assertEqual(body["data"], [
            {"name": "North", "value": 2},
            {"name": "South", "value": 1},
            {"name": "Unknown", "value": 1},
        ])

    def test_incomplete_chart_is_empty_not_an_error(self):
        resp = self.client.post(f"/bundles/{self.bundle_id}/chart", json={"chart_type": "scatter", "x_column": "units"})
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["empty"])
        self.assertEqual(resp.json()["message"], "No data to display")


class ChatTests(BundleApiTestCase):
    def setUp(self):
        super().setUp()
        self.bundle_id = self.upload().json()["id"]
        self.llm = MagicMock()
        message = SimpleNamespace(content="North sells the most units.")
        self.llm.chat.completions.create.return_value = SimpleNamespace(choices=[SimpleNamespace(message=message)])

    def test_chat_round_trip_and_history(self):
        with patch("main.get_openai_client", return_value=self.llm):
            resp = self.client.post(f"/bundles/{self.bundle_id}/chat", json={"message": "Who sells most?"})

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"response": "North sells the most units."})
        prompt = self.llm.chat.completions.create.call_args.kwargs["messages"][-1]["content"]
        self.assertIn("[REDACTED]", prompt)
        self.assertNotIn("a@x.io", prompt)

        history = self.client.get(f"/bundles/{self.bundle_id}/chat").json()["messages"]
        self.assertEqual([m["role"] for m in history], ["user", "assistant"])

        self.assertEqual(self.client.delete(f"/bundles/{self.bundle_id}/chat").status_code, 204)
        self.assertEqual(self.client.get(f"/bundles/{self.bundle_id}/chat").json()["messages"], [])

    def test_invalid_message_is_rejected(self):
        resp = self.client.post(f"/bundles/{self.bundle_id}/chat", json={"message": "   "})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Message cannot be empty")

    def test_provider_error_is_502(self):
        self.llm.chat.completions.create.side_effect = RuntimeError("upstream down")
        with patch("main.get_openai_client", return_value=self.llm):
            resp = self.client.post(f"/bundles/{self.bundle_id}/chat", json={"message": "Hi"})

        self.assertEqual(resp.status_code, 502)
        self.assertEqual(resp.json()["detail"], "upstream down")
        self.assertEqual(storage.get_chat_history(self.bundle_id), [])

    def test_missing_api_key_is_500(self):
        with patch.dict(os.environ, {"OPENAI_API_KEY": ""}):
            resp = self.client.post(f"/bundles/{self.bundle_id}/chat", json={"message": "Hi"})
        self.assertEqual(resp.status_code, 500)


if __name__ == "__main__":
    unittest.main()
