import json
import unittest
from unittest import mock

from _support import fake_model, png_image

from activity_schema import ActivityKind
from constants import GENERIC_FAILURE_MESSAGE
from errors import ExtractionFailed
from extractor import ExtractionClient
from scanner import ScanService
from session_store import SessionStore

STEPS_RESPONSE = json.dumps(
    {
        "activityType": "Steps",
        "primaryValue": 5432,
        "unit": "steps",
        "summary": "5,432 steps today.",
        "confidence": 0.92,
    }
)


class ScanServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = SessionStore()
        self.image = png_image()

    def _scanner(self, **model_kwargs) -> ScanService:
        return ScanService(self.store, ExtractionClient(model=fake_model(**model_kwargs)))

    def test_successful_scan_becomes_latest_entry(self) -> None:
        entry = self._scanner(response=STEPS_RESPONSE).submit(self.image)

        self.assertIsNotNone(entry)
        self.assertIs(self.store.latest(), entry)
        self.assertIs(entry.result.activity_kind, ActivityKind.STEPS)
        self.assertEqual(entry.result.primary_value, 5432)
        self.assertEqual(entry.result.additional_stats, [])
        self.assertFalse(self.store.busy)
        self.assertIsNone(self.store.last_error)

    def test_network_error_never_completes(self) -> None:
        self._scanner(response=STEPS_RESPONSE).submit(self.image)
        before = self.store.entries()
        scanner = self._scanner(side_effect=ConnectionError("connection reset"))

        with mock.patch.object(self.store, "complete_extraction") as complete:
            entry = scanner.submit(self.image)

        complete.assert_not_called()
        self.assertIsNone(entry)
        self.assertFalse(self.store.busy)
        self.assertIn("connection reset", self.store.last_error)
        self.assertEqual(self.store.entries(), before)

    def test_schema_violation_is_reported(self) -> None:
        self._scanner(response='{"activityType": "Steps"}').submit(self.image)

        self.assertEqual(self.store.count(), 0)
        self.assertIn("missing required field", self.store.last_error)

    def test_invalid_input_is_reported_without_model_call(self) -> None:
        model = fake_model(response=STEPS_RESPONSE)
        scanner = ScanService(self.store, ExtractionClient(model=model))

        self.assertIsNone(scanner.submit("data:image/png;base64,"))

        model.call_model.assert_not_called()
        self.assertFalse(self.store.busy)
        self.assertTrue(self.store.last_error)

    def test_unexpected_error_uses_generic_message(self) -> None:
        client = mock.Mock()
        client.extract.side_effect = KeyError("boom")

        ScanService(self.store, client).submit(self.image)

        self.assertEqual(self.store.last_error, GENERIC_FAILURE_MESSAGE)
        self.assertFalse(self.store.busy)

    def test_submission_while_busy_is_ignored(self) -> None:
        client = mock.Mock()
        self.store.begin_extraction()

        self.assertIsNone(ScanService(self.store, client).submit(self.image))

        client.extract.assert_not_called()
        self.assertTrue(self.store.busy)

    def test_next_attempt_clears_previous_error(self) -> None:
        client = mock.Mock()
        client.extract.side_effect = [ExtractionFailed("bad response"), mock.DEFAULT]
        client.extract.return_value = ExtractionClient(model=fake_model(response=STEPS_RESPONSE)).extract(self.image)
        scanner = ScanService(self.store, client)

        scanner.submit(self.image)
        self.assertEqual(self.store.last_error, "bad response")
        scanner.submit(self.image)

        self.assertIsNone(self.store.last_error)
        self.assertEqual(self.store.count(), 1)


if __name__ == "__main__":
    unittest.main()
