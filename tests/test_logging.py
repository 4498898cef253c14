import json
import logging
import unittest

from pharmadesk.core.logging import ContextFormatter, JsonFormatter


def make_record(**extra):
    record = logging.LogRecord(
        "pharmadesk.services.cascade_service",
        logging.INFO,
        __file__,
        1,
        "Purchase item %s deleted",
        (7,),
        None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class LoggingFormatterTest(unittest.TestCase):
    def test_json_includes_context(self):
        payload = json.loads(JsonFormatter().format(make_record(pharmacy_id=1, purchase_item_id=7)))
        self.assertEqual(payload["message"], "Purchase item 7 deleted")
        self.assertEqual(payload["pharmacy_id"], 1)
        self.assertEqual(payload["purchase_item_id"], 7)
        self.assertNotIn("medicine_id", payload)

    def test_plain_text_appends_context(self):
        line = ContextFormatter(fmt="%(message)s").format(make_record(pharmacy_id=3))
        self.assertEqual(line, "Purchase item 7 deleted [pharmacy_id=3]")

    def test_plain_text_without_context(self):
        line = ContextFormatter(fmt="%(message)s").format(make_record())
        self.assertEqual(line, "Purchase item 7 deleted")


if __name__ == "__main__":
    unittest.main()
