"""Tests for run/phase/source logging context."""

import logging
import threading
import unittest

from core.structured_logging import (
    _LogContextFilter,
    copy_log_context,
    get_run_id,
    phase_scope,
    set_run_id,
    source_scope,
)


class TestStructuredLogging(unittest.TestCase):
    def _record(self) -> logging.LogRecord:
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)
        _LogContextFilter().filter(record)
        return record

    def test_set_run_id_generates_value(self) -> None:
        run_id = set_run_id()
        self.assertEqual(len(run_id), 12)
        self.assertEqual(get_run_id(), run_id)
        self.assertEqual(set_run_id("fixed"), "fixed")

    def test_scopes_are_restored(self) -> None:
        with phase_scope("emit"), source_scope("A/B.doc.cs"):
            record = self._record()
            self.assertEqual(record.phase, "emit")
            self.assertEqual(record.source, "A/B.doc.cs")
        record = self._record()
        self.assertEqual(record.phase, "-")
        self.assertEqual(record.source, "-")

    def test_copied_context_reaches_worker_thread(self) -> None:
        seen = {}

        def work() -> None:
            seen["phase"] = self._record().phase

        with phase_scope("emit"):
            thread = threading.Thread(target=copy_log_context().run, args=(work,))
            thread.start()
            thread.join()
        self.assertEqual(seen["phase"], "emit")


if __name__ == "__main__":
    unittest.main()
