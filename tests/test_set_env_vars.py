import unittest
from unittest.mock import patch
import os
import sys
import tempfile

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import set_env_vars


class TestSetEnvVars(unittest.TestCase):
    def write_env(self, text):
        fd, path = tempfile.mkstemp(suffix=".env")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        self.addCleanup(os.remove, path)
        return path

    @patch.dict(os.environ, {"MONGO_DB": "keep"}, clear=True)
    def test_load(self):
        path = self.write_env(
            "# comment\n"
            "export MONGO_URI='mongodb://localhost'\n"
            "MONGO_DB=replaced\n"
            'STUDY_API_URL="http://localhost:5000/api"\n'
            "not a pair\n"
        )

        set_env_vars.load(path)

        self.assertEqual(os.environ["MONGO_URI"], "mongodb://localhost")
        self.assertEqual(os.environ["MONGO_DB"], "keep")
        self.assertEqual(os.environ["STUDY_API_URL"], "http://localhost:5000/api")

        set_env_vars.load(path, override=True)
        self.assertEqual(os.environ["MONGO_DB"], "replaced")

    @patch.dict(os.environ, {}, clear=True)
    def test_initialize_reports_missing_keys(self):
        path = self.write_env("MONGO_URI=mongodb://localhost\nSTUDY_API_TIMEOUT=10\n")

        status = set_env_vars.initialize_env_vars(path)

        self.assertTrue(status["env_file_found"])
        self.assertEqual(status["missing"], ["MONGO_DB", "FLASK_SECRET_KEY"])
        self.assertTrue(status["optional"]["STUDY_API_TIMEOUT"])
        self.assertFalse(status["optional"]["STUDY_ADMIN_API_URL"])

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_file(self):
        status = set_env_vars.initialize_env_vars("/nonexistent/.env")
        self.assertFalse(status["env_file_found"])
        self.assertEqual(len(status["missing"]), 3)


if __name__ == "__main__":
    unittest.main()
