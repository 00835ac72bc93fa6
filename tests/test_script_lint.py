import unittest

from tas_verify.script_lint import SEVERITY_RANK, lint_script_text


class TestScriptLint(unittest.TestCase):
    def test_clean_script(self) -> None:
        text = "#Start\n   1\n# lvl_1\n  20,R\n   5,R,J\n\n   6,F,45\nRead,1B.tas\n"
        self.assertEqual(lint_script_text(text), [])

    def test_bad_action_line(self) -> None:
        issues = lint_script_text("# a\n10,R,45\n10,?\n")
        self.assertEqual([(i.code, i.severity, i.line) for i in issues], [("TAS001", "error", 2), ("TAS001", "error", 3)])
        self.assertIn("without feather", issues[0].message)

    def test_feather_without_angle(self) -> None:
        issues = lint_script_text("5,F\n")
        self.assertTrue(any(i.code == "TAS002" and i.severity == "warn" for i in issues))

    def test_frame_count_limit(self) -> None:
        issues = lint_script_text("10000,R\n9999,R\n")
        self.assertEqual([(i.code, i.line) for i in issues], [("TAS003", 1)])

    def test_info_for_stale_markers_and_fast_forwards(self) -> None:
        text = "#<FileEnd=1.000> verified at <VerifiedTimestamp=2026-01-01T00:00:00>\n***!\n1,R\n"
        codes = {i.code: i.severity for i in lint_script_text(text)}
        self.assertEqual(codes, {"TAS010": "info", "TAS011": "info"})
        self.assertLess(SEVERITY_RANK["info"], SEVERITY_RANK["warn"])


if __name__ == "__main__":
    unittest.main()
