"""
Shared report logger for the backend test suite.

Every test records its outcome here; results go to backend_test_report.log
in the project root and to stdout.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path


class ReportLogger:
    """Collects per-test results and writes a summary at the end of the run."""

    def __init__(self, log_file: str = "backend_test_report.log"):
        self.log_file = Path(__file__).parent.parent / log_file
        self.results = []
        self.start_time = datetime.now()

        self.logger = logging.getLogger("BackendTestReport")
        self.logger.setLevel(logging.DEBUG)
        self.logger.handlers = []
        self.logger.propagate = False

        formatter = logging.Formatter(
            '[%(asctime)s] [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        file_handler = logging.FileHandler(self.log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(formatter)

        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)

        self.logger.info("=" * 80)
        self.logger.info("BACKEND TEST REPORT")
        self.logger.info(f"Started: {self.start_time.strftime('%Y-%m-%d %H:%M:%S')}")
        self.logger.info("=" * 80)

    def _record(self, module: str, function: str, test_name: str, result: str, message: str):
        self.results.append({
            'timestamp': datetime.now(),
            'module': module,
            'function': function,
            'test': test_name,
            'result': result,
            'message': message
        })

    def log_section(self, section_name: str):
        self.logger.info("-" * 80)
        self.logger.info(f"  {section_name}")
        self.logger.info("-" * 80)

    def log_test_start(self, module: str, function: str, test_name: str):
        self.logger.debug(f"> Testing: {module} -> {function} -> {test_name}")

    def log_test_pass(self, module: str, function: str, test_name: str, message: str = ""):
        self._record(module, function, test_name, 'PASS', message)
        msg = f"PASS: {module} -> {function} -> {test_name}"
        if message:
            msg += f" | {message}"
        self.logger.info(msg)

    def log_test_fail(self, module: str, function: str, test_name: str, error: str):
        self._record(module, function, test_name, 'FAIL', error)
        self.logger.error(f"FAIL: {module} -> {function} -> {test_name}")
        self.logger.error(f"  Error: {error}")

    def generate_summary(self):
        """Log and return pass/fail totals for the run."""
        duration = datetime.now() - self.start_time
        total = len(self.results)
        passed = sum(1 for r in self.results if r['result'] == 'PASS')
        failed = sum(1 for r in self.results if r['result'] == 'FAIL')
        pass_rate = (passed / total * 100) if total > 0 else 0

        self.logger.info("=" * 80)
        self.logger.info("TEST SUMMARY")
        self.logger.info(f"Total Tests:     {total}")
        self.logger.info(f"Passed:          {passed} ({pass_rate:.1f}%)")
        self.logger.info(f"Failed:          {failed}")
        self.logger.info(f"Duration:        {duration.total_seconds():.2f} seconds")
        self.logger.info("=" * 80)

        for result in self.results:
            if result['result'] == 'FAIL':
                self.logger.info(f"  * {result['module']} -> {result['function']} -> {result['test']}")
                self.logger.info(f"    Error: {result['message']}")

        self.logger.info(f"Full report saved to: {self.log_file.absolute()}")

        return {
            'total': total,
            'passed': passed,
            'failed': failed,
            'pass_rate': pass_rate,
            'duration': duration.total_seconds()
        }


report = ReportLogger()
