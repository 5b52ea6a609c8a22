# File: tests/coverage_report.py
#!/usr/bin/env python3
"""
Generate test coverage report for the Parking Ledger.
Requires: pip install -e .[test]
"""

import coverage
import sys
from pathlib import Path

TESTS_DIR = Path(__file__).parent
sys.path.insert(0, str(TESTS_DIR))


def generate_coverage_report():
    """Generate test coverage report"""

    # Start coverage
    cov = coverage.Coverage(
        source=['parkledger'],
        omit=['*/tests/*', '*/__pycache__/*']
    )
    cov.start()

    try:
        # Run tests
        from run_tests import run_all_tests
        result = run_all_tests()
    finally:
        # Stop coverage
        cov.stop()
        cov.save()

    # Generate reports
    print("\n" + "=" * 60)
    print("Test Coverage Report")
    print("=" * 60)

    # Console report
    print("\nConsole Report:")
    cov.report(show_missing=True)

    # HTML report
    print("\nGenerating HTML report...")
    cov.html_report(directory='htmlcov')
    print("HTML report generated in 'htmlcov' directory")

    # XML report (for CI/CD)
    print("\nGenerating XML report...")
    cov.xml_report(outfile='coverage.xml')
    print("XML report generated as 'coverage.xml'")

    return result.wasSuccessful()


if __name__ == "__main__":
    sys.exit(0 if generate_coverage_report() else 1)
