"""E2E scenario suites for the web application.

Scenarios drive a real browser (Playwright) against the application at
the configured base_url, or call its API directly.

Tests in this package require:
- The application running at base_url (default: http://localhost:3000)
- Playwright browsers installed (playwright install)

Usage:
    pytest tests/e2e/ -v --tb=short
    app-e2e run --suite login

Note:
    Tests are marked with @pytest.mark.e2e and are skipped when the
    application is not reachable.
"""
