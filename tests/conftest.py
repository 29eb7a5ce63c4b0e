"""Root pytest configuration for all tests.

This conftest applies to all test types (unit, integration).
"""

import logging

# httpx logs every request at INFO level, which drowns out the sync logs
# when a test fails and pytest prints the captured output.
logging.getLogger("httpx").setLevel(logging.WARNING)
