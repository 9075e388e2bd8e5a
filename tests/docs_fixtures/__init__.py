"""Sample controllers and data-transfer types used by the test suite."""
