"""medreview test suite."""
