"""medreview web application package."""
