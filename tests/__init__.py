"""OAK toolkit test suite."""
