"""In-process device emulators for integration tests."""
