"""schemagate test suite."""
