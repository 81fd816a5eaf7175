"""Schema definitions shipped with schemagate."""
