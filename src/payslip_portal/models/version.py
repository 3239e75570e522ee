SCHEMA_VERSION = "v1"
