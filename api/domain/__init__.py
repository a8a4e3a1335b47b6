"""Domain records, validated input schemas and shared constants."""
