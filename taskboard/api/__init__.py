"""HTTP surface of taskboard: REST API, pages and role actions."""
