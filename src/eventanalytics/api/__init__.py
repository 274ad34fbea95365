"""REST surface over the table manager and org-unit distribution service."""
