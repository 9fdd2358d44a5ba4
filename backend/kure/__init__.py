"""Community group access control and view aggregation."""
