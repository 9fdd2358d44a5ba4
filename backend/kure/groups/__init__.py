"""Community groups: membership, roles and composed read views."""
