"""Domain types shared by every resource kind."""
