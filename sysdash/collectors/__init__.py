"""Host and service collectors."""
