"""Pure staffing logic: requirements, request states, roster gauges, follow-ups."""
