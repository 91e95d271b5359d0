"""Track how much a watch gains or loses against a trusted reference clock."""
