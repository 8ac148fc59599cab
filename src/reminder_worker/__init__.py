"""Background worker sending abandoned cart reminders."""
