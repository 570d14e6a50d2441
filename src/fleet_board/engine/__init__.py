"""Fleet state engine: status transitions, timers and display derivation."""
