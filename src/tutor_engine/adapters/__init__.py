"""UI hosts for the tutor workstation."""
