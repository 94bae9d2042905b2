"""Hook workshop services: gateway, validation, merge, tournament, session state machine."""
