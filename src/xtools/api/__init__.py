"""HTTP API exposing the serial core to the web dashboard."""
