"""Runtime primitives shared by rigctl commands."""
