"""Session layer: transcript buffering, tallies, speech log and use cases."""
