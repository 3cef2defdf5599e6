"""Issue tracker backend with multi-channel notifications."""
