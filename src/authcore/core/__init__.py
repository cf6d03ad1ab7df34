"""Core building blocks shared by every authcore feature."""
