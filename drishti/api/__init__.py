"""API package for the Drishti workspace server."""
