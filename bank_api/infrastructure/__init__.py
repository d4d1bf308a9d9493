"""Infrastructure: retry policies and the remote transaction API client."""
